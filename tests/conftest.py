"""Pytest configuration and fixtures"""
import os

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

os.environ.setdefault("DATABASE_NAME", "furniture_store_test")

from database import Database  # noqa: E402
from main import create_app  # noqa: E402
from stores import CartStore, ProductStore  # noqa: E402


@pytest.fixture
def database():
    """In-memory Mongo handle, fresh per test"""
    return Database(name="furniture_store_test", client=AsyncMongoMockClient())


@pytest.fixture
def product_store(database):
    return ProductStore(database)


@pytest.fixture
def cart_store(database):
    return CartStore(database)


@pytest.fixture
def client(database):
    """Test client bound to the in-memory database"""
    with TestClient(create_app(database=database)) as c:
        yield c


@pytest.fixture
def sample_products():
    return [
        {"name": "Modular Sofa", "description": "Three-piece sofa in grey linen", "price": 1200.0, "brand": "Luxora", "stock": 5, "category": "living-room"},
        {"name": "Wingback Chair", "description": "Pairs well with any Sofa", "price": 450.0, "brand": "Craftwood", "stock": 12, "category": "living-room"},
        {"name": "Standing Desk", "description": "Height adjustable", "price": 550.0, "brand": "DesignDen", "stock": 20, "category": "office"},
        {"name": "Drafting Chair", "description": "Tall chair for counters", "price": 180.0, "brand": "DesignDen", "stock": 0, "category": "office"},
        {"name": "Canopy Bed", "description": "Queen size four-poster", "price": 999.99, "brand": "HomeHaven", "stock": 3, "category": "bedroom"},
    ]


@pytest.fixture
def seeded_client(client, sample_products):
    for p in sample_products:
        response = client.post("/api/products", json=p)
        assert response.status_code == 201
    return client
