from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

# Request bodies and response shapes for the HTTP layer


class Product(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    price: float = Field(ge=0)
    brand: str = Field(min_length=1)
    stock: int = Field(ge=0, default=0)
    category: Optional[str] = None
    image: Optional[str] = None


class ProductUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    brand: Optional[str] = Field(default=None, min_length=1)
    stock: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = None
    image: Optional[str] = None


class ProductOut(Product):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalItems: int
    itemsPerPage: int


class ProductPage(BaseModel):
    products: list[ProductOut]
    pagination: Pagination


class ProductStats(BaseModel):
    totalProducts: int = 0
    avgPrice: Optional[float] = None
    minPrice: Optional[float] = None
    maxPrice: Optional[float] = None
    brands: list[str] = []


class CartItem(BaseModel):
    product_id: str
    quantity: int = 1


class CartItemRef(BaseModel):
    product_id: str


class CartItemQuantity(BaseModel):
    product_id: str
    quantity: int


class CartProduct(BaseModel):
    id: str
    name: Optional[str] = None
    brand: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None


class CartLine(CartItem):
    product: Optional[CartProduct] = None


class CartCreate(BaseModel):
    items: list[CartItem] = []


class CartOut(BaseModel):
    id: str
    items: list[CartItem]
    lineCount: int
    totalQuantity: int
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class CartDetailOut(CartOut):
    items: list[CartLine]


class SeedResponse(BaseModel):
    inserted: int
