from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import services
from database import Database, settings
from errors import StoreError
from schemas import (
    CartCreate,
    CartDetailOut,
    CartItem,
    CartItemQuantity,
    CartItemRef,
    CartOut,
    Product,
    ProductOut,
    ProductPage,
    ProductStats,
    ProductUpdate,
    SeedResponse,
)
from stores import CartStore, ProductStore

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)

# Seed data: a starter furniture catalog
SEED_PRODUCTS: list[dict] = [
    {"name": "Velvet Sectional", "brand": "Luxora", "category": "living-room", "price": 1899.0, "stock": 12, "description": "Deep-seat sectional sofa in emerald velvet.", "image": "https://images.unsplash.com/photo-1555041469-a586c61ea9bc?w=400&h=300&fit=crop"},
    {"name": "Marble Coffee Table", "brand": "Modernique", "category": "living-room", "price": 649.0, "stock": 20, "description": "Round white marble top on a brass base.", "image": "https://images.unsplash.com/photo-1586023492125-27b2c045efd7?w=400&h=300&fit=crop"},
    {"name": "Ergonomic Desk Chair", "brand": "ComfortZone", "category": "office", "price": 329.0, "stock": 45, "description": "Mesh back with adjustable lumbar support.", "image": "https://images.unsplash.com/photo-1549497538-303791108f95?w=400&h=300&fit=crop"},
    {"name": "Platform Bed", "brand": "Craftwood", "category": "bedroom", "price": 899.0, "stock": 8, "description": "Solid oak queen bed frame, low profile.", "image": "https://images.unsplash.com/photo-1505693416388-ac5ce068fe85?w=400&h=300&fit=crop"},
    {"name": "Round Dining Table", "brand": "Elegance Home", "category": "dining", "price": 749.0, "stock": 15, "description": "Seats four, walnut veneer.", "image": "https://images.unsplash.com/photo-1506439773649-6e0eb8cfb237?w=400&h=300&fit=crop"},
    {"name": "Leather Recliner", "brand": "ComfortZone", "category": "living-room", "price": 1099.0, "stock": 10, "description": "Top-grain leather with a power footrest.", "image": "https://images.unsplash.com/photo-1493663284031-b7e3aab21924?w=400&h=300&fit=crop"},
    {"name": "Corner Bookshelf", "brand": "UrbanLiving", "category": "storage", "price": 189.0, "stock": 30, "description": "Five-tier shelf that tucks into any corner.", "image": "https://images.unsplash.com/photo-1567538096630-e0c55bd6374c?w=400&h=300&fit=crop"},
    {"name": "Standing Desk", "brand": "DesignDen", "category": "office", "price": 549.0, "stock": 25, "description": "Dual-motor sit/stand desk with memory presets.", "image": "https://images.unsplash.com/photo-1506439773649-6e0eb8cfb237?w=400&h=300&fit=crop"},
    {"name": "Storage Ottoman", "brand": "CozyCorner", "category": "storage", "price": 129.0, "stock": 40, "description": "Tufted ottoman that doubles as a sofa-side blanket chest.", "image": "https://images.unsplash.com/photo-1493663284031-b7e3aab21924?w=400&h=300&fit=crop"},
    {"name": "Floating Nightstand", "brand": "HomeHaven", "category": "bedroom", "price": 159.0, "stock": 35, "description": "Wall-mounted nightstand with one drawer.", "image": "https://images.unsplash.com/photo-1505693416388-ac5ce068fe85?w=400&h=300&fit=crop"},
]


def get_product_store(request: Request) -> ProductStore:
    return ProductStore(request.app.state.database)


def get_cart_store(request: Request) -> CartStore:
    return CartStore(request.app.state.database)


def create_app(database: Optional[Database] = None) -> FastAPI:
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = database is None
        app.state.database = database or Database()
        try:
            yield
        finally:
            if owned:
                app.state.database.close()

    app = FastAPI(title="Furniture Store API", lifespan=lifespan)

    # Allow all origins for dev preview
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.get("/")
    async def root():
        return {"message": "Furniture Store Backend Running"}

    @app.get("/test")
    async def test(request: Request):
        database: Database = request.app.state.database
        ready = await database.is_ready()
        return {
            "backend": "Running",
            "database": "Connected" if ready else "Not Connected",
            "database_name": database.name,
        }

    @app.post("/seed", response_model=SeedResponse)
    async def seed_products(products: ProductStore = Depends(get_product_store)):
        # Insert only if products collection is empty
        if await products.count({}) > 0:
            return SeedResponse(inserted=0)
        inserted = await products.insert_many([Product(**p).model_dump() for p in SEED_PRODUCTS])
        logger.info("Seeded %d products", inserted)
        return SeedResponse(inserted=inserted)

    # Products

    @app.get("/api/products", response_model=ProductPage)
    async def list_products(
        page: Optional[str] = Query(None),
        limit: Optional[str] = Query(None),
        sortBy: Optional[str] = Query(None),
        sortOrder: Optional[str] = Query(None),
        brand: Optional[str] = Query(None),
        category: Optional[str] = Query(None),
        minPrice: Optional[str] = Query(None),
        maxPrice: Optional[str] = Query(None),
        search: Optional[str] = Query(None),
        products: ProductStore = Depends(get_product_store),
    ):
        result = await services.list_products(
            products,
            page=page,
            limit=limit,
            sort_by=sortBy,
            sort_order=sortOrder,
            brand=brand,
            category=category,
            min_price=minPrice,
            max_price=maxPrice,
            search=search,
        )
        return {"products": result.pop("items"), "pagination": result}

    @app.get("/api/products/brands", response_model=list[str])
    async def list_brands(products: ProductStore = Depends(get_product_store)):
        return await services.list_brands(products)

    @app.get("/api/products/stats", response_model=ProductStats)
    async def product_stats(products: ProductStore = Depends(get_product_store)):
        return await services.product_stats(products)

    @app.get("/api/products/{product_id}", response_model=ProductOut)
    async def get_product(product_id: str, products: ProductStore = Depends(get_product_store)):
        return await services.get_product(products, product_id)

    @app.post("/api/products", response_model=ProductOut, status_code=201)
    async def create_product(payload: Product, products: ProductStore = Depends(get_product_store)):
        return await services.create_product(products, payload.model_dump())

    @app.put("/api/products/{product_id}", response_model=ProductOut)
    async def update_product(product_id: str, patch: ProductUpdate, products: ProductStore = Depends(get_product_store)):
        fields = patch.model_dump(exclude_unset=True, exclude_none=True)
        return await services.update_product(products, product_id, fields)

    @app.delete("/api/products/{product_id}")
    async def delete_product(product_id: str, products: ProductStore = Depends(get_product_store)):
        product = await services.delete_product(products, product_id)
        return {"message": "Product deleted", "product": ProductOut(**product)}

    # Carts

    @app.get("/api/carts/{cart_id}", response_model=CartDetailOut)
    async def get_cart(
        cart_id: str,
        carts: CartStore = Depends(get_cart_store),
        products: ProductStore = Depends(get_product_store),
    ):
        return await services.get_cart(carts, cart_id, products=products)

    @app.post("/api/carts", response_model=CartOut, status_code=201)
    async def create_cart(payload: Optional[CartCreate] = None, carts: CartStore = Depends(get_cart_store)):
        items = payload.items if payload else []
        return await services.create_cart(carts, [item.model_dump() for item in items])

    @app.post("/api/carts/{cart_id}/items", response_model=CartOut)
    async def add_item_to_cart(cart_id: str, item: CartItem, carts: CartStore = Depends(get_cart_store)):
        return await services.add_item_to_cart(carts, cart_id, item.product_id, item.quantity)

    @app.put("/api/carts/{cart_id}/items", response_model=CartOut)
    async def update_item_quantity(cart_id: str, item: CartItemQuantity, carts: CartStore = Depends(get_cart_store)):
        return await services.update_item_quantity(carts, cart_id, item.product_id, item.quantity)

    @app.delete("/api/carts/{cart_id}/items", response_model=CartOut)
    async def remove_item_from_cart(cart_id: str, item: CartItemRef, carts: CartStore = Depends(get_cart_store)):
        return await services.remove_item_from_cart(carts, cart_id, item.product_id)

    @app.delete("/api/carts/{cart_id}")
    async def delete_cart(cart_id: str, carts: CartStore = Depends(get_cart_store)):
        await services.delete_cart(carts, cart_id)
        return {"message": "Cart deleted"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
