"""Catalog and cart operations.

Plain async functions over the stores. Identifiers and arguments are validated
here before any store access; results are plain dicts for the HTTP layer.
"""
from __future__ import annotations
import logging
from typing import Any, Optional

from cart import Cart, check_object_id, check_quantity
from errors import NotFound
from pagination import PageRequest, paginate, resolve_sort
from query import build_filter
from stores import CartStore, ProductStore

logger = logging.getLogger(__name__)

# Product fields shown on cart lines
PRODUCT_FIELDS = ("id", "name", "brand", "price", "image")


# Catalog

async def list_products(
    products: ProductStore,
    page: Any = None,
    limit: Any = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    brand: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Any = None,
    max_price: Any = None,
    search: Optional[str] = None,
) -> dict[str, Any]:
    filt = build_filter(brand=brand, category=category, min_price=min_price, max_price=max_price, search=search)
    request = PageRequest.parse(page, limit)
    sort = resolve_sort(sort_by, sort_order)
    items = await products.find(filt, sort, request.offset, request.limit)
    total = await products.count(filt)
    return paginate(items, total, request)


async def get_product(products: ProductStore, product_id: str) -> dict[str, Any]:
    product_id = check_object_id(product_id, "product id")
    product = await products.get(product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


async def create_product(products: ProductStore, data: dict[str, Any]) -> dict[str, Any]:
    product = await products.insert(data)
    logger.info("Created product %s", product["id"])
    return product


async def update_product(products: ProductStore, product_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    product_id = check_object_id(product_id, "product id")
    if not fields:
        return await get_product(products, product_id)
    product = await products.update(product_id, fields)
    if product is None:
        raise NotFound("Product not found")
    return product


async def delete_product(products: ProductStore, product_id: str) -> dict[str, Any]:
    product_id = check_object_id(product_id, "product id")
    product = await products.delete(product_id)
    if product is None:
        raise NotFound("Product not found")
    logger.info("Deleted product %s", product_id)
    return product


async def list_brands(products: ProductStore) -> list[str]:
    return await products.distinct_brands()


async def product_stats(products: ProductStore) -> dict[str, Any]:
    return await products.stats()


# Carts

def _summary(doc: dict[str, Any]) -> dict[str, Any]:
    return Cart.from_document(doc).to_summary()


async def create_cart(carts: CartStore, items: Optional[list[dict[str, Any]]] = None) -> dict[str, Any]:
    cart = Cart()
    for item in items or []:
        cart.add_item(item.get("product_id"), item.get("quantity", 1))
    doc = await carts.insert(cart.to_document())
    logger.info("Created cart %s with %d lines", doc["_id"], len(cart))
    return _summary(doc)


async def get_cart(carts: CartStore, cart_id: str, products: Optional[ProductStore] = None) -> dict[str, Any]:
    """Cart summary. With a product store, each line also carries the product
    it references, or None when that product no longer exists."""
    cart_id = check_object_id(cart_id, "cart id")
    doc = await carts.get(cart_id)
    if doc is None:
        raise NotFound("Cart not found")
    summary = _summary(doc)
    if products is not None:
        found = await products.get_many([item["product_id"] for item in summary["items"]])
        for item in summary["items"]:
            product = found.get(item["product_id"])
            item["product"] = {key: product.get(key) for key in PRODUCT_FIELDS} if product else None
    return summary


async def add_item_to_cart(carts: CartStore, cart_id: str, product_id: str, quantity: Any = 1) -> dict[str, Any]:
    cart_id = check_object_id(cart_id, "cart id")
    product_id = check_object_id(product_id, "product id")
    quantity = check_quantity(1 if quantity is None else quantity)
    doc = await carts.add_item(cart_id, product_id, quantity)
    logger.debug("Added %d x %s to cart %s", quantity, product_id, cart_id)
    return _summary(doc)


async def update_item_quantity(carts: CartStore, cart_id: str, product_id: str, quantity: Any) -> dict[str, Any]:
    cart_id = check_object_id(cart_id, "cart id")
    product_id = check_object_id(product_id, "product id")
    quantity = check_quantity(quantity)
    doc = await carts.set_quantity(cart_id, product_id, quantity)
    return _summary(doc)


async def remove_item_from_cart(carts: CartStore, cart_id: str, product_id: str) -> dict[str, Any]:
    cart_id = check_object_id(cart_id, "cart id")
    product_id = check_object_id(product_id, "product id")
    doc = await carts.remove_item(cart_id, product_id)
    return _summary(doc)


async def delete_cart(carts: CartStore, cart_id: str) -> None:
    cart_id = check_object_id(cart_id, "cart id")
    if not await carts.delete(cart_id):
        raise NotFound("Cart not found")
    logger.info("Deleted cart %s", cart_id)
