from __future__ import annotations
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import ConnectionFailure, ExecutionTimeout, PyMongoError, WTimeoutError

from cart import MAX_QUANTITY
from database import CARTS, PRODUCTS, Database
from errors import Conflict, InvalidArgument, NotFound, StoreUnavailable

logger = logging.getLogger(__name__)

# Attempts at the $inc / $push pair before giving up on a contended cart
ADD_ITEM_ATTEMPTS = 3


def _now() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Translate driver failures into StoreUnavailable. Nothing is retried."""
    try:
        yield
    except (ConnectionFailure, ExecutionTimeout, WTimeoutError) as e:
        logger.error("%s failed, store unavailable: %s", operation, e)
        raise StoreUnavailable(f"Database unavailable during {operation}") from e
    except PyMongoError as e:
        logger.error("%s failed: %s", operation, e)
        raise StoreUnavailable(f"Database error during {operation}: {e}") from e


def to_client(doc: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


class ProductStore:
    def __init__(self, database: Database):
        self.col = database.collection(PRODUCTS)

    async def find(self, filt: dict[str, Any], sort: list[tuple[str, int]], skip: int, limit: int) -> list[dict[str, Any]]:
        with store_errors("product find"):
            cursor = self.col.find(filt, sort=sort, skip=skip, limit=limit)
            return [to_client(d) async for d in cursor]

    async def count(self, filt: dict[str, Any]) -> int:
        with store_errors("product count"):
            return await self.col.count_documents(filt)

    async def get(self, product_id: str) -> Optional[dict[str, Any]]:
        with store_errors("product get"):
            return to_client(await self.col.find_one({"_id": ObjectId(product_id)}))

    async def get_many(self, product_ids: list[str]) -> dict[str, dict[str, Any]]:
        """Products keyed by id. Ids with no product are left out."""
        if not product_ids:
            return {}
        with store_errors("product get"):
            cursor = self.col.find({"_id": {"$in": [ObjectId(pid) for pid in product_ids]}})
            docs = [to_client(d) async for d in cursor]
        return {d["id"]: d for d in docs}

    async def insert(self, data: dict[str, Any]) -> dict[str, Any]:
        now = _now()
        doc = {**data, "created_at": now, "updated_at": now}
        with store_errors("product insert"):
            result = await self.col.insert_one(doc)
        doc["_id"] = result.inserted_id
        return to_client(doc)

    async def insert_many(self, docs: list[dict[str, Any]]) -> int:
        now = _now()
        with store_errors("product insert"):
            result = await self.col.insert_many([{**d, "created_at": now, "updated_at": now} for d in docs])
        return len(result.inserted_ids)

    async def update(self, product_id: str, fields: dict[str, Any]) -> Optional[dict[str, Any]]:
        with store_errors("product update"):
            doc = await self.col.find_one_and_update(
                {"_id": ObjectId(product_id)},
                {"$set": {**fields, "updated_at": _now()}},
                return_document=ReturnDocument.AFTER,
            )
        return to_client(doc)

    async def delete(self, product_id: str) -> Optional[dict[str, Any]]:
        with store_errors("product delete"):
            return to_client(await self.col.find_one_and_delete({"_id": ObjectId(product_id)}))

    async def distinct_brands(self) -> list[str]:
        with store_errors("brand listing"):
            brands = await self.col.distinct("brand")
        return sorted(b for b in brands if b)

    async def stats(self) -> dict[str, Any]:
        pipeline = [
            {
                "$group": {
                    "_id": None,
                    "totalProducts": {"$sum": 1},
                    "avgPrice": {"$avg": "$price"},
                    "minPrice": {"$min": "$price"},
                    "maxPrice": {"$max": "$price"},
                    "brands": {"$addToSet": "$brand"},
                }
            }
        ]
        with store_errors("product stats"):
            rows = [row async for row in self.col.aggregate(pipeline)]
        if not rows:
            return {"totalProducts": 0, "avgPrice": None, "minPrice": None, "maxPrice": None, "brands": []}
        row = rows[0]
        row.pop("_id", None)
        row["brands"] = sorted(b for b in row.get("brands", []) if b)
        return row


class CartStore:
    """Cart documents. Every item mutation is a single atomic update."""

    def __init__(self, database: Database):
        self.col = database.collection(CARTS)

    async def get(self, cart_id: str) -> Optional[dict[str, Any]]:
        with store_errors("cart get"):
            return await self.col.find_one({"_id": ObjectId(cart_id)})

    async def exists(self, cart_id: str) -> bool:
        with store_errors("cart get"):
            return await self.col.count_documents({"_id": ObjectId(cart_id)}, limit=1) > 0

    async def insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        doc = dict(doc)
        with store_errors("cart insert"):
            result = await self.col.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def _update(self, filt: dict[str, Any], update: dict[str, Any]) -> Optional[dict[str, Any]]:
        update.setdefault("$set", {})["updated_at"] = _now()
        return await self.col.find_one_and_update(filt, update, return_document=ReturnDocument.AFTER)

    async def add_item(self, cart_id: str, product_id: str, quantity: int) -> dict[str, Any]:
        """Increment the product's line, or push a new one if it has none.

        The push is guarded by "no line for this product yet", so two writers
        racing on the same product cannot create a duplicate line. A writer
        that loses the race simply retries the increment. The increment only
        applies while the merged quantity stays within MAX_QUANTITY.
        """
        oid = ObjectId(cart_id)
        with store_errors("cart add item"):
            for attempt in range(ADD_ITEM_ATTEMPTS):
                doc = await self._update(
                    {"_id": oid, "items": {"$elemMatch": {"product_id": product_id, "quantity": {"$lte": MAX_QUANTITY - quantity}}}},
                    {"$inc": {"items.$.quantity": quantity}},
                )
                if doc is not None:
                    return doc
                doc = await self._update(
                    {"_id": oid, "items.product_id": {"$ne": product_id}},
                    {"$push": {"items": {"product_id": product_id, "quantity": quantity}}},
                )
                if doc is not None:
                    return doc
                current = await self.col.find_one({"_id": oid})
                if current is None:
                    raise NotFound("Cart not found")
                if any(i.get("product_id") == product_id and i.get("quantity", 0) > MAX_QUANTITY - quantity
                       for i in current.get("items", [])):
                    raise InvalidArgument(f"quantity must be at most {MAX_QUANTITY}")
                logger.info("Cart %s changed under add_item, retrying (attempt %d)", cart_id, attempt + 1)
        raise Conflict("Cart was modified concurrently, try again")

    async def set_quantity(self, cart_id: str, product_id: str, quantity: int) -> dict[str, Any]:
        oid = ObjectId(cart_id)
        with store_errors("cart update quantity"):
            doc = await self._update(
                {"_id": oid, "items.product_id": product_id},
                {"$set": {"items.$.quantity": quantity}},
            )
            if doc is None:
                if not await self.exists(cart_id):
                    raise NotFound("Cart not found")
                raise NotFound("Item not found in cart")
        return doc

    async def remove_item(self, cart_id: str, product_id: str) -> dict[str, Any]:
        """Pull the product's line. A cart without that line is returned as is."""
        oid = ObjectId(cart_id)
        with store_errors("cart remove item"):
            doc = await self._update(
                {"_id": oid, "items.product_id": product_id},
                {"$pull": {"items": {"product_id": product_id}}},
            )
            if doc is None:
                doc = await self.col.find_one({"_id": oid})
        if doc is None:
            raise NotFound("Cart not found")
        return doc

    async def delete(self, cart_id: str) -> bool:
        with store_errors("cart delete"):
            result = await self.col.delete_one({"_id": ObjectId(cart_id)})
        return result.deleted_count > 0
