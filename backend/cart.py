from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId

from errors import InvalidArgument, NotFound

# Quantities are stored as 32-bit ints
MAX_QUANTITY = 2**31 - 1


def check_object_id(value: Any, name: str = "id") -> str:
    """Return ``value`` as a 24-hex id string or raise InvalidArgument."""
    if isinstance(value, ObjectId):
        return str(value)
    if not isinstance(value, str) or not ObjectId.is_valid(value) or len(value) != 24:
        raise InvalidArgument(f"Invalid {name} format")
    return value.lower()


def check_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidArgument("quantity must be an integer")
    if quantity <= 0:
        raise InvalidArgument("quantity must be greater than 0")
    if quantity > MAX_QUANTITY:
        raise InvalidArgument(f"quantity must be at most {MAX_QUANTITY}")
    return quantity


class Cart:
    """Line items of one cart, at most one line per product.

    Quantities are kept in insertion order keyed by product id.
    """

    def __init__(self, id: Optional[str] = None, created_at: Optional[datetime] = None,
                 updated_at: Optional[datetime] = None):
        self.id = id
        self.created_at = created_at or datetime.now(timezone.utc)
        self.updated_at = updated_at or self.created_at
        self._items: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, product_id: str) -> bool:
        return product_id in self._items

    def quantity_of(self, product_id: str) -> int:
        return self._items.get(product_id, 0)

    @property
    def items(self) -> list[dict[str, Any]]:
        return [{"product_id": pid, "quantity": qty} for pid, qty in self._items.items()]

    def add_item(self, product_id: str, quantity: int = 1) -> "Cart":
        product_id = check_object_id(product_id, "product id")
        quantity = check_quantity(quantity)
        total = self._items.get(product_id, 0) + quantity
        if total > MAX_QUANTITY:
            raise InvalidArgument(f"quantity must be at most {MAX_QUANTITY}")
        self._items[product_id] = total
        return self

    def remove_item(self, product_id: str) -> "Cart":
        product_id = check_object_id(product_id, "product id")
        self._items.pop(product_id, None)
        return self

    def update_quantity(self, product_id: str, quantity: int) -> "Cart":
        product_id = check_object_id(product_id, "product id")
        quantity = check_quantity(quantity)
        if product_id not in self._items:
            raise NotFound("Item not found in cart")
        self._items[product_id] = quantity
        return self

    def to_summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "items": self.items,
            "lineCount": len(self._items),
            "totalQuantity": sum(self._items.values()),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "items": self.items,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.id is not None:
            doc["_id"] = ObjectId(self.id)
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Cart":
        cart_id = doc.get("_id", doc.get("id"))
        cart = cls(
            id=str(cart_id) if cart_id is not None else None,
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )
        # Stray duplicate lines are merged on load
        for item in doc.get("items") or []:
            cart.add_item(str(item["product_id"]), item.get("quantity", 1))
        return cart
