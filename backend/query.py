from __future__ import annotations
import math
import re
from typing import Any, Optional

from errors import InvalidArgument

# Fields matched by the free-text search
SEARCH_FIELDS = ("name", "description", "brand")


def _text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _contains(value: str) -> dict[str, str]:
    return {"$regex": re.escape(value), "$options": "i"}


def parse_price(value: Any, name: str) -> Optional[float]:
    """Return a price bound as a float, or None when the bound is absent.

    Blank strings count as absent. Anything else that is not a finite number
    is rejected.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    if isinstance(value, bool):
        raise InvalidArgument(f"{name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"{name} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise InvalidArgument(f"{name} must be a finite number")
    return number


def build_filter(
    brand: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Any = None,
    max_price: Any = None,
    search: Optional[str] = None,
) -> dict[str, Any]:
    """Translate optional catalog filters into a Mongo filter document.

    Every supplied filter becomes one clause and the clauses are ANDed by
    Mongo's implicit top-level conjunction. Omitted filters add nothing.
    """
    low = parse_price(min_price, "minPrice")
    high = parse_price(max_price, "maxPrice")
    brand = _text(brand)
    category = _text(category)
    search = _text(search)

    filt: dict[str, Any] = {}
    if brand:
        filt["brand"] = _contains(brand)
    if category:
        filt["category"] = category
    if low is not None or high is not None:
        filt["price"] = {}
        if low is not None:
            filt["price"]["$gte"] = low
        if high is not None:
            filt["price"]["$lte"] = high
    if search:
        filt["$or"] = [{field: _contains(search)} for field in SEARCH_FIELDS]
    return filt
