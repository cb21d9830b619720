from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Any, Optional

from errors import InvalidArgument

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 12
MAX_LIMIT = 100
# Largest skip the server accepts (signed 64-bit)
MAX_OFFSET = 2**63 - 1

DEFAULT_SORT_FIELD = "name"
# Public sort keys mapped to stored field names
SORT_FIELDS = {
    "name": "name",
    "price": "price",
    "brand": "brand",
    "stock": "stock",
    "createdAt": "created_at",
}


def _as_int(value: Any, name: str, default: int) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        raise InvalidArgument(f"{name} must be an integer")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def parse(cls, page: Any = None, limit: Any = None) -> "PageRequest":
        """Validate raw page/limit values. Out-of-range values are rejected."""
        page = _as_int(page, "page", DEFAULT_PAGE)
        limit = _as_int(limit, "limit", DEFAULT_LIMIT)
        if page < 1:
            raise InvalidArgument("page must be >= 1")
        if not 1 <= limit <= MAX_LIMIT:
            raise InvalidArgument(f"limit must be between 1 and {MAX_LIMIT}")
        if (page - 1) * limit > MAX_OFFSET:
            raise InvalidArgument("page is too large")
        return cls(page=page, limit=limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def total_pages(total: int, limit: int) -> int:
    # An empty result still has one (empty) page
    return max(1, math.ceil(total / limit))


def resolve_sort(sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> list[tuple[str, int]]:
    """Return a Mongo sort spec. Unknown keys sort by name; ``_id`` breaks ties
    so consecutive pages never overlap."""
    field = SORT_FIELDS.get((sort_by or "").strip(), DEFAULT_SORT_FIELD)
    direction = -1 if (sort_order or "").strip().lower() == "desc" else 1
    return [(field, direction), ("_id", direction)]


def paginate(items: list[Any], total: int, request: PageRequest) -> dict[str, Any]:
    return {
        "items": items,
        "currentPage": request.page,
        "totalPages": total_pages(total, request.limit),
        "totalItems": total,
        "itemsPerPage": request.limit,
    }
