from __future__ import annotations


class StoreError(Exception):
    """Base error for catalog and cart operations."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "kind": self.kind}


class InvalidArgument(StoreError):
    kind = "invalid_argument"
    status_code = 400


class NotFound(StoreError):
    kind = "not_found"
    status_code = 404


class Conflict(StoreError):
    kind = "conflict"
    status_code = 409


class StoreUnavailable(StoreError):
    kind = "store_unavailable"
    status_code = 503
