from __future__ import annotations

from typing import Any, List, Optional


class DiscoveryError(Exception):
    """Base error rendered as `{"message": ...}` with `status_code`."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message}
        if self.errors is not None:
            body["errors"] = self.errors
        return body


class MissingId(DiscoveryError):
    def __init__(self, entity: str):
        super().__init__(f"{entity} ID is required")


class InvalidInput(DiscoveryError):
    def __init__(self, message: str = "Invalid input data", errors: Optional[List[Any]] = None):
        super().__init__(message, errors=errors or [])


class EntityNotFound(DiscoveryError):
    status_code = 404

    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
