"""Domain-specific exceptions shared by the API server and the client."""

from __future__ import annotations

from typing import Any


class ExpenseTrackerError(Exception):
    """Base class for every error raised by the expense tracker."""


class ApiError(ExpenseTrackerError):
    """An error with a stable code and HTTP status, rendered as an error envelope."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details or {}


class ValidationFailed(ApiError):
    """Raised when a submitted expense breaks one or more field rules."""

    status_code = 400
    code = "VALIDATION_ERROR"


class NotFound(ApiError):
    """Raised when an id-addressed operation targets a missing expense."""

    status_code = 404
    code = "NOT_FOUND"


class NetworkError(ApiError):
    """Raised by the client when the request failed before any response arrived."""

    status_code = 0
    code = "NETWORK_ERROR"


class StoreError(ExpenseTrackerError):
    """Wraps any fault of the persistence layer together with the operation name."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.message = message


class EntityNotFoundError(LookupError, ExpenseTrackerError):
    """Raised when an expense cannot be located in the database."""


class EmptyUpdateError(ValueError, ExpenseTrackerError):
    """Raised when an update carries no updatable field."""


__all__ = [
    "ApiError",
    "EmptyUpdateError",
    "EntityNotFoundError",
    "ExpenseTrackerError",
    "NetworkError",
    "NotFound",
    "StoreError",
    "ValidationFailed",
]
