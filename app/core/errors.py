"""Domain exceptions for the shop backend.

Raised by the service layer; the FastAPI app maps them to JSON responses
of the form ``{"message": ..., "error": ...}``.
"""

from typing import Any


class AppError(Exception):
    """Base exception for all domain errors."""

    status_code: int = 500

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input is missing or malformed."""

    status_code = 400


class NotFoundError(AppError):
    """Raised when an id does not match any stored record."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Any | None = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class UnsupportedMethodError(AppError):
    """Raised when a payment method has no provider."""

    status_code = 400

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Unsupported payment method: {method}")


class PersistenceError(AppError):
    """Raised when the storage layer fails."""

    status_code = 500


class PaymentProviderError(AppError):
    """Raised when a payment provider rejects or fails an invoice request."""

    status_code = 502


class NotificationError(AppError):
    """Raised by notification transports; logged and never surfaced to callers."""

    status_code = 502
