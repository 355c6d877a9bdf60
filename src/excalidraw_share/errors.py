"""Error taxonomy shared by the storage engine and the HTTP layer."""
from __future__ import annotations


class AppError(Exception):
    """Base error; carries the HTTP status the web layer responds with."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AppError):
    """Raised when the targeted identifier has no backing document."""

    status_code = 404
    default_message = "Drawing not found"


class UnauthorizedError(AppError):
    status_code = 401
    default_message = "Unauthorized: invalid or missing API key"


class BadRequestError(AppError):
    """Raised when a payload or identifier fails a structural check."""

    status_code = 400
    default_message = "Invalid input"


class PayloadTooLargeError(AppError):
    status_code = 413
    default_message = "Payload too large"


class StorageError(AppError):
    """Raised for I/O failures other than a missing document."""

    default_message = "Storage error"


class SerializationError(AppError):
    """Raised for malformed stored JSON or values that cannot be encoded."""

    default_message = "JSON error"


class InternalError(AppError):
    pass
