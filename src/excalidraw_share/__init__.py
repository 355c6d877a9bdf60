"""Self-hosted Excalidraw sharing service."""

from .errors import (  # noqa: F401
    AppError,
    BadRequestError,
    InternalError,
    NotFoundError,
    PayloadTooLargeError,
    SerializationError,
    StorageError,
    UnauthorizedError,
)
from .models import DrawingMeta, validate_drawing  # noqa: F401
from .settings import Settings, load_settings  # noqa: F401
from .storage import DrawingStorage, FileSystemStorage, sanitize_id  # noqa: F401
from .web import create_app  # noqa: F401

__all__ = [
    "AppError",
    "BadRequestError",
    "InternalError",
    "NotFoundError",
    "PayloadTooLargeError",
    "SerializationError",
    "StorageError",
    "UnauthorizedError",
    "DrawingMeta",
    "validate_drawing",
    "Settings",
    "load_settings",
    "DrawingStorage",
    "FileSystemStorage",
    "sanitize_id",
    "create_app",
]
