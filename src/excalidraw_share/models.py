"""Metadata and API payload models."""
from __future__ import annotations

from datetime import datetime
from typing import Any, List

from pydantic import BaseModel, Field

from .errors import BadRequestError

DOCUMENT_TYPE = "excalidraw"


class DrawingMeta(BaseModel):
    """Metadata about a stored drawing."""

    id: str = Field(..., description="Drawing identifier")
    created_at: datetime = Field(..., description="Creation time (UTC)")
    size_bytes: int = Field(..., ge=0, description="Serialized document size")


class UploadResponse(BaseModel):
    id: str
    url: str


class ListResponse(BaseModel):
    drawings: List[DrawingMeta] = Field(default_factory=list)


class PublicDrawingMeta(BaseModel):
    """Listing entry exposed without authentication."""

    id: str
    created_at: datetime

    @classmethod
    def from_meta(cls, meta: DrawingMeta) -> "PublicDrawingMeta":
        return cls(id=meta.id, created_at=meta.created_at)


class PublicListResponse(BaseModel):
    drawings: List[PublicDrawingMeta] = Field(default_factory=list)


def validate_drawing(document: Any) -> None:
    """Reject documents that are not Excalidraw scenes before they reach storage."""
    if not isinstance(document, dict):
        raise BadRequestError("Invalid document: expected a JSON object.")
    if document.get("type") != DOCUMENT_TYPE:
        raise BadRequestError(
            f"Invalid document: missing or wrong 'type' field. Expected '{DOCUMENT_TYPE}'."
        )
    if not isinstance(document.get("elements"), list):
        raise BadRequestError("Invalid document: missing 'elements' array.")
