"""Shared schemas: response envelope and embedded sub-documents."""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def reject_null(value):
    """Field validator for partial updates: omit a field to keep it, never send null."""
    if value is None:
        raise ValueError("may not be null")
    return value


class PaginationMeta(BaseModel):
    """Pagination block of a list response."""
    page: int
    pages: int
    total: int
    limit: int


class Envelope(BaseModel, Generic[T]):
    """Uniform response wrapper: ``{success, data?, message?, pagination?}``."""
    success: bool = True
    data: T | None = None
    message: str | None = None
    pagination: PaginationMeta | None = None


class EmbeddedNote(BaseModel):
    """Short note embedded in a client or appointment."""
    content: str = Field(..., min_length=1, max_length=5000)
    created_at: datetime | None = None


class DocumentRef(BaseModel):
    """Reference to a stored document."""
    name: str = Field(..., min_length=1, max_length=255)
    path: str = Field(..., min_length=1, max_length=1000)
    uploaded_at: datetime | None = None
