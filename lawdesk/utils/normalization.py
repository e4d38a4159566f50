"""Data normalization utilities for consistent data quality."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel


def escape_like_string(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return (
        value.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )


def like_pattern(value: str) -> str:
    """Build a contains-pattern for ILIKE from raw user input."""
    return f"%{escape_like_string(value)}%"


def normalize_email(email: str | None) -> str | None:
    """Lowercase and trim an email; empty becomes None."""
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


def normalize_optional_text(value: str | None) -> str | None:
    """Trim text; empty becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Trim tags, drop empties and duplicates, keep first-seen order."""
    if not tags:
        return []
    seen: dict[str, None] = {}
    for tag in tags:
        tag = tag.strip()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated query parameter."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def column_values(
    schema: BaseModel,
    json_fields: Iterable[str] = (),
    *,
    exclude_unset: bool = False,
) -> dict[str, Any]:
    """
    Convert a request schema into ORM column values.

    Enum members become their string values and JSON columns become plain
    JSON-compatible structures. Datetimes and UUIDs on regular columns are
    left native.
    """
    json_fields = set(json_fields)
    values = schema.model_dump(exclude_unset=exclude_unset)
    for name, value in values.items():
        if name in json_fields and value is not None:
            values[name] = jsonable_encoder(value)
        elif isinstance(value, Enum):
            values[name] = value.value
    return values
