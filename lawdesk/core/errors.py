"""Domain error taxonomy.

Services raise these; ``lawdesk.main`` maps them onto the JSON response
envelope. Each error carries its own HTTP status.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class FieldViolation:
    """A single failed constraint on one field."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class ConflictInfo:
    """Identity of the appointment that blocks a time window."""

    id: UUID
    title: str
    start_time: datetime
    end_time: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "title": self.title,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
        }


class LawdeskError(Exception):
    """Base exception for service errors."""

    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def extra(self) -> dict[str, Any]:
        """Additional envelope fields for this error."""
        return {}


class AuthenticationError(LawdeskError):
    """Missing, invalid, expired or revoked credential, or inactive account."""

    status_code = 401
    default_message = "Not authenticated"


class EntityValidationError(LawdeskError):
    """One or more constraints failed; carries every violation found."""

    status_code = 400
    default_message = "Validation error"

    def __init__(
        self,
        violations: list[FieldViolation] | None = None,
        message: str | None = None,
    ):
        super().__init__(message)
        self.violations = list(violations or [])

    def extra(self) -> dict[str, Any]:
        if not self.violations:
            return {}
        return {"errors": [v.to_dict() for v in self.violations]}


class ConflictError(LawdeskError):
    """Write would violate a uniqueness or scheduling rule."""

    status_code = 400
    default_message = "Conflict with existing record"


class SchedulingConflictError(ConflictError):
    """Requested window overlaps a live appointment of the same owner."""

    default_message = "Time slot conflicts with existing appointment"

    def __init__(self, conflict: ConflictInfo, message: str | None = None):
        super().__init__(message)
        self.conflict = conflict

    def extra(self) -> dict[str, Any]:
        return {"conflicting_appointment": self.conflict.to_dict()}


class DuplicateKeyError(ConflictError):
    """Unique key already taken."""

    default_message = "Duplicate value"


class NotFoundError(LawdeskError):
    """Record absent, soft-deleted, or owned by someone else."""

    status_code = 404

    def __init__(self, entity: str = "Record", message: str | None = None):
        self.entity = entity
        super().__init__(message or f"{entity} not found")


class UploadTooLargeError(LawdeskError):
    """Upload exceeds the configured size cap."""

    status_code = 413
    default_message = "File too large"


class StorageError(LawdeskError):
    """Unexpected backend failure (database or file storage)."""

    status_code = 500
    default_message = "Internal server error"
