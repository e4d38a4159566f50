"""Column mixins shared by owned records."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import ForeignKey, String, Uuid, text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from lawdesk.db.enums import LifecycleState


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """created_at / updated_at maintained on the Python side."""

    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, nullable=False
    )


class OwnedMixin:
    """Tenant scoping column. Set once on insert, never updated."""

    @declared_attr
    def owner_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
        )


class SoftDeleteMixin:
    """
    Unified lifecycle state (active / archived / deleted).

    Replaces per-entity booleans and status strings. Deleted rows stay in
    storage and drop out of every default query.
    """

    lifecycle_state: Mapped[str] = mapped_column(
        String(20),
        default=LifecycleState.ACTIVE.value,
        server_default=text(f"'{LifecycleState.ACTIVE.value}'"),
        nullable=False,
    )

    @property
    def is_active(self) -> bool:
        return self.lifecycle_state == LifecycleState.ACTIVE.value

    def soft_delete(self) -> None:
        self.lifecycle_state = LifecycleState.DELETED.value
