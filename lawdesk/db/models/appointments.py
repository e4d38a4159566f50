"""Appointment records."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lawdesk.db.base import Base
from lawdesk.db.enums import AppointmentType, DEFAULT_APPOINTMENT_STATUS, Priority
from lawdesk.db.models.mixins import OwnedMixin, SoftDeleteMixin, TimestampMixin

if TYPE_CHECKING:
    from lawdesk.db.models.clients import Client


class Appointment(OwnedMixin, SoftDeleteMixin, TimestampMixin, Base):
    """
    A scheduled appointment for one owner with one client.

    Lifecycle: scheduled → confirmed → in_progress → completed/cancelled
    Window is half-open ``[start_time, end_time)`` and stored in UTC.
    """

    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_owner_start", "owner_id", "start_time"),
        Index("idx_appointments_owner_client", "owner_id", "client_id"),
        Index("idx_appointments_owner_status", "owner_id", "status"),
        Index("idx_appointments_window", "start_time", "end_time"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Scheduling (stored in UTC)
    start_time: Mapped[datetime] = mapped_column(nullable=False)
    end_time: Mapped[datetime] = mapped_column(nullable=False)
    reminder_minutes: Mapped[int] = mapped_column(
        Integer, default=30, server_default=text("30"), nullable=False
    )

    appointment_type: Mapped[str] = mapped_column(
        String(30), default=AppointmentType.CONSULTATION.value, nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=DEFAULT_APPOINTMENT_STATUS.value,
        server_default=text(f"'{DEFAULT_APPOINTMENT_STATUS.value}'"),
        nullable=False,
    )
    priority: Mapped[str] = mapped_column(
        String(20), default=Priority.MEDIUM.value, nullable=False
    )

    # Recurrence descriptor (stored, never expanded)
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    recurring_pattern: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # Embedded lists
    attendees: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    notes: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    documents: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Billing
    billable_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    hourly_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    client: Mapped[Client] = relationship()

    @property
    def duration_minutes(self) -> int:
        return round((self.end_time - self.start_time).total_seconds() / 60)

    def recompute_total(self) -> None:
        """Keep total_amount equal to hours × rate when both are set."""
        if self.billable_hours and self.hourly_rate:
            self.total_amount = self.billable_hours * self.hourly_rate
