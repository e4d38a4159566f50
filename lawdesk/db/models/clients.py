"""Client records."""

from __future__ import annotations

import uuid

from sqlalchemy import Float, JSON, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from lawdesk.db.base import Base
from lawdesk.db.enums import ClientStatus, LifecycleState, Priority
from lawdesk.db.models.mixins import OwnedMixin, SoftDeleteMixin, TimestampMixin


ADDRESS_PARTS = ("street", "city", "state", "zip_code", "country")


class Client(OwnedMixin, SoftDeleteMixin, TimestampMixin, Base):
    """
    A client of the practice.

    Appointments and notes reference clients by id only; a client holds no
    back-pointers. ``notes`` and ``documents`` are embedded lists.
    """

    __tablename__ = "clients"
    __table_args__ = (
        Index("idx_clients_owner_name", "owner_id", "name"),
        Index("idx_clients_owner_phone", "owner_id", "phone"),
        Index("idx_clients_owner_status", "owner_id", "status"),
        Index(
            "uq_clients_owner_case_number",
            "owner_id",
            "case_number",
            unique=True,
            postgresql_where=text(
                f"case_number IS NOT NULL AND lifecycle_state != '{LifecycleState.DELETED.value}'"
            ),
            sqlite_where=text(
                f"case_number IS NOT NULL AND lifecycle_state != '{LifecycleState.DELETED.value}'"
            ),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Contact
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    alternate_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # Case
    case_type: Mapped[str] = mapped_column(String(30), nullable=False)
    case_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    case_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=ClientStatus.ACTIVE.value, nullable=False
    )
    priority: Mapped[str] = mapped_column(
        String(20), default=Priority.MEDIUM.value, nullable=False
    )

    # Billing
    retainer_fee: Mapped[float | None] = mapped_column(Float, nullable=True)
    hourly_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_billed: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # Embedded lists
    notes: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    documents: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    @property
    def full_address(self) -> str:
        if not self.address:
            return ""
        parts = [self.address.get(key) for key in ADDRESS_PARTS]
        return ", ".join(p for p in parts if p)
