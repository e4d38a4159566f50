"""Note records and their tags."""

from __future__ import annotations

import uuid
from datetime import datetime
from math import ceil
from typing import TYPE_CHECKING, Iterable

from sqlalchemy import Boolean, ForeignKey, Index, JSON, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lawdesk.db.base import Base
from lawdesk.db.enums import NoteType, Priority
from lawdesk.db.models.mixins import OwnedMixin, SoftDeleteMixin, TimestampMixin, utcnow

if TYPE_CHECKING:
    from lawdesk.db.models.appointments import Appointment
    from lawdesk.db.models.clients import Client

WORDS_PER_MINUTE = 200


class NoteTag(Base):
    """One tag on one note. Tags form a set per note."""

    __tablename__ = "note_tags"
    __table_args__ = (Index("idx_note_tags_tag", "tag"),)

    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("notes.id", ondelete="CASCADE"), primary_key=True
    )
    tag: Mapped[str] = mapped_column(String(50), primary_key=True)


class Note(OwnedMixin, SoftDeleteMixin, TimestampMixin, Base):
    """
    Free-form note, optionally linked to a client and/or an appointment.

    ``lifecycle_state`` supports archive as well as soft delete.
    """

    __tablename__ = "notes"
    __table_args__ = (
        Index("idx_notes_owner_created", "owner_id", "created_at"),
        Index("idx_notes_owner_client", "owner_id", "client_id"),
        Index("idx_notes_owner_appointment", "owner_id", "appointment_id"),
        Index("idx_notes_owner_type", "owner_id", "note_type"),
        Index("idx_notes_owner_state", "owner_id", "lifecycle_state"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )
    appointment_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    note_type: Mapped[str] = mapped_column(
        String(30), default=NoteType.GENERAL.value, nullable=False
    )
    priority: Mapped[str] = mapped_column(
        String(20), default=Priority.MEDIUM.value, nullable=False
    )

    voice_recording: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    attachments: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    is_private: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reminder_date: Mapped[datetime | None] = mapped_column(nullable=True)
    last_accessed_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    tag_rows: Mapped[list[NoteTag]] = relationship(
        cascade="all, delete-orphan",
        order_by=NoteTag.tag,
        lazy="selectin",
    )
    client: Mapped[Client | None] = relationship()
    appointment: Mapped[Appointment | None] = relationship()

    @property
    def tags(self) -> list[str]:
        return [row.tag for row in self.tag_rows]

    def set_tags(self, tags: Iterable[str]) -> None:
        """Replace the tag set, touching only rows that change."""
        wanted = list(dict.fromkeys(tags))
        self.tag_rows = [row for row in self.tag_rows if row.tag in wanted]
        existing = {row.tag for row in self.tag_rows}
        for tag in wanted:
            if tag not in existing:
                self.tag_rows.append(NoteTag(tag=tag))

    @property
    def word_count(self) -> int:
        return len(self.content.split()) if self.content else 0

    @property
    def reading_time_minutes(self) -> int:
        return ceil(self.word_count / WORDS_PER_MINUTE)
