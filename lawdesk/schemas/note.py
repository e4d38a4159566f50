"""Pydantic schemas for notes."""

from datetime import datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from lawdesk.db.enums import LifecycleState, NoteType, Priority
from lawdesk.schemas.appointment import AppointmentBrief
from lawdesk.schemas.client import ClientSummary
from lawdesk.schemas.common import reject_null

Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class VoiceRecording(BaseModel):
    """Stored voice recording metadata."""
    filename: str
    path: str
    duration: float | None = None  # seconds
    size: int
    mime_type: str | None = None
    uploaded_at: datetime


class NoteAttachment(BaseModel):
    """Stored attachment metadata."""
    name: str
    path: str
    size: int
    mime_type: str
    uploaded_at: datetime


class NoteCreate(BaseModel):
    """Request to create a note."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=10000)
    note_type: NoteType = NoteType.GENERAL
    priority: Priority = Priority.MEDIUM
    tags: list[Tag] = Field(default_factory=list)
    client_id: UUID | None = None
    appointment_id: UUID | None = None
    is_private: bool = False
    is_favorite: bool = False
    reminder_date: datetime | None = None


class NoteUpdate(BaseModel):
    """Request to update a note. Only provided fields change."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1, max_length=10000)
    note_type: NoteType | None = None
    priority: Priority | None = None
    tags: list[Tag] | None = None
    client_id: UUID | None = None
    appointment_id: UUID | None = None
    is_private: bool | None = None
    is_favorite: bool | None = None
    reminder_date: datetime | None = None
    lifecycle_state: Literal["active", "archived"] | None = None

    @field_validator("note_type", "priority", "is_private", "is_favorite", "lifecycle_state")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)


class NoteListItem(BaseModel):
    """Note in list views (attachments omitted)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    content: str
    note_type: NoteType
    priority: Priority
    tags: list[str]
    client_id: UUID | None
    appointment_id: UUID | None
    client: ClientSummary | None = None
    appointment: AppointmentBrief | None = None
    voice_recording: VoiceRecording | None
    is_private: bool
    is_favorite: bool
    reminder_date: datetime | None
    lifecycle_state: LifecycleState
    last_accessed_at: datetime
    word_count: int
    reading_time_minutes: int
    created_at: datetime
    updated_at: datetime


class NoteRead(NoteListItem):
    """Full note record."""
    attachments: list[NoteAttachment]


class FavoriteRead(BaseModel):
    """Favorite toggle result."""
    is_favorite: bool
