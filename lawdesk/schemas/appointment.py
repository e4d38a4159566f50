"""Appointment schemas - Pydantic models for appointments API."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from lawdesk.db.enums import (
    AppointmentStatus,
    AppointmentType,
    AttendeeRole,
    Priority,
    RecurrenceFrequency,
)
from lawdesk.schemas.client import ClientSummary
from lawdesk.schemas.common import DocumentRef, EmbeddedNote, reject_null


# =============================================================================
# Embedded documents
# =============================================================================

class RecurringPattern(BaseModel):
    """Recurrence descriptor. Stored as given; never expanded."""
    frequency: RecurrenceFrequency
    interval: int = Field(1, ge=1)
    end_date: datetime | None = None
    days_of_week: list[Annotated[int, Field(ge=0, le=6)]] = Field(
        default_factory=list, description="0-6, Sunday to Saturday"
    )


class Attendee(BaseModel):
    """Person attending an appointment."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=30)
    role: AttendeeRole = AttendeeRole.CLIENT


# =============================================================================
# Requests
# =============================================================================

class AppointmentCreate(BaseModel):
    """Schema for creating an appointment."""
    model_config = ConfigDict(str_strip_whitespace=True)

    client_id: UUID
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    start_time: datetime
    end_time: datetime
    location: str | None = Field(None, max_length=200)
    appointment_type: AppointmentType = AppointmentType.CONSULTATION
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    priority: Priority = Priority.MEDIUM
    reminder_minutes: int = Field(30, ge=0)
    is_recurring: bool = False
    recurring_pattern: RecurringPattern | None = None
    attendees: list[Attendee] = Field(default_factory=list)
    notes: list[EmbeddedNote] = Field(default_factory=list)
    documents: list[DocumentRef] = Field(default_factory=list)
    billable_hours: float = Field(0, ge=0)
    hourly_rate: float | None = Field(None, ge=0)


class AppointmentUpdate(BaseModel):
    """Schema for updating an appointment. Only provided fields change."""
    model_config = ConfigDict(str_strip_whitespace=True)

    client_id: UUID | None = None
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str | None = Field(None, max_length=200)
    appointment_type: AppointmentType | None = None
    status: AppointmentStatus | None = None
    priority: Priority | None = None
    reminder_minutes: int | None = Field(None, ge=0)
    is_recurring: bool | None = None
    recurring_pattern: RecurringPattern | None = None
    attendees: list[Attendee] | None = None
    notes: list[EmbeddedNote] | None = None
    documents: list[DocumentRef] | None = None
    billable_hours: float | None = Field(None, ge=0)
    hourly_rate: float | None = Field(None, ge=0)

    @field_validator(
        "appointment_type", "status", "priority", "reminder_minutes", "is_recurring", "billable_hours"
    )
    @classmethod
    def not_null(cls, v):
        return reject_null(v)


class AppointmentStatusUpdate(BaseModel):
    """Schema for the status-only update endpoint."""
    status: AppointmentStatus


# =============================================================================
# Responses
# =============================================================================

class AppointmentListItem(BaseModel):
    """Appointment in list views (embedded notes/documents omitted)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID
    client: ClientSummary | None = None
    title: str
    description: str | None
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    location: str | None
    appointment_type: AppointmentType
    status: AppointmentStatus
    priority: Priority
    reminder_minutes: int
    is_recurring: bool
    recurring_pattern: RecurringPattern | None
    attendees: list[Attendee]
    billable_hours: float
    hourly_rate: float | None
    total_amount: float
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AppointmentRead(AppointmentListItem):
    """Full appointment record."""
    notes: list[EmbeddedNote]
    documents: list[DocumentRef]


class AppointmentBrief(BaseModel):
    """Appointment fields embedded in note responses."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    start_time: datetime
    end_time: datetime


class CalendarEntry(BaseModel):
    """Minimal projection for calendar views."""
    id: UUID
    title: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    priority: Priority
    appointment_type: AppointmentType
    client_id: UUID
    client_name: str | None = None
    location: str | None = None
