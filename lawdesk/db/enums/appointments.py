"""Appointment and scheduling enums."""

from enum import Enum


class AppointmentType(str, Enum):
    """Kind of appointment on a lawyer's calendar."""

    CONSULTATION = "consultation"
    COURT_HEARING = "court_hearing"
    CLIENT_MEETING = "client_meeting"
    DOCUMENT_REVIEW = "document_review"
    MEDIATION = "mediation"
    DEPOSITION = "deposition"
    OTHER = "other"


class AppointmentStatus(str, Enum):
    """
    Appointment workflow status.

    Flow: scheduled → confirmed → in_progress → completed
              ↘ rescheduled
              ↘ cancelled
    """

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class RecurrenceFrequency(str, Enum):
    """Recurrence frequency (stored only, never expanded)."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class AttendeeRole(str, Enum):
    """Role of an attendee on an appointment."""

    CLIENT = "client"
    LAWYER = "lawyer"
    WITNESS = "witness"
    EXPERT = "expert"
    OTHER = "other"


# Statuses that never block a time slot
TERMINAL_APPOINTMENT_STATUSES = frozenset(
    {AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED}
)

DEFAULT_APPOINTMENT_STATUS = AppointmentStatus.SCHEDULED
