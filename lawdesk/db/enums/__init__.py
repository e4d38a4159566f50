"""Enum definitions for application constants."""

from lawdesk.db.enums.appointments import (
    AppointmentStatus,
    AppointmentType,
    AttendeeRole,
    DEFAULT_APPOINTMENT_STATUS,
    RecurrenceFrequency,
    TERMINAL_APPOINTMENT_STATUSES,
)
from lawdesk.db.enums.clients import CaseType, ClientStatus
from lawdesk.db.enums.common import LifecycleState, Priority
from lawdesk.db.enums.notes import NoteType

__all__ = [
    "AppointmentStatus",
    "AppointmentType",
    "AttendeeRole",
    "CaseType",
    "ClientStatus",
    "DEFAULT_APPOINTMENT_STATUS",
    "LifecycleState",
    "NoteType",
    "Priority",
    "RecurrenceFrequency",
    "TERMINAL_APPOINTMENT_STATUSES",
]
