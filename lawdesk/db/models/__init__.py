"""SQLAlchemy ORM models."""

from lawdesk.db.models.appointments import Appointment
from lawdesk.db.models.auth import User
from lawdesk.db.models.clients import Client
from lawdesk.db.models.notes import Note, NoteTag

__all__ = ["Appointment", "Client", "Note", "NoteTag", "User"]
