"""Note enums."""

from enum import Enum


class NoteType(str, Enum):
    """Category of a note."""

    GENERAL = "general"
    CLIENT_MEETING = "client_meeting"
    COURT_HEARING = "court_hearing"
    RESEARCH = "research"
    CASE_STRATEGY = "case_strategy"
    FOLLOW_UP = "follow_up"
    OTHER = "other"
