"""Enums shared across entity types."""

from enum import Enum


class LifecycleState(str, Enum):
    """
    Storage lifecycle for every owned record.

    Flow: active ⇄ archived
             ↘ deleted (terminal, soft delete; row retained)
    """

    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid lifecycle state."""
        return value in cls._value2member_map_


class Priority(str, Enum):
    """Priority levels for clients, appointments and notes."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"
