"""Client enums."""

from enum import Enum


class CaseType(str, Enum):
    """Legal classification of a client's matter."""

    CRIMINAL = "criminal"
    CIVIL = "civil"
    CORPORATE = "corporate"
    FAMILY = "family"
    PROPERTY = "property"
    TAX = "tax"
    LABOR = "labor"
    CONSTITUTIONAL = "constitutional"
    OTHER = "other"


class ClientStatus(str, Enum):
    """Engagement status of a client."""

    ACTIVE = "active"
    CLOSED = "closed"
    ON_HOLD = "on_hold"
    PENDING = "pending"
