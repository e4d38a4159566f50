"""Client schemas - Pydantic models for clients API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from lawdesk.db.enums import CaseType, ClientStatus, Priority
from lawdesk.schemas.common import DocumentRef, EmbeddedNote, reject_null

PHONE_PATTERN = r"^\+?[\d\s\-\(\)]{10,}$"


class Address(BaseModel):
    """Postal address."""
    model_config = ConfigDict(str_strip_whitespace=True)

    street: str | None = Field(None, max_length=200)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    country: str | None = Field("India", max_length=100)


class ClientCreate(BaseModel):
    """Schema for creating a client."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str = Field(..., pattern=PHONE_PATTERN, max_length=30)
    alternate_phone: str | None = Field(None, pattern=PHONE_PATTERN, max_length=30)
    address: Address | None = None
    case_type: CaseType
    case_number: str | None = Field(None, max_length=100)
    case_description: str | None = Field(None, max_length=1000)
    status: ClientStatus = ClientStatus.ACTIVE
    priority: Priority = Priority.MEDIUM
    retainer_fee: float | None = Field(None, ge=0)
    hourly_rate: float | None = Field(None, ge=0)
    total_billed: float = Field(0, ge=0)
    documents: list[DocumentRef] = Field(default_factory=list)


class ClientUpdate(BaseModel):
    """Schema for updating a client. Only provided fields change."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, pattern=PHONE_PATTERN, max_length=30)
    alternate_phone: str | None = Field(None, pattern=PHONE_PATTERN, max_length=30)
    address: Address | None = None
    case_type: CaseType | None = None
    case_number: str | None = Field(None, max_length=100)
    case_description: str | None = Field(None, max_length=1000)
    status: ClientStatus | None = None
    priority: Priority | None = None
    retainer_fee: float | None = Field(None, ge=0)
    hourly_rate: float | None = Field(None, ge=0)
    total_billed: float | None = Field(None, ge=0)
    documents: list[DocumentRef] | None = None

    @field_validator("status", "priority", "total_billed")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)


class ClientNoteCreate(BaseModel):
    """Request to append a short note to a client."""
    content: str = Field(..., min_length=1, max_length=5000)


class ClientSummary(BaseModel):
    """Client fields embedded in appointment and note responses."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    phone: str
    email: str | None = None


class ClientSuggestion(BaseModel):
    """Typeahead result."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    phone: str
    case_number: str | None = None


class ClientListItem(BaseModel):
    """Client in list views (embedded notes/documents omitted)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str | None
    phone: str
    alternate_phone: str | None
    address: Address | None
    full_address: str
    case_type: CaseType
    case_number: str | None
    case_description: str | None
    status: ClientStatus
    priority: Priority
    retainer_fee: float | None
    hourly_rate: float | None
    total_billed: float
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ClientRead(ClientListItem):
    """Full client record."""
    notes: list[EmbeddedNote]
    documents: list[DocumentRef]
