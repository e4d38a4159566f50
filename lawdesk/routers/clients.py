"""Clients router - API endpoints for client records."""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from lawdesk.core.deps import get_current_session, get_db
from lawdesk.db.enums import CaseType, ClientStatus
from lawdesk.schemas.auth import UserSession
from lawdesk.schemas.client import (
    ClientCreate,
    ClientListItem,
    ClientNoteCreate,
    ClientRead,
    ClientSuggestion,
    ClientUpdate,
)
from lawdesk.schemas.common import EmbeddedNote, Envelope
from lawdesk.services import client_service
from lawdesk.utils.pagination import PaginatedResponse, PaginationParams, get_pagination

router = APIRouter()


@router.get("", response_model=Envelope[list[ClientListItem]])
def list_clients(
    search: str | None = Query(None, max_length=200),
    status: ClientStatus | None = Query(None),
    case_type: CaseType | None = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    pagination: PaginationParams = Depends(get_pagination),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List active clients (notes and documents omitted)."""
    clients, total = client_service.list_clients(
        db,
        session.user_id,
        search=search,
        status=status.value if status else None,
        case_type=case_type.value if case_type else None,
        sort_by=sort_by,
        sort_order=sort_order,
        pagination=pagination,
    )
    page = PaginatedResponse.create(clients, total, pagination)
    return Envelope(
        data=[ClientListItem.model_validate(c) for c in clients],
        pagination=page.meta(),
    )


# Literal path must be registered before /{client_id}
@router.get("/search/suggestions", response_model=Envelope[list[ClientSuggestion]])
def search_suggestions(
    q: str | None = Query(None),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Typeahead over name, phone and case number."""
    clients = client_service.search_suggestions(db, session.user_id, q)
    return Envelope(data=[ClientSuggestion.model_validate(c) for c in clients])


@router.get("/{client_id}", response_model=Envelope[ClientRead])
def get_client(
    client_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Get a single client."""
    client = client_service.get_client(db, session.user_id, client_id)
    return Envelope(data=ClientRead.model_validate(client))


@router.post("", response_model=Envelope[ClientRead], status_code=201)
def create_client(
    data: ClientCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Create a client."""
    client = client_service.create_client(db, session.user_id, data)
    return Envelope(
        message="Client created successfully",
        data=ClientRead.model_validate(client),
    )


@router.put("/{client_id}", response_model=Envelope[ClientRead])
def update_client(
    client_id: UUID,
    data: ClientUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Update a client. Only provided fields change."""
    client = client_service.update_client(db, session.user_id, client_id, data)
    return Envelope(
        message="Client updated successfully",
        data=ClientRead.model_validate(client),
    )


@router.delete("/{client_id}", response_model=Envelope[None])
def delete_client(
    client_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Soft-delete a client."""
    client_service.delete_client(db, session.user_id, client_id)
    return Envelope(message="Client deleted successfully")


@router.post("/{client_id}/notes", response_model=Envelope[EmbeddedNote])
def add_client_note(
    client_id: UUID,
    data: ClientNoteCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Append a short note to a client."""
    entry = client_service.add_client_note(db, session.user_id, client_id, data.content)
    return Envelope(message="Note added successfully", data=EmbeddedNote.model_validate(entry))
