"""Client service - business logic for client records."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lawdesk.core.errors import (
    DuplicateKeyError,
    EntityValidationError,
    FieldViolation,
    NotFoundError,
    StorageError,
)
from lawdesk.db.enums import LifecycleState
from lawdesk.db.models import Client
from lawdesk.schemas.client import ClientCreate, ClientUpdate
from lawdesk.utils.normalization import (
    column_values,
    like_pattern,
    normalize_email,
    normalize_optional_text,
)
from lawdesk.utils.pagination import PaginationParams, apply_sort, paginate_query
from lawdesk.utils.validation import ensure_valid, required, snapshot

logger = logging.getLogger(__name__)

JSON_FIELDS = ("address", "documents")
SUGGESTION_LIMIT = 10
SUGGESTION_MIN_LENGTH = 2
DUPLICATE_CASE_NUMBER = "Client with this case number already exists"
CASE_NUMBER_INDEX = "uq_clients_owner_case_number"
INVALID_CLIENT = "Invalid client ID or client not found"

SORTABLE_COLUMNS = {
    "created_at": Client.created_at,
    "updated_at": Client.updated_at,
    "name": Client.name,
    "case_number": Client.case_number,
    "status": Client.status,
    "priority": Client.priority,
}

CLIENT_RULES = (
    required("name", "Client name is required"),
    required("phone", "Phone number is required"),
    required("case_type", "Case type is required"),
)
RULE_FIELDS = ("name", "phone", "case_type")


# =============================================================================
# Queries
# =============================================================================

def _live_clients(db: Session, owner_id: UUID):
    return db.query(Client).filter(
        Client.owner_id == owner_id,
        Client.lifecycle_state != LifecycleState.DELETED.value,
    )


def list_clients(
    db: Session,
    owner_id: UUID,
    *,
    search: str | None = None,
    status: str | None = None,
    case_type: str | None = None,
    sort_by: str | None = "created_at",
    sort_order: str = "desc",
    pagination: PaginationParams | None = None,
) -> tuple[list[Client], int]:
    """
    List the owner's active clients.

    ``search`` is a case-insensitive substring match over name, phone,
    case number and email.
    """
    query = db.query(Client).filter(
        Client.owner_id == owner_id,
        Client.lifecycle_state == LifecycleState.ACTIVE.value,
    )

    if search:
        pattern = like_pattern(search)
        query = query.filter(
            or_(
                Client.name.ilike(pattern, escape="\\"),
                Client.phone.ilike(pattern, escape="\\"),
                Client.case_number.ilike(pattern, escape="\\"),
                Client.email.ilike(pattern, escape="\\"),
            )
        )
    if status:
        query = query.filter(Client.status == status)
    if case_type:
        query = query.filter(Client.case_type == case_type)

    query = apply_sort(
        query, SORTABLE_COLUMNS, sort_by, sort_order, default="created_at", tiebreaker=Client.id
    )
    return paginate_query(query, pagination or PaginationParams())


def get_client(db: Session, owner_id: UUID, client_id: UUID) -> Client:
    """Get a non-deleted client owned by ``owner_id``."""
    client = _live_clients(db, owner_id).filter(Client.id == client_id).first()
    if not client:
        raise NotFoundError("Client")
    return client


def require_active_client(db: Session, owner_id: UUID, client_id: UUID) -> Client:
    """
    Resolve a client reference from another entity.

    Raises EntityValidationError (not NotFoundError) since the caller's
    payload is what is wrong.
    """
    client = db.query(Client).filter(
        Client.id == client_id,
        Client.owner_id == owner_id,
        Client.lifecycle_state == LifecycleState.ACTIVE.value,
    ).first()
    if not client:
        raise EntityValidationError(
            [FieldViolation(field="client_id", message=INVALID_CLIENT)],
            message=INVALID_CLIENT,
        )
    return client


def search_suggestions(db: Session, owner_id: UUID, q: str | None) -> list[Client]:
    """Typeahead over name, phone and case number (at most 10 hits)."""
    q = (q or "").strip()
    if len(q) < SUGGESTION_MIN_LENGTH:
        return []

    pattern = like_pattern(q)
    return (
        db.query(Client)
        .filter(
            Client.owner_id == owner_id,
            Client.lifecycle_state == LifecycleState.ACTIVE.value,
            or_(
                Client.name.ilike(pattern, escape="\\"),
                Client.phone.ilike(pattern, escape="\\"),
                Client.case_number.ilike(pattern, escape="\\"),
            ),
        )
        .order_by(Client.name.asc(), Client.id.asc())
        .limit(SUGGESTION_LIMIT)
        .all()
    )


def _ensure_case_number_free(
    db: Session,
    owner_id: UUID,
    case_number: str | None,
    exclude_client_id: UUID | None = None,
) -> None:
    if not case_number:
        return
    query = _live_clients(db, owner_id).filter(Client.case_number == case_number)
    if exclude_client_id:
        query = query.filter(Client.id != exclude_client_id)
    if query.first():
        raise DuplicateKeyError(DUPLICATE_CASE_NUMBER)


def _is_case_number_conflict(error: IntegrityError) -> bool:
    constraint_name = getattr(getattr(error.orig, "diag", None), "constraint_name", None)
    if constraint_name == CASE_NUMBER_INDEX:
        return True
    message = str(error.orig) if error.orig else str(error)
    # SQLite reports the columns rather than the index name
    return CASE_NUMBER_INDEX in message or "clients.owner_id, clients.case_number" in message


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if _is_case_number_conflict(e):
            raise DuplicateKeyError(DUPLICATE_CASE_NUMBER)
        logger.exception("Client write failed")
        raise StorageError()


# =============================================================================
# Writes
# =============================================================================

def create_client(db: Session, owner_id: UUID, data: ClientCreate) -> Client:
    """Create a client for ``owner_id``."""
    values = column_values(data, JSON_FIELDS)
    values["email"] = normalize_email(values.get("email"))
    values["case_number"] = normalize_optional_text(values.get("case_number"))
    values["documents"] = values.get("documents") or []

    ensure_valid(values, CLIENT_RULES)
    _ensure_case_number_free(db, owner_id, values["case_number"])

    client = Client(owner_id=owner_id, notes=[], **values)
    db.add(client)
    _commit(db)
    db.refresh(client)
    logger.info("Client created id=%s owner=%s", client.id, owner_id)
    return client


def update_client(db: Session, owner_id: UUID, client_id: UUID, data: ClientUpdate) -> Client:
    """Apply a partial update; only provided fields change."""
    client = get_client(db, owner_id, client_id)

    values = column_values(data, JSON_FIELDS, exclude_unset=True)
    if "email" in values:
        values["email"] = normalize_email(values["email"])
    if "case_number" in values:
        values["case_number"] = normalize_optional_text(values["case_number"])
    if "documents" in values and values["documents"] is None:
        values["documents"] = []

    ensure_valid(snapshot(client, RULE_FIELDS, values), CLIENT_RULES)
    if values.get("case_number") and values["case_number"] != client.case_number:
        _ensure_case_number_free(db, owner_id, values["case_number"], exclude_client_id=client.id)

    for field, value in values.items():
        setattr(client, field, value)

    _commit(db)
    db.refresh(client)
    return client


def delete_client(db: Session, owner_id: UUID, client_id: UUID) -> None:
    """Soft delete: the row stays with lifecycle_state=deleted."""
    client = get_client(db, owner_id, client_id)
    client.soft_delete()
    db.commit()
    logger.info("Client deleted id=%s owner=%s", client_id, owner_id)


def add_client_note(db: Session, owner_id: UUID, client_id: UUID, content: str) -> dict:
    """Append an embedded note and return the new entry."""
    content = (content or "").strip()
    if not content:
        raise EntityValidationError(
            [FieldViolation(field="content", message="Note content is required")],
            message="Note content is required",
        )

    client = get_client(db, owner_id, client_id)
    entry = {
        "content": content,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    # JSON columns are not mutation-tracked; assign a new list
    client.notes = [*(client.notes or []), entry]
    db.commit()
    return entry
