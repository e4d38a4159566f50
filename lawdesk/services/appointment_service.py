"""Appointment service - CRUD with scheduling-conflict protection.

Every write that can move an appointment's window runs the conflict check
from ``scheduling_service`` under the owner's schedule lock:
- create: always
- update: only when start_time or end_time is supplied and differs
- status change: never
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from lawdesk.core.errors import EntityValidationError, FieldViolation, NotFoundError, StorageError
from lawdesk.db.enums import AppointmentStatus, LifecycleState
from lawdesk.db.models import Appointment, Client
from lawdesk.schemas.appointment import AppointmentCreate, AppointmentUpdate, CalendarEntry
from lawdesk.services import client_service
from lawdesk.services.scheduling_service import ensure_window_available, owner_schedule_lock
from lawdesk.utils.normalization import column_values, ensure_utc
from lawdesk.utils.pagination import PaginationParams, apply_sort, paginate_query
from lawdesk.utils.validation import EntityRule, ensure_valid, required, snapshot

logger = logging.getLogger(__name__)

JSON_FIELDS = ("recurring_pattern", "attendees", "notes", "documents")

SORTABLE_COLUMNS = {
    "start_time": Appointment.start_time,
    "end_time": Appointment.end_time,
    "created_at": Appointment.created_at,
    "title": Appointment.title,
    "status": Appointment.status,
    "priority": Appointment.priority,
}


def _recurrence_ends_after_start(values) -> bool:
    end_date = values["recurring_pattern"].get("end_date")
    if not end_date:
        return True
    if isinstance(end_date, str):
        end_date = datetime.fromisoformat(end_date)
    return ensure_utc(end_date) > ensure_utc(values["start_time"])


APPOINTMENT_RULES = (
    required("client_id", "Client is required"),
    required("title", "Appointment title is required"),
    required("start_time", "Start date and time is required"),
    required("end_time", "End date and time is required"),
    EntityRule(
        field="end_time",
        message="End time must be after start time",
        check=lambda v: ensure_utc(v["end_time"]) > ensure_utc(v["start_time"]),
        requires=("start_time", "end_time"),
    ),
    EntityRule(
        field="recurring_pattern",
        message="Recurring pattern is required for recurring appointments",
        check=lambda v: v.get("recurring_pattern") is not None,
        when=lambda v: bool(v.get("is_recurring")),
    ),
    EntityRule(
        field="recurring_pattern.end_date",
        message="Recurrence end date must be after the start time",
        check=_recurrence_ends_after_start,
        requires=("recurring_pattern", "start_time"),
    ),
)
RULE_FIELDS = ("client_id", "title", "start_time", "end_time", "is_recurring", "recurring_pattern")


# =============================================================================
# Queries
# =============================================================================

def list_appointments(
    db: Session,
    owner_id: UUID,
    *,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    status: str | None = None,
    client_id: UUID | None = None,
    appointment_type: str | None = None,
    sort_by: str | None = "start_time",
    sort_order: str = "asc",
    pagination: PaginationParams | None = None,
) -> tuple[list[Appointment], int]:
    """
    List the owner's active appointments.

    ``start_date``/``end_date`` bound ``start_time`` inclusively.
    """
    query = (
        db.query(Appointment)
        .options(selectinload(Appointment.client))
        .filter(
            Appointment.owner_id == owner_id,
            Appointment.lifecycle_state == LifecycleState.ACTIVE.value,
        )
    )

    if start_date:
        query = query.filter(Appointment.start_time >= ensure_utc(start_date))
    if end_date:
        query = query.filter(Appointment.start_time <= ensure_utc(end_date))
    if status:
        query = query.filter(Appointment.status == status)
    if client_id:
        query = query.filter(Appointment.client_id == client_id)
    if appointment_type:
        query = query.filter(Appointment.appointment_type == appointment_type)

    query = apply_sort(
        query, SORTABLE_COLUMNS, sort_by, sort_order, default="start_time", tiebreaker=Appointment.id
    )
    return paginate_query(query, pagination or PaginationParams())


def list_calendar(
    db: Session,
    owner_id: UUID,
    start_date: datetime | None,
    end_date: datetime | None,
) -> list[CalendarEntry]:
    """Minimal projection of active appointments starting within the range."""
    if not start_date or not end_date:
        message = "Start date and end date are required for calendar view"
        raise EntityValidationError(message=message)

    rows = (
        db.query(Appointment, Client.name)
        .outerjoin(Client, Client.id == Appointment.client_id)
        .filter(
            Appointment.owner_id == owner_id,
            Appointment.lifecycle_state == LifecycleState.ACTIVE.value,
            Appointment.start_time >= ensure_utc(start_date),
            Appointment.start_time <= ensure_utc(end_date),
        )
        .order_by(Appointment.start_time.asc(), Appointment.id.asc())
        .all()
    )
    return [
        CalendarEntry(
            id=appt.id,
            title=appt.title,
            start_time=appt.start_time,
            end_time=appt.end_time,
            status=appt.status,
            priority=appt.priority,
            appointment_type=appt.appointment_type,
            client_id=appt.client_id,
            client_name=client_name,
            location=appt.location,
        )
        for appt, client_name in rows
    ]


def get_appointment(db: Session, owner_id: UUID, appointment_id: UUID) -> Appointment:
    """Get a non-deleted appointment owned by ``owner_id``."""
    appointment = db.query(Appointment).filter(
        Appointment.id == appointment_id,
        Appointment.owner_id == owner_id,
        Appointment.lifecycle_state != LifecycleState.DELETED.value,
    ).first()
    if not appointment:
        raise NotFoundError("Appointment")
    return appointment


def require_active_appointment(db: Session, owner_id: UUID, appointment_id: UUID) -> Appointment:
    """Resolve an appointment reference from another entity."""
    appointment = db.query(Appointment).filter(
        Appointment.id == appointment_id,
        Appointment.owner_id == owner_id,
        Appointment.lifecycle_state == LifecycleState.ACTIVE.value,
    ).first()
    if not appointment:
        message = "Invalid appointment ID or appointment not found"
        raise EntityValidationError(
            [FieldViolation(field="appointment_id", message=message)],
            message=message,
        )
    return appointment


# =============================================================================
# Writes
# =============================================================================

def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.exception("Appointment write failed")
        raise StorageError()


def _normalize_window(values: dict) -> None:
    for field in ("start_time", "end_time"):
        if values.get(field) is not None:
            values[field] = ensure_utc(values[field])


def create_appointment(db: Session, owner_id: UUID, data: AppointmentCreate) -> Appointment:
    """
    Create an appointment.

    Order: client reference, entity rules, conflict check, write. Nothing is
    written when any step fails.
    """
    values = column_values(data, JSON_FIELDS)
    _normalize_window(values)

    client_service.require_active_client(db, owner_id, values["client_id"])
    ensure_valid(values, APPOINTMENT_RULES)

    with owner_schedule_lock(db, owner_id):
        ensure_window_available(db, owner_id, values["start_time"], values["end_time"])

        appointment = Appointment(owner_id=owner_id, **values)
        appointment.recompute_total()
        db.add(appointment)
        _commit(db)

    db.refresh(appointment)
    logger.info("Appointment created id=%s owner=%s", appointment.id, owner_id)
    return appointment


def _window_changed(appointment: Appointment, values: dict) -> bool:
    for field in ("start_time", "end_time"):
        if values.get(field) is not None and values[field] != getattr(appointment, field):
            return True
    return False


def update_appointment(
    db: Session,
    owner_id: UUID,
    appointment_id: UUID,
    data: AppointmentUpdate,
) -> Appointment:
    """Apply a partial update; the window is re-checked only when it moves."""
    appointment = get_appointment(db, owner_id, appointment_id)

    values = column_values(data, JSON_FIELDS, exclude_unset=True)
    _normalize_window(values)
    for field in ("attendees", "notes", "documents"):
        if field in values and values[field] is None:
            values[field] = []

    if values.get("client_id") and values["client_id"] != appointment.client_id:
        client_service.require_active_client(db, owner_id, values["client_id"])

    merged = snapshot(appointment, RULE_FIELDS, values)
    ensure_valid(merged, APPOINTMENT_RULES)

    def apply() -> None:
        for field, value in values.items():
            setattr(appointment, field, value)
        appointment.recompute_total()
        _commit(db)

    if _window_changed(appointment, values):
        with owner_schedule_lock(db, owner_id):
            ensure_window_available(
                db,
                owner_id,
                merged["start_time"],
                merged["end_time"],
                exclude_appointment_id=appointment.id,
            )
            apply()
    else:
        apply()

    db.refresh(appointment)
    return appointment


def update_status(
    db: Session,
    owner_id: UUID,
    appointment_id: UUID,
    status: AppointmentStatus,
) -> Appointment:
    """Change status only; the window is not re-checked."""
    appointment = get_appointment(db, owner_id, appointment_id)
    appointment.status = AppointmentStatus(status).value
    db.commit()
    db.refresh(appointment)
    return appointment


def delete_appointment(db: Session, owner_id: UUID, appointment_id: UUID) -> None:
    """Soft delete: the row stays with lifecycle_state=deleted."""
    appointment = get_appointment(db, owner_id, appointment_id)
    appointment.soft_delete()
    db.commit()
    logger.info("Appointment deleted id=%s owner=%s", appointment_id, owner_id)
