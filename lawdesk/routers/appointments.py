"""Appointments router - API endpoints for appointment management.

Create and time-changing updates are rejected with 400 and a
``conflicting_appointment`` block when the window overlaps another live
appointment of the same user.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from lawdesk.core.deps import get_current_session, get_db
from lawdesk.db.enums import AppointmentStatus, AppointmentType
from lawdesk.schemas.appointment import (
    AppointmentCreate,
    AppointmentListItem,
    AppointmentRead,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    CalendarEntry,
)
from lawdesk.schemas.auth import UserSession
from lawdesk.schemas.common import Envelope
from lawdesk.services import appointment_service
from lawdesk.utils.pagination import PaginatedResponse, PaginationParams, get_pagination

router = APIRouter()


@router.get("", response_model=Envelope[list[AppointmentListItem]])
def list_appointments(
    start_date: datetime | None = Query(None, description="Earliest start_time (inclusive)"),
    end_date: datetime | None = Query(None, description="Latest start_time (inclusive)"),
    status: AppointmentStatus | None = Query(None),
    client_id: UUID | None = Query(None),
    appointment_type: AppointmentType | None = Query(None),
    sort_by: str = Query("start_time"),
    sort_order: Literal["asc", "desc"] = Query("asc"),
    pagination: PaginationParams = Depends(get_pagination),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List active appointments with the client summary embedded."""
    appointments, total = appointment_service.list_appointments(
        db,
        session.user_id,
        start_date=start_date,
        end_date=end_date,
        status=status.value if status else None,
        client_id=client_id,
        appointment_type=appointment_type.value if appointment_type else None,
        sort_by=sort_by,
        sort_order=sort_order,
        pagination=pagination,
    )
    page = PaginatedResponse.create(appointments, total, pagination)
    return Envelope(
        data=[AppointmentListItem.model_validate(a) for a in appointments],
        pagination=page.meta(),
    )


# Literal path must be registered before /{appointment_id}
@router.get("/calendar", response_model=Envelope[list[CalendarEntry]])
def list_calendar(
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Calendar projection of appointments starting within the range."""
    entries = appointment_service.list_calendar(db, session.user_id, start_date, end_date)
    return Envelope(data=entries)


@router.get("/{appointment_id}", response_model=Envelope[AppointmentRead])
def get_appointment(
    appointment_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Get a single appointment."""
    appointment = appointment_service.get_appointment(db, session.user_id, appointment_id)
    return Envelope(data=AppointmentRead.model_validate(appointment))


@router.post("", response_model=Envelope[AppointmentRead], status_code=201)
def create_appointment(
    data: AppointmentCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Create an appointment after the conflict check."""
    appointment = appointment_service.create_appointment(db, session.user_id, data)
    return Envelope(
        message="Appointment created successfully",
        data=AppointmentRead.model_validate(appointment),
    )


@router.put("/{appointment_id}", response_model=Envelope[AppointmentRead])
def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Update an appointment. Only provided fields change."""
    appointment = appointment_service.update_appointment(db, session.user_id, appointment_id, data)
    return Envelope(
        message="Appointment updated successfully",
        data=AppointmentRead.model_validate(appointment),
    )


@router.put("/{appointment_id}/status", response_model=Envelope[AppointmentRead])
def update_appointment_status(
    appointment_id: UUID,
    data: AppointmentStatusUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Change status only (no conflict check)."""
    appointment = appointment_service.update_status(db, session.user_id, appointment_id, data.status)
    return Envelope(
        message="Appointment status updated successfully",
        data=AppointmentRead.model_validate(appointment),
    )


@router.delete("/{appointment_id}", response_model=Envelope[None])
def delete_appointment(
    appointment_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Soft-delete an appointment."""
    appointment_service.delete_appointment(db, session.user_id, appointment_id)
    return Envelope(message="Appointment deleted successfully")
