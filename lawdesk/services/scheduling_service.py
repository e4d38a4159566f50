"""Scheduling engine - appointment conflict detection.

Two half-open windows ``[s, e)`` and ``[S, E)`` conflict iff ``s < E and S < e``.
Touching endpoints (one appointment ending exactly when the next begins) never
conflict.

Candidates are the owner's appointments that are still live:
- lifecycle_state is active (not archived or soft-deleted)
- status is not terminal (cancelled / completed)

The check and the write that follows it run under ``owner_schedule_lock`` so
two concurrent requests for the same owner cannot both pass the check and
double-book.
"""

import logging
import threading
import weakref
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator
from uuid import UUID

from sqlalchemy.orm import Query, Session

from lawdesk.core.errors import ConflictInfo, SchedulingConflictError
from lawdesk.db.enums import LifecycleState, TERMINAL_APPOINTMENT_STATUSES
from lawdesk.db.models import Appointment, User
from lawdesk.utils.normalization import ensure_utc

logger = logging.getLogger(__name__)

TERMINAL_STATUS_VALUES = tuple(s.value for s in TERMINAL_APPOINTMENT_STATUSES)


# =============================================================================
# Overlap predicate
# =============================================================================

def windows_overlap(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    """True when half-open windows [a_start, a_end) and [b_start, b_end) intersect."""
    return a_start < b_end and b_start < a_end


# =============================================================================
# Per-owner serialization
# =============================================================================

# Entries drop out once no request holds the owner's lock
_owner_locks: "weakref.WeakValueDictionary[UUID, threading.Lock]" = weakref.WeakValueDictionary()
_owner_locks_guard = threading.Lock()


def _get_owner_lock(owner_id: UUID) -> threading.Lock:
    with _owner_locks_guard:
        lock = _owner_locks.get(owner_id)
        if lock is None:
            lock = threading.Lock()
            _owner_locks[owner_id] = lock
        return lock


@contextmanager
def owner_schedule_lock(db: Session, owner_id: UUID) -> Iterator[None]:
    """
    Serialize check-then-write for one owner's calendar.

    Holds a process-local lock for the owner and a row lock on the owner's
    ``users`` row (``SELECT ... FOR UPDATE``; a no-op on SQLite, which
    serializes writers itself). The caller must commit or roll back inside
    the block so the row lock is released with the transaction. An exception
    escaping the block rolls the session back.
    """
    lock = _get_owner_lock(owner_id)
    with lock:
        try:
            db.query(User.id).filter(User.id == owner_id).with_for_update().first()
            yield
        except Exception:
            db.rollback()
            raise


# =============================================================================
# Conflict lookup
# =============================================================================

def live_appointments(db: Session, owner_id: UUID) -> Query:
    """Appointments of ``owner_id`` that can block a time slot."""
    return db.query(Appointment).filter(
        Appointment.owner_id == owner_id,
        Appointment.lifecycle_state == LifecycleState.ACTIVE.value,
        Appointment.status.notin_(TERMINAL_STATUS_VALUES),
    )


def find_conflict(
    db: Session,
    owner_id: UUID,
    start: datetime,
    end: datetime,
    exclude_appointment_id: UUID | None = None,
) -> Appointment | None:
    """
    Return the first live appointment overlapping ``[start, end)``, or None.

    Window direction is not re-validated here. With several conflicts the
    earliest-starting one is returned.
    """
    start = ensure_utc(start)
    end = ensure_utc(end)

    query = live_appointments(db, owner_id).filter(
        Appointment.start_time < end,
        Appointment.end_time > start,
    )
    if exclude_appointment_id:
        query = query.filter(Appointment.id != exclude_appointment_id)
    return query.order_by(Appointment.start_time.asc(), Appointment.id.asc()).first()


def has_conflict(
    db: Session,
    owner_id: UUID,
    start: datetime,
    end: datetime,
    exclude_appointment_id: UUID | None = None,
) -> bool:
    """Boolean form of find_conflict."""
    return find_conflict(db, owner_id, start, end, exclude_appointment_id) is not None


def conflict_info(appointment: Appointment) -> ConflictInfo:
    """Identity of a conflicting appointment for error reporting."""
    return ConflictInfo(
        id=appointment.id,
        title=appointment.title,
        start_time=appointment.start_time,
        end_time=appointment.end_time,
    )


def ensure_window_available(
    db: Session,
    owner_id: UUID,
    start: datetime,
    end: datetime,
    exclude_appointment_id: UUID | None = None,
) -> None:
    """
    Raise SchedulingConflictError if ``[start, end)`` is taken.

    Called before any write on create and on time-changing update.
    """
    conflicting = find_conflict(db, owner_id, start, end, exclude_appointment_id)
    if conflicting is None:
        return
    logger.info(
        "Scheduling conflict owner=%s window=%s/%s conflicts_with=%s",
        owner_id,
        start.isoformat(),
        end.isoformat(),
        conflicting.id,
    )
    raise SchedulingConflictError(conflict_info(conflicting))
