"""
Tests for the per-owner schedule lock.

Two overlapping creates for one owner, started together on separate
threads and sessions, must yield exactly one appointment.
"""

import gc
import threading
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from lawdesk.core.errors import SchedulingConflictError
from lawdesk.db.base import Base
from lawdesk.db.models import Appointment, Client, User
from lawdesk.schemas.appointment import AppointmentCreate
from lawdesk.services import appointment_service, scheduling_service


@pytest.fixture
def file_sessionmaker(tmp_path):
    """File-backed SQLite so each thread gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def owner_and_client(file_sessionmaker):
    db = file_sessionmaker()
    try:
        user = User(email=f"lock-{uuid.uuid4().hex[:8]}@test.com", display_name="Lock User")
        db.add(user)
        db.flush()
        client = Client(
            owner_id=user.id,
            name="Ravi Menon",
            phone="+91 99999 00000",
            case_type="family",
            notes=[],
            documents=[],
        )
        db.add(client)
        db.commit()
        return user.id, client.id
    finally:
        db.close()


def test_concurrent_overlapping_creates_book_once(file_sessionmaker, owner_and_client):
    owner_id, client_id = owner_and_client
    barrier = threading.Barrier(2)
    outcomes: list[str] = []
    outcomes_lock = threading.Lock()

    def book(title: str, start_minute: int) -> None:
        data = AppointmentCreate(
            client_id=client_id,
            title=title,
            start_time=datetime(2030, 3, 1, 10, start_minute, tzinfo=timezone.utc),
            end_time=datetime(2030, 3, 1, 11, start_minute, tzinfo=timezone.utc),
        )
        db = file_sessionmaker()
        try:
            barrier.wait()
            appointment_service.create_appointment(db, owner_id, data)
            result = "created"
        except SchedulingConflictError:
            result = "conflict"
        finally:
            db.close()
        with outcomes_lock:
            outcomes.append(result)

    threads = [
        threading.Thread(target=book, args=("First", 0)),
        threading.Thread(target=book, args=("Second", 30)),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["conflict", "created"]

    db = file_sessionmaker()
    try:
        assert db.query(Appointment).filter(Appointment.owner_id == owner_id).count() == 1
    finally:
        db.close()


def test_different_owners_do_not_serialize_each_other(file_sessionmaker):
    """Same window for two owners: both succeed."""
    db = file_sessionmaker()
    try:
        ids = []
        for n in range(2):
            user = User(email=f"owner{n}-{uuid.uuid4().hex[:6]}@test.com", display_name=f"Owner {n}")
            db.add(user)
            db.flush()
            client = Client(
                owner_id=user.id, name="Client", phone="+91 88888 00000",
                case_type="civil", notes=[], documents=[],
            )
            db.add(client)
            db.flush()
            ids.append((user.id, client.id))
        db.commit()

        for owner_id, client_id in ids:
            appointment_service.create_appointment(
                db,
                owner_id,
                AppointmentCreate(
                    client_id=client_id,
                    title="Same slot",
                    start_time=datetime(2030, 3, 2, 9, tzinfo=timezone.utc),
                    end_time=datetime(2030, 3, 2, 10, tzinfo=timezone.utc),
                ),
            )
        assert db.query(Appointment).count() == 2
    finally:
        db.close()


def test_owner_lock_shared_while_held_then_released():
    owner_id = uuid.uuid4()

    lock = scheduling_service._get_owner_lock(owner_id)
    assert scheduling_service._get_owner_lock(owner_id) is lock

    del lock
    gc.collect()
    assert owner_id not in scheduling_service._owner_locks
