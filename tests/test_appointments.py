"""
Tests for the appointments API.

Coverage:
- Conflict detection on create and time-changing update
- Status changes skip the conflict check
- Entity rules (window direction, recurrence)
- Billing total recomputation
- Listing, calendar projection, soft delete, owner isolation
"""

from datetime import datetime
from uuid import uuid4

import pytest

from lawdesk.db.models import Appointment


def window(start: str, end: str) -> dict:
    return {
        "start_time": f"2030-01-15T{start}:00Z",
        "end_time": f"2030-01-15T{end}:00Z",
    }


@pytest.fixture
def client_record(make_client):
    return make_client()


def payload(client_record, start="10:00", end="11:00", **extra) -> dict:
    body = {"client_id": str(client_record.id), "title": "Consultation", **window(start, end)}
    body.update(extra)
    return body


# =============================================================================
# Scheduling scenario
# =============================================================================

@pytest.mark.asyncio
async def test_conflict_scenario_end_to_end(authed_client, client_record):
    res = await authed_client.post("/appointments", json=payload(client_record, title="A"))
    assert res.status_code == 201
    a_id = res.json()["data"]["id"]

    # B overlaps A
    res = await authed_client.post("/appointments", json=payload(client_record, "10:30", "11:30", title="B"))
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["message"] == "Time slot conflicts with existing appointment"
    assert body["conflicting_appointment"]["id"] == a_id
    assert body["conflicting_appointment"]["title"] == "A"

    # C touches A's end
    res = await authed_client.post("/appointments", json=payload(client_record, "11:00", "12:00", title="C"))
    assert res.status_code == 201
    c_id = res.json()["data"]["id"]
    res = await authed_client.delete(f"/appointments/{c_id}")
    assert res.status_code == 200

    # Cancel A, then B fits
    res = await authed_client.put(f"/appointments/{a_id}/status", json={"status": "cancelled"})
    assert res.status_code == 200
    res = await authed_client.post("/appointments", json=payload(client_record, "10:30", "11:30", title="B"))
    assert res.status_code == 201

    # Re-activate A by moving it clear of B
    res = await authed_client.put(f"/appointments/{a_id}/status", json={"status": "scheduled"})
    assert res.status_code == 200
    res = await authed_client.put(f"/appointments/{a_id}", json=window("09:00", "09:30"))
    assert res.status_code == 200
    assert res.json()["data"]["start_time"].startswith("2030-01-15T09:00:00")


@pytest.mark.asyncio
async def test_update_without_time_change_skips_conflict_check(
    authed_client, db, test_user, client_record, make_appointment
):
    res = await authed_client.post("/appointments", json=payload(client_record))
    appt_id = res.json()["data"]["id"]

    # Seed an overlapping row directly; the API would have refused it
    make_appointment(
        datetime.fromisoformat("2030-01-15T10:15:00+00:00"),
        datetime.fromisoformat("2030-01-15T10:45:00+00:00"),
        client=client_record,
    )

    res = await authed_client.put(f"/appointments/{appt_id}", json={"title": "Renamed"})
    assert res.status_code == 200
    assert res.json()["data"]["title"] == "Renamed"

    # Same times resent count as unchanged
    res = await authed_client.put(f"/appointments/{appt_id}", json=window("10:00", "11:00"))
    assert res.status_code == 200

    # Actually moving the window is checked
    res = await authed_client.put(f"/appointments/{appt_id}", json=window("10:05", "11:00"))
    assert res.status_code == 400
    assert "conflicting_appointment" in res.json()


@pytest.mark.asyncio
async def test_update_does_not_conflict_with_itself(authed_client, client_record):
    res = await authed_client.post("/appointments", json=payload(client_record))
    appt_id = res.json()["data"]["id"]

    res = await authed_client.put(f"/appointments/{appt_id}", json=window("10:30", "11:30"))
    assert res.status_code == 200


@pytest.mark.asyncio
async def test_conflict_blocks_write(authed_client, db, test_user, client_record):
    await authed_client.post("/appointments", json=payload(client_record))
    await authed_client.post("/appointments", json=payload(client_record, "10:30", "11:30"))

    assert db.query(Appointment).filter(Appointment.owner_id == test_user.id).count() == 1


# =============================================================================
# Validation
# =============================================================================

@pytest.mark.asyncio
async def test_end_before_start_rejected(authed_client, client_record):
    res = await authed_client.post("/appointments", json=payload(client_record, "11:00", "10:00"))

    assert res.status_code == 400
    fields = [e["field"] for e in res.json()["errors"]]
    assert "end_time" in fields


@pytest.mark.asyncio
async def test_update_end_before_stored_start_rejected(authed_client, client_record):
    res = await authed_client.post("/appointments", json=payload(client_record))
    appt_id = res.json()["data"]["id"]

    res = await authed_client.put(
        f"/appointments/{appt_id}", json={"end_time": "2030-01-15T09:00:00Z"}
    )
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_recurring_requires_pattern(authed_client, client_record):
    res = await authed_client.post(
        "/appointments", json=payload(client_record, is_recurring=True)
    )
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "recurring_pattern"

    res = await authed_client.post(
        "/appointments",
        json=payload(
            client_record,
            is_recurring=True,
            recurring_pattern={"frequency": "weekly", "interval": 1, "days_of_week": [1, 3]},
        ),
    )
    assert res.status_code == 201
    assert res.json()["data"]["recurring_pattern"]["frequency"] == "weekly"


@pytest.mark.asyncio
async def test_schema_violations_are_collected(authed_client, client_record):
    res = await authed_client.post(
        "/appointments",
        json=payload(client_record, title="", billable_hours=-1, appointment_type="picnic"),
    )

    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert {"title", "billable_hours", "appointment_type"} <= fields


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field",
    ["status", "priority", "appointment_type", "billable_hours", "reminder_minutes", "is_recurring"],
)
async def test_update_rejects_null_for_non_nullable_field(authed_client, client_record, field):
    res = await authed_client.post("/appointments", json=payload(client_record))
    created = res.json()["data"]

    res = await authed_client.put(f"/appointments/{created['id']}", json={field: None})

    assert res.status_code == 400
    assert res.json()["errors"] == [{"field": field, "message": "Value error, may not be null"}]
    stored = (await authed_client.get(f"/appointments/{created['id']}")).json()["data"]
    assert stored[field] == created[field]


@pytest.mark.asyncio
async def test_unknown_client_rejected(authed_client):
    body = {"client_id": str(uuid4()), "title": "Consultation", **window("10:00", "11:00")}

    res = await authed_client.post("/appointments", json=body)

    assert res.status_code == 400
    assert res.json()["message"] == "Invalid client ID or client not found"


@pytest.mark.asyncio
async def test_other_owners_client_rejected(authed_client, make_client, other_user):
    foreign = make_client(owner=other_user)

    res = await authed_client.post("/appointments", json=payload(foreign))

    assert res.status_code == 400


# =============================================================================
# Billing
# =============================================================================

@pytest.mark.asyncio
async def test_total_amount_recomputed(authed_client, client_record):
    res = await authed_client.post(
        "/appointments", json=payload(client_record, billable_hours=1.5, hourly_rate=200)
    )
    data = res.json()["data"]
    assert data["total_amount"] == 300

    res = await authed_client.put(f"/appointments/{data['id']}", json={"billable_hours": 2})
    assert res.json()["data"]["total_amount"] == 400


@pytest.mark.asyncio
async def test_total_amount_stays_default_without_rate(authed_client, client_record):
    res = await authed_client.post("/appointments", json=payload(client_record, billable_hours=3))

    assert res.json()["data"]["total_amount"] == 0


# =============================================================================
# Reads
# =============================================================================

@pytest.mark.asyncio
async def test_get_embeds_client_and_duration(authed_client, client_record):
    res = await authed_client.post("/appointments", json=payload(client_record, "10:00", "11:30"))
    appt_id = res.json()["data"]["id"]

    res = await authed_client.get(f"/appointments/{appt_id}")

    data = res.json()["data"]
    assert data["duration_minutes"] == 90
    assert data["client"]["name"] == client_record.name
    assert data["is_active"] is True


@pytest.mark.asyncio
async def test_list_filters_by_date_range_and_paginates(authed_client, client_record):
    for start, end in [("08:00", "09:00"), ("10:00", "11:00"), ("12:00", "13:00")]:
        await authed_client.post("/appointments", json=payload(client_record, start, end))

    res = await authed_client.get(
        "/appointments",
        params={
            "start_date": "2030-01-15T09:30:00Z",
            "end_date": "2030-01-15T12:00:00Z",
            "limit": 1,
        },
    )

    body = res.json()
    assert body["pagination"] == {"page": 1, "pages": 2, "total": 2, "limit": 1}
    assert body["data"][0]["start_time"].startswith("2030-01-15T10:00")
    assert "notes" not in body["data"][0]


@pytest.mark.asyncio
async def test_calendar_requires_both_dates(authed_client):
    res = await authed_client.get("/appointments/calendar", params={"start_date": "2030-01-15T00:00:00Z"})

    assert res.status_code == 400
    assert res.json()["message"] == "Start date and end date are required for calendar view"


@pytest.mark.asyncio
async def test_calendar_projection(authed_client, client_record):
    await authed_client.post("/appointments", json=payload(client_record, "12:00", "13:00", title="Late"))
    await authed_client.post("/appointments", json=payload(client_record, "10:00", "11:00", title="Early"))

    res = await authed_client.get(
        "/appointments/calendar",
        params={"start_date": "2030-01-15T00:00:00Z", "end_date": "2030-01-15T23:59:59Z"},
    )

    data = res.json()["data"]
    assert [d["title"] for d in data] == ["Early", "Late"]
    assert data[0]["client_name"] == client_record.name
    assert set(data[0]) == {
        "id", "title", "start_time", "end_time", "status", "priority",
        "appointment_type", "client_id", "client_name", "location",
    }


@pytest.mark.asyncio
async def test_deleted_appointment_hidden_but_retained(authed_client, db, client_record):
    res = await authed_client.post("/appointments", json=payload(client_record))
    appt_id = res.json()["data"]["id"]

    res = await authed_client.delete(f"/appointments/{appt_id}")
    assert res.json()["message"] == "Appointment deleted successfully"

    assert (await authed_client.get(f"/appointments/{appt_id}")).status_code == 404
    assert (await authed_client.get("/appointments")).json()["pagination"]["total"] == 0

    db.expire_all()
    assert db.query(Appointment).count() == 1
    assert db.query(Appointment).one().lifecycle_state == "deleted"


@pytest.mark.asyncio
async def test_other_owner_cannot_see_appointment(
    authed_client, make_appointment, other_user, client_record
):
    foreign = make_appointment(
        datetime.fromisoformat("2030-01-15T10:00:00+00:00"),
        datetime.fromisoformat("2030-01-15T11:00:00+00:00"),
        owner=other_user,
    )

    assert (await authed_client.get(f"/appointments/{foreign.id}")).status_code == 404
    # Same slot is free for this owner
    res = await authed_client.post("/appointments", json=payload(client_record))
    assert res.status_code == 201
