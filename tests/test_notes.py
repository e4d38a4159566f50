"""
Tests for the notes API.

Coverage:
- HTML sanitization and derived reading stats
- Search over title, content and tags (owner scoped)
- Archive / restore, favorites, tag listing
- Access stamping on read
- Reference checks for client and appointment links
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from lawdesk.db.models import Note


# =============================================================================
# Create
# =============================================================================

@pytest.mark.asyncio
async def test_create_note_sanitizes_and_normalizes_tags(authed_client):
    res = await authed_client.post(
        "/notes",
        json={
            "title": "Strategy",
            "content": "<p>Argue <strong>limitation</strong></p><script>alert(1)</script>",
            "tags": [" appeal ", "limitation", "appeal"],
        },
    )

    assert res.status_code == 201
    data = res.json()["data"]
    assert data["content"] == "<p>Argue <strong>limitation</strong></p>"
    assert data["tags"] == ["appeal", "limitation"]
    assert data["note_type"] == "general"
    assert data["is_favorite"] is False
    assert data["attachments"] == []


@pytest.mark.asyncio
async def test_script_only_content_rejected(authed_client):
    res = await authed_client.post(
        "/notes", json={"title": "Bad", "content": "<script>alert(1)</script>"}
    )

    assert res.status_code == 400
    assert res.json()["errors"] == [{"field": "content", "message": "Note content is required"}]


@pytest.mark.asyncio
async def test_word_count_and_reading_time(authed_client):
    content = " ".join(["word"] * 450)

    res = await authed_client.post("/notes", json={"title": "Long", "content": content})

    data = res.json()["data"]
    assert data["word_count"] == 450
    assert data["reading_time_minutes"] == 3


@pytest.mark.asyncio
async def test_links_to_client_and_appointment(authed_client, make_appointment):
    appointment = make_appointment(
        datetime(2030, 2, 1, 10, tzinfo=timezone.utc),
        datetime(2030, 2, 1, 11, tzinfo=timezone.utc),
    )

    res = await authed_client.post(
        "/notes",
        json={
            "title": "Meeting notes",
            "content": "Discussed settlement",
            "client_id": str(appointment.client_id),
            "appointment_id": str(appointment.id),
        },
    )

    assert res.status_code == 201
    data = res.json()["data"]
    assert data["client"]["id"] == str(appointment.client_id)
    assert data["appointment"]["id"] == str(appointment.id)


@pytest.mark.asyncio
async def test_unknown_appointment_reference_rejected(authed_client):
    res = await authed_client.post(
        "/notes",
        json={"title": "T", "content": "C", "appointment_id": str(uuid4())},
    )

    assert res.status_code == 400
    assert res.json()["message"] == "Invalid appointment ID or appointment not found"


@pytest.mark.asyncio
async def test_other_owners_client_reference_rejected(authed_client, make_client, other_user):
    foreign = make_client(owner=other_user)

    res = await authed_client.post(
        "/notes", json={"title": "T", "content": "C", "client_id": str(foreign.id)}
    )

    assert res.status_code == 400
    assert res.json()["message"] == "Invalid client ID or client not found"


# =============================================================================
# Listing and search
# =============================================================================

@pytest.mark.asyncio
async def test_search_matches_title_content_and_tags(authed_client, make_note):
    make_note(title="Bail application", content="Draft", tags=["criminal"])
    make_note(title="Lease", content="Clause 14 on eviction", tags=["property"])
    make_note(title="Misc", content="Nothing here", tags=["urgent-review"])

    async def titles(**params):
        res = await authed_client.get("/notes", params=params)
        return sorted(n["title"] for n in res.json()["data"])

    assert await titles(search="bail") == ["Bail application"]
    assert await titles(search="eviction") == ["Lease"]
    assert await titles(search="URGENT") == ["Misc"]


@pytest.mark.asyncio
async def test_search_is_owner_scoped(authed_client, make_note, other_user):
    make_note(owner=other_user, title="Secret", tags=["confidential"])

    res = await authed_client.get("/notes", params={"search": "confidential"})

    assert res.json()["data"] == []


@pytest.mark.asyncio
async def test_tag_filter_matches_any(authed_client, make_note):
    make_note(title="A", tags=["tax"])
    make_note(title="B", tags=["family"])
    make_note(title="C", tags=["labor"])

    res = await authed_client.get("/notes", params={"tags": "tax, family"})

    assert sorted(n["title"] for n in res.json()["data"]) == ["A", "B"]


@pytest.mark.asyncio
async def test_list_omits_attachments(authed_client, make_note):
    make_note()

    data = (await authed_client.get("/notes")).json()["data"]

    assert "attachments" not in data[0]
    assert "word_count" in data[0]


@pytest.mark.asyncio
async def test_list_tags_sorted_distinct_active_only(authed_client, make_note, other_user):
    make_note(tags=["zeta", "alpha"])
    make_note(tags=["alpha", "beta"])
    make_note(tags=["archived-only"], lifecycle_state="archived")
    make_note(owner=other_user, tags=["foreign"])

    res = await authed_client.get("/notes/search/tags")

    assert res.json()["data"] == ["alpha", "beta", "zeta"]


# =============================================================================
# Read / update / delete
# =============================================================================

@pytest.mark.asyncio
async def test_get_stamps_last_accessed(authed_client, db, make_note):
    past = datetime(2020, 1, 1, tzinfo=timezone.utc)
    note = make_note(last_accessed_at=past)
    updated_before = note.updated_at

    res = await authed_client.get(f"/notes/{note.id}")

    assert res.status_code == 200
    db.expire_all()
    stored = db.get(Note, note.id)
    assert stored.last_accessed_at > past
    assert stored.updated_at == updated_before


@pytest.mark.asyncio
async def test_archive_and_restore(authed_client, make_note):
    note = make_note(title="To archive")

    res = await authed_client.put(f"/notes/{note.id}", json={"lifecycle_state": "archived"})
    assert res.json()["data"]["lifecycle_state"] == "archived"

    assert (await authed_client.get("/notes")).json()["data"] == []
    archived = (await authed_client.get("/notes", params={"archived": "true"})).json()["data"]
    assert [n["title"] for n in archived] == ["To archive"]

    # Archived notes are still readable and restorable
    assert (await authed_client.get(f"/notes/{note.id}")).status_code == 200
    res = await authed_client.put(f"/notes/{note.id}", json={"lifecycle_state": "active"})
    assert res.json()["data"]["lifecycle_state"] == "active"


@pytest.mark.asyncio
async def test_cannot_set_deleted_through_update(authed_client, make_note):
    note = make_note()

    res = await authed_client.put(f"/notes/{note.id}", json={"lifecycle_state": "deleted"})

    assert res.status_code == 400


@pytest.mark.asyncio
async def test_update_replaces_tags_only_when_given(authed_client, make_note):
    note = make_note(tags=["one", "two"])

    res = await authed_client.put(f"/notes/{note.id}", json={"title": "Renamed"})
    assert res.json()["data"]["tags"] == ["one", "two"]

    res = await authed_client.put(f"/notes/{note.id}", json={"tags": ["three"]})
    assert res.json()["data"]["tags"] == ["three"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field", ["note_type", "priority", "is_private", "is_favorite", "lifecycle_state"]
)
async def test_update_rejects_null_for_non_nullable_field(authed_client, make_note, field):
    note = make_note()

    res = await authed_client.put(f"/notes/{note.id}", json={field: None})

    assert res.status_code == 400
    assert res.json()["message"] == "Validation error"
    assert res.json()["errors"] == [{"field": field, "message": "Value error, may not be null"}]


@pytest.mark.asyncio
async def test_delete_hides_note(authed_client, db, make_note):
    note = make_note()

    res = await authed_client.delete(f"/notes/{note.id}")
    assert res.json()["message"] == "Note deleted successfully"

    assert (await authed_client.get(f"/notes/{note.id}")).status_code == 404
    db.expire_all()
    assert db.get(Note, note.id).lifecycle_state == "deleted"


@pytest.mark.asyncio
async def test_other_owner_cannot_touch_note(authed_client, make_note, other_user):
    note = make_note(owner=other_user)

    assert (await authed_client.get(f"/notes/{note.id}")).status_code == 404
    assert (await authed_client.put(f"/notes/{note.id}", json={"title": "x"})).status_code == 404
    assert (await authed_client.delete(f"/notes/{note.id}")).status_code == 404


# =============================================================================
# Favorites
# =============================================================================

@pytest.mark.asyncio
async def test_toggle_favorite(authed_client, make_note):
    note = make_note()

    res = await authed_client.put(f"/notes/{note.id}/favorite")
    assert res.json()["message"] == "Note added to favorites"
    assert res.json()["data"] == {"is_favorite": True}

    favorites = (await authed_client.get("/notes", params={"is_favorite": "true"})).json()["data"]
    assert len(favorites) == 1

    res = await authed_client.put(f"/notes/{note.id}/favorite")
    assert res.json()["message"] == "Note removed from favorites"
    assert res.json()["data"] == {"is_favorite": False}


@pytest.mark.asyncio
async def test_other_owner_sees_none_of_my_tags(authed_client, make_note, other_auth_headers):
    make_note(tags=["privileged"])

    res = await authed_client.get("/notes/search/tags", headers=other_auth_headers)

    assert res.status_code == 200
    assert res.json()["data"] == []
