"""Note service - free-form notes with tags, favorites and uploads."""

import logging
from typing import BinaryIO
from uuid import UUID

import nh3
from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from lawdesk.core.errors import NotFoundError, StorageError
from lawdesk.db.enums import LifecycleState
from lawdesk.db.models import Note, NoteTag
from lawdesk.db.models.mixins import utcnow
from lawdesk.schemas.note import NoteCreate, NoteUpdate
from lawdesk.services import appointment_service, attachment_service, client_service
from lawdesk.utils.normalization import column_values, ensure_utc, like_pattern, normalize_tags, split_csv
from lawdesk.utils.pagination import PaginationParams, apply_sort, paginate_query
from lawdesk.utils.validation import ensure_valid, required, snapshot

logger = logging.getLogger(__name__)

# Allowed HTML tags for rich text note bodies
ALLOWED_TAGS = {"p", "br", "strong", "em", "ul", "ol", "li", "a", "blockquote", "h1", "h2", "h3", "code", "pre"}
ALLOWED_ATTRIBUTES = {"a": {"href", "target"}}

SORTABLE_COLUMNS = {
    "created_at": Note.created_at,
    "updated_at": Note.updated_at,
    "title": Note.title,
    "priority": Note.priority,
    "note_type": Note.note_type,
    "last_accessed_at": Note.last_accessed_at,
}

NOTE_RULES = (
    required("title", "Note title is required"),
    required("content", "Note content is required"),
)
RULE_FIELDS = ("title", "content")


def sanitize_html(html: str) -> str:
    """Sanitize HTML to prevent XSS, allowing only safe rich text tags."""
    return nh3.clean(html, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES).strip()


# =============================================================================
# Queries
# =============================================================================

def list_notes(
    db: Session,
    owner_id: UUID,
    *,
    search: str | None = None,
    client_id: UUID | None = None,
    appointment_id: UUID | None = None,
    note_type: str | None = None,
    priority: str | None = None,
    tags: str | None = None,
    is_favorite: bool | None = None,
    archived: bool = False,
    sort_by: str | None = "created_at",
    sort_order: str = "desc",
    pagination: PaginationParams | None = None,
) -> tuple[list[Note], int]:
    """
    List the owner's notes (active by default, archived when asked).

    ``search`` matches title, content or any tag. ``tags`` is comma-separated;
    a note matches when it carries any of them.
    """
    state = LifecycleState.ARCHIVED if archived else LifecycleState.ACTIVE
    query = (
        db.query(Note)
        .options(selectinload(Note.client), selectinload(Note.appointment))
        .filter(Note.owner_id == owner_id, Note.lifecycle_state == state.value)
    )

    if search:
        pattern = like_pattern(search)
        query = query.filter(
            or_(
                Note.title.ilike(pattern, escape="\\"),
                Note.content.ilike(pattern, escape="\\"),
                Note.tag_rows.any(NoteTag.tag.ilike(pattern, escape="\\")),
            )
        )
    if client_id:
        query = query.filter(Note.client_id == client_id)
    if appointment_id:
        query = query.filter(Note.appointment_id == appointment_id)
    if note_type:
        query = query.filter(Note.note_type == note_type)
    if priority:
        query = query.filter(Note.priority == priority)
    tag_list = split_csv(tags)
    if tag_list:
        query = query.filter(Note.tag_rows.any(NoteTag.tag.in_(tag_list)))
    if is_favorite is not None:
        query = query.filter(Note.is_favorite == is_favorite)

    query = apply_sort(
        query, SORTABLE_COLUMNS, sort_by, sort_order, default="created_at", tiebreaker=Note.id
    )
    return paginate_query(query, pagination or PaginationParams())


def _find_note(db: Session, owner_id: UUID, note_id: UUID) -> Note:
    note = db.query(Note).filter(
        Note.id == note_id,
        Note.owner_id == owner_id,
        Note.lifecycle_state != LifecycleState.DELETED.value,
    ).first()
    if not note:
        raise NotFoundError("Note")
    return note


def get_note(db: Session, owner_id: UUID, note_id: UUID) -> Note:
    """Get a note and stamp ``last_accessed_at``."""
    note = _find_note(db, owner_id, note_id)
    # Explicit updated_at keeps the column's onupdate from firing on reads
    db.execute(
        update(Note)
        .where(Note.id == note.id)
        .values(last_accessed_at=utcnow(), updated_at=Note.updated_at)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(note)
    return note


def list_tags(db: Session, owner_id: UUID) -> list[str]:
    """Sorted distinct tags across the owner's active notes."""
    rows = (
        db.query(NoteTag.tag)
        .join(Note, Note.id == NoteTag.note_id)
        .filter(Note.owner_id == owner_id, Note.lifecycle_state == LifecycleState.ACTIVE.value)
        .distinct()
        .order_by(NoteTag.tag.asc())
        .all()
    )
    return [row.tag for row in rows]


# =============================================================================
# Writes
# =============================================================================

def _check_references(db: Session, owner_id: UUID, values: dict, note: Note | None = None) -> None:
    client_id = values.get("client_id")
    if client_id and (note is None or client_id != note.client_id):
        client_service.require_active_client(db, owner_id, client_id)
    appointment_id = values.get("appointment_id")
    if appointment_id and (note is None or appointment_id != note.appointment_id):
        appointment_service.require_active_appointment(db, owner_id, appointment_id)


def create_note(db: Session, owner_id: UUID, data: NoteCreate) -> Note:
    """Create a note; linked client and appointment must be active and owned."""
    values = column_values(data)
    tags = normalize_tags(values.pop("tags", None))
    values["content"] = sanitize_html(values["content"])
    values["reminder_date"] = ensure_utc(values.get("reminder_date"))

    ensure_valid(values, NOTE_RULES)
    _check_references(db, owner_id, values)

    note = Note(owner_id=owner_id, attachments=[], **values)
    note.set_tags(tags)
    db.add(note)
    db.commit()
    db.refresh(note)
    logger.info("Note created id=%s owner=%s", note.id, owner_id)
    return note


def update_note(db: Session, owner_id: UUID, note_id: UUID, data: NoteUpdate) -> Note:
    """
    Apply a partial update.

    ``lifecycle_state`` may move a note between active and archived.
    """
    note = _find_note(db, owner_id, note_id)

    values = column_values(data, exclude_unset=True)
    tags_given = "tags" in values
    tags = values.pop("tags", None)
    if values.get("content") is not None:
        values["content"] = sanitize_html(values["content"])
    if "reminder_date" in values:
        values["reminder_date"] = ensure_utc(values["reminder_date"])

    ensure_valid(snapshot(note, RULE_FIELDS, values), NOTE_RULES)
    _check_references(db, owner_id, values, note)

    for field, value in values.items():
        setattr(note, field, value)
    if tags_given:
        note.set_tags(normalize_tags(tags))

    db.commit()
    db.refresh(note)
    return note


def delete_note(db: Session, owner_id: UUID, note_id: UUID) -> None:
    """Soft delete: the row stays with lifecycle_state=deleted."""
    note = _find_note(db, owner_id, note_id)
    note.soft_delete()
    db.commit()
    logger.info("Note deleted id=%s owner=%s", note_id, owner_id)


def toggle_favorite(db: Session, owner_id: UUID, note_id: UUID) -> Note:
    """Flip ``is_favorite``."""
    note = _find_note(db, owner_id, note_id)
    note.is_favorite = not note.is_favorite
    db.commit()
    db.refresh(note)
    return note


def _commit_upload(db: Session, storage_key: str) -> None:
    """Commit the note's new file metadata; drop the stored file if that fails."""
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        attachment_service.delete_file(storage_key)
        logger.exception("Upload metadata write failed key=%s", storage_key)
        raise StorageError()


def attach_voice_recording(
    db: Session,
    owner_id: UUID,
    note_id: UUID,
    *,
    filename: str,
    content_type: str | None,
    file: BinaryIO,
    file_size: int,
) -> dict:
    """Store a voice recording and replace the note's current one."""
    note = _find_note(db, owner_id, note_id)
    stored = attachment_service.save_upload(
        note.id, attachment_service.VOICE_FIELD, filename, content_type, file, file_size
    )
    recording = {
        "filename": stored["name"],
        "path": stored["path"],
        "duration": None,
        "size": stored["size"],
        "mime_type": stored["mime_type"],
        "uploaded_at": stored["uploaded_at"],
    }
    note.voice_recording = recording
    _commit_upload(db, stored["path"])
    return recording


def add_attachment(
    db: Session,
    owner_id: UUID,
    note_id: UUID,
    *,
    filename: str,
    content_type: str | None,
    file: BinaryIO,
    file_size: int,
) -> dict:
    """Store a file and append it to the note's attachments."""
    note = _find_note(db, owner_id, note_id)
    stored = attachment_service.save_upload(
        note.id, attachment_service.ATTACHMENT_FIELD, filename, content_type, file, file_size
    )
    # JSON columns are not mutation-tracked; assign a new list
    note.attachments = [*(note.attachments or []), stored]
    _commit_upload(db, stored["path"])
    return stored
