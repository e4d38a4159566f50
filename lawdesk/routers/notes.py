"""Notes router - API endpoints for notes, tags and note uploads."""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from sqlalchemy.orm import Session

from lawdesk.core.config import settings
from lawdesk.core.deps import get_current_session, get_db
from lawdesk.core.errors import UploadTooLargeError
from lawdesk.db.enums import NoteType, Priority
from lawdesk.schemas.auth import UserSession
from lawdesk.schemas.common import Envelope
from lawdesk.schemas.note import (
    FavoriteRead,
    NoteAttachment,
    NoteCreate,
    NoteListItem,
    NoteRead,
    NoteUpdate,
    VoiceRecording,
)
from lawdesk.services import note_service
from lawdesk.utils.file_upload import content_length_exceeds_limit, get_upload_file_size
from lawdesk.utils.pagination import PaginatedResponse, PaginationParams, get_pagination

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================

async def _read_upload_size(request: Request, file: UploadFile) -> int:
    """Reject oversized uploads from Content-Length first, then the real size."""
    if content_length_exceeds_limit(
        request.headers.get("content-length"),
        max_size_bytes=settings.MAX_UPLOAD_BYTES,
    ):
        max_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
        raise UploadTooLargeError(f"File size exceeds {max_mb:.0f} MB limit")

    file_size = await get_upload_file_size(file)
    file.file.seek(0)
    return file_size


# =============================================================================
# Notes
# =============================================================================

@router.get("", response_model=Envelope[list[NoteListItem]])
def list_notes(
    search: str | None = Query(None, max_length=200),
    client_id: UUID | None = Query(None),
    appointment_id: UUID | None = Query(None),
    note_type: NoteType | None = Query(None),
    priority: Priority | None = Query(None),
    tags: str | None = Query(None, description="Comma-separated; matches any"),
    is_favorite: bool | None = Query(None),
    archived: bool = Query(False),
    sort_by: str = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    pagination: PaginationParams = Depends(get_pagination),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """List notes (attachments omitted)."""
    notes, total = note_service.list_notes(
        db,
        session.user_id,
        search=search,
        client_id=client_id,
        appointment_id=appointment_id,
        note_type=note_type.value if note_type else None,
        priority=priority.value if priority else None,
        tags=tags,
        is_favorite=is_favorite,
        archived=archived,
        sort_by=sort_by,
        sort_order=sort_order,
        pagination=pagination,
    )
    page = PaginatedResponse.create(notes, total, pagination)
    return Envelope(
        data=[NoteListItem.model_validate(n) for n in notes],
        pagination=page.meta(),
    )


# Literal path must be registered before /{note_id}
@router.get("/search/tags", response_model=Envelope[list[str]])
def list_tags(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Sorted distinct tags across active notes."""
    return Envelope(data=note_service.list_tags(db, session.user_id))


@router.get("/{note_id}", response_model=Envelope[NoteRead])
def get_note(
    note_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Get a note; stamps last_accessed_at."""
    note = note_service.get_note(db, session.user_id, note_id)
    return Envelope(data=NoteRead.model_validate(note))


@router.post("", response_model=Envelope[NoteRead], status_code=201)
def create_note(
    data: NoteCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Create a note."""
    note = note_service.create_note(db, session.user_id, data)
    return Envelope(message="Note created successfully", data=NoteRead.model_validate(note))


@router.put("/{note_id}", response_model=Envelope[NoteRead])
def update_note(
    note_id: UUID,
    data: NoteUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Update a note, including archive/restore via lifecycle_state."""
    note = note_service.update_note(db, session.user_id, note_id, data)
    return Envelope(message="Note updated successfully", data=NoteRead.model_validate(note))


@router.delete("/{note_id}", response_model=Envelope[None])
def delete_note(
    note_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Soft-delete a note."""
    note_service.delete_note(db, session.user_id, note_id)
    return Envelope(message="Note deleted successfully")


@router.put("/{note_id}/favorite", response_model=Envelope[FavoriteRead])
def toggle_favorite(
    note_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Toggle the favorite flag."""
    note = note_service.toggle_favorite(db, session.user_id, note_id)
    verb = "added to" if note.is_favorite else "removed from"
    return Envelope(message=f"Note {verb} favorites", data=FavoriteRead(is_favorite=note.is_favorite))


# =============================================================================
# Uploads
# =============================================================================

@router.post("/{note_id}/voice", response_model=Envelope[VoiceRecording])
async def upload_voice_recording(
    note_id: UUID,
    request: Request,
    voice_recording: UploadFile = File(...),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Upload a voice recording, replacing any existing one."""
    file_size = await _read_upload_size(request, voice_recording)
    recording = note_service.attach_voice_recording(
        db,
        session.user_id,
        note_id,
        filename=voice_recording.filename or "",
        content_type=voice_recording.content_type,
        file=voice_recording.file,
        file_size=file_size,
    )
    return Envelope(message="Voice recording uploaded successfully", data=recording)


@router.post("/{note_id}/attachments", response_model=Envelope[NoteAttachment])
async def upload_attachment(
    note_id: UUID,
    request: Request,
    attachment: UploadFile = File(...),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Upload a file and append it to the note's attachments."""
    file_size = await _read_upload_size(request, attachment)
    stored = note_service.add_attachment(
        db,
        session.user_id,
        note_id,
        filename=attachment.filename or "",
        content_type=attachment.content_type,
        file=attachment.file,
        file_size=file_size,
    )
    return Envelope(message="Attachment uploaded successfully", data=stored)
