"""Attachment service - validation and storage for note uploads."""

import logging
import os
import uuid
from datetime import datetime, timezone
from typing import BinaryIO

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from lawdesk.core.config import settings
from lawdesk.core.errors import EntityValidationError, FieldViolation, StorageError, UploadTooLargeError
from lawdesk.utils.file_upload import file_extension

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

ALLOWED_EXTENSIONS = {"jpeg", "jpg", "png", "pdf", "doc", "docx", "txt", "mp3", "wav", "m4a", "aac"}
ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/wave",
    "audio/x-wav",
    "audio/mp4",
    "audio/m4a",
    "audio/x-m4a",
    "audio/aac",
    "audio/x-aac",
}

VOICE_FIELD = "voice_recording"
ATTACHMENT_FIELD = "attachment"


# =============================================================================
# Storage Backend
# =============================================================================

def _get_s3_client():
    """Get boto3 S3 client."""
    return boto3.client("s3", region_name=settings.S3_REGION)


def _get_local_storage_path() -> str:
    """Get local storage directory path."""
    path = settings.LOCAL_STORAGE_PATH
    os.makedirs(path, exist_ok=True)
    return path


def store_file(storage_key: str, file: BinaryIO) -> None:
    """Store file to configured backend."""
    try:
        if settings.STORAGE_BACKEND == "s3":
            file.seek(0)
            _get_s3_client().upload_fileobj(file, settings.S3_BUCKET, storage_key)
        else:
            path = os.path.join(_get_local_storage_path(), storage_key)
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                file.seek(0)
                for chunk in iter(lambda: file.read(8192), b""):
                    f.write(chunk)
    except (OSError, BotoCoreError, ClientError):
        logger.exception("Failed to store upload key=%s backend=%s", storage_key, settings.STORAGE_BACKEND)
        raise StorageError()


def delete_file(storage_key: str) -> None:
    """Remove a stored file. Failures are logged, not raised."""
    try:
        if settings.STORAGE_BACKEND == "s3":
            _get_s3_client().delete_object(Bucket=settings.S3_BUCKET, Key=storage_key)
        else:
            path = os.path.join(_get_local_storage_path(), storage_key)
            if os.path.exists(path):
                os.remove(path)
    except (OSError, BotoCoreError, ClientError):
        logger.warning("Failed to delete upload key=%s backend=%s", storage_key, settings.STORAGE_BACKEND)


# =============================================================================
# Validation
# =============================================================================

def validate_file(filename: str, content_type: str | None) -> tuple[bool, str | None]:
    """
    Validate file against the extension and MIME allowlists.

    Returns (is_valid, error_message)
    """
    ext = file_extension(filename)
    if ext not in ALLOWED_EXTENSIONS:
        return False, f"File extension '.{ext}' not allowed"

    if (content_type or "").lower() not in ALLOWED_MIME_TYPES:
        return False, f"Content type '{content_type}' not allowed"

    return True, None


def check_size(file_size: int) -> None:
    """Raise UploadTooLargeError when ``file_size`` exceeds the cap."""
    if file_size > settings.MAX_UPLOAD_BYTES:
        max_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
        raise UploadTooLargeError(f"File size exceeds {max_mb:.0f} MB limit")


def build_storage_key(note_id: uuid.UUID, field: str, filename: str) -> str:
    """``notes/{note_id}/{field}-{uuid}.{ext}``"""
    ext = file_extension(filename)
    suffix = f".{ext}" if ext else ""
    return f"notes/{note_id}/{field}-{uuid.uuid4()}{suffix}"


# =============================================================================
# Service Functions
# =============================================================================

def save_upload(
    note_id: uuid.UUID,
    field: str,
    filename: str,
    content_type: str | None,
    file: BinaryIO,
    file_size: int,
) -> dict:
    """
    Validate and store one uploaded file.

    Returns the stored metadata: name, path, size, mime_type, uploaded_at.
    """
    if not filename:
        raise EntityValidationError(
            [FieldViolation(field=field, message="File is required")],
            message="File is required",
        )
    check_size(file_size)

    is_valid, error = validate_file(filename, content_type)
    if not is_valid:
        raise EntityValidationError([FieldViolation(field=field, message=error)], message=error)

    storage_key = build_storage_key(note_id, field, filename)
    store_file(storage_key, file)
    logger.info("Stored upload note=%s field=%s size=%d", note_id, field, file_size)

    return {
        "name": filename,
        "path": storage_key,
        "size": file_size,
        "mime_type": (content_type or "").lower(),
        "uploaded_at": datetime.now(timezone.utc).isoformat(),
    }
