"""User service - user operations and session management."""

from uuid import UUID

from sqlalchemy.orm import Session

from lawdesk.core.errors import DuplicateKeyError
from lawdesk.db.models import User
from lawdesk.utils.normalization import normalize_email


def get_user_by_id(db: Session, user_id: UUID) -> User | None:
    """Get user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get user by email (case-insensitive)."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def create_user(db: Session, email: str, display_name: str) -> User:
    """Create an active user. Emails are unique case-insensitively."""
    if get_user_by_email(db, email):
        raise DuplicateKeyError("User with this email already exists")
    user = User(email=normalize_email(email), display_name=display_name.strip())
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def revoke_all_sessions(db: Session, user_id: UUID) -> bool:
    """
    Revoke all sessions for a user by bumping token_version.

    Existing tokens with old version will fail validation.

    Returns:
        True if user found and sessions revoked, False if user not found
    """
    user = get_user_by_id(db, user_id)
    if not user:
        return False

    user.token_version += 1
    db.commit()
    return True


def disable_user(db: Session, user_id: UUID) -> bool:
    """
    Disable user account.

    Also revokes all sessions by bumping token_version.
    """
    user = get_user_by_id(db, user_id)
    if not user:
        return False

    user.is_active = False
    user.token_version += 1
    db.commit()
    return True
