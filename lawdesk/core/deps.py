"""FastAPI dependencies for authentication and database access."""

from typing import Generator

import jwt
from fastapi import Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from lawdesk.core.errors import AuthenticationError
from lawdesk.core.security import decode_access_token, parse_bearer_token
from lawdesk.db.session import SessionLocal
from lawdesk.schemas.auth import TokenPayload


AUTH_HEADER = "Authorization"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Get authenticated user from the bearer token.

    Validates:
    - Authorization header carries a bearer token
    - JWT is valid and not expired
    - User exists and is active
    - Token version matches (for revocation support)

    Raises:
        AuthenticationError: Authentication failed (401)
    """
    # Import here to avoid circular imports
    from lawdesk.db.models import User

    token = parse_bearer_token(request.headers.get(AUTH_HEADER))
    if not token:
        raise AuthenticationError("Access denied. No token provided.")

    try:
        payload = TokenPayload.model_validate(decode_access_token(token))
    except (jwt.InvalidTokenError, ValidationError):
        raise AuthenticationError("Token is not valid.")

    user = db.query(User).filter(User.id == payload.sub).first()
    if not user:
        raise AuthenticationError("Token is not valid. User not found.")

    if not user.is_active:
        raise AuthenticationError("User account is deactivated.")

    # Token version check (revocation support)
    if user.token_version != payload.token_version:
        raise AuthenticationError("Session revoked.")

    return user


def get_current_session(
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Get the caller's identity for owner scoping.

    This is the PRIMARY auth dependency for every endpoint. The returned
    ``user_id`` is passed to services as ``owner_id``.
    """
    from lawdesk.schemas.auth import UserSession

    user = get_current_user(request, db)
    return UserSession(
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
    )
