"""Authentication-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""
    sub: UUID  # user_id
    token_version: int


class UserSession(BaseModel):
    """
    Identity of the caller for one request.

    Returned by the get_current_session dependency and passed explicitly
    into every service call as the owner scope.
    """
    user_id: UUID
    email: str
    display_name: str
