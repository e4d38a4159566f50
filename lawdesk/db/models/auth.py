"""Identity models."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lawdesk.db.base import Base
from lawdesk.db.models.mixins import TimestampMixin


class User(TimestampMixin, Base):
    """
    Application user (lawyer or staff member).

    Every client, appointment and note is owned by exactly one user.
    Passwords are not stored here; tokens are minted by the CLI or an
    upstream identity provider.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    token_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
