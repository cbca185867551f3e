"""User model definition for the authentication core."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from authcore.core.extensions import db
from authcore.services._shared.validators import normalize_email

from .base import ReprMixin, TimestampMixin, UUIDPKMixin


class User(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    name : str
        Display name, non-empty.
    email : str
        Login email. Stored normalized (lowercase, trimmed), unique.
    password_hash : str
        Output of the password hasher. Never leaves the repository layer.
    role : str
        Role tag, ``"user"`` unless promoted.
    last_login_at : datetime | None
        Last successful login, updated best-effort.
    created_at : datetime
        Creation timestamp (from mixin).
    updated_at : datetime
        Update timestamp (from mixin).
    """

    __tablename__ = "users"

    # Columns
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="user", server_default="user"
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Constraints & indexes
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        return normalize_email(value)

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        """
        Trim and require a display name.

        :raises ValueError: If the name is missing or only whitespace.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        return value.strip()
