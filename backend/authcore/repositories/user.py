"""User repository: the SQLAlchemy adapter behind ``UserRepositoryPort``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import select, update

from authcore.models.base import utcnow
from authcore.models.user import User
from authcore.repositories.base import BaseRepository
from authcore.services._shared.ports.user_repository import UserCredentials, UserRecord
from authcore.services._shared.validators import normalize_email


def to_record(user: User) -> UserRecord:
    """Project an ORM row onto the hash-free :class:`UserRecord`."""
    return UserRecord(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Together with the password hasher this is the only component that reads
    ``password_hash``; every other method returns :class:`UserRecord` views.
    Emails are normalized here so lookups are case-insensitive.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _default_order(self):
        return (User.created_at,)

    def _updatable_fields(self):
        """Fields a profile update may touch (``role`` goes via :meth:`set_role`)."""
        return {"name", "email", "password_hash"}

    # ---------------------------- Lookups ----------------------------

    def _get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == normalize_email(email))
        return self.session.execute(stmt).scalars().first()

    def find_by_email(self, email: str) -> UserRecord | None:
        """Fetch a user by email (case-insensitive)."""
        user = self._get_by_email(email)
        return to_record(user) if user else None

    def find_credentials_by_email(self, email: str) -> UserCredentials | None:
        """Fetch a user together with its password hash, for login."""
        user = self._get_by_email(email)
        if user is None:
            return None
        return UserCredentials(record=to_record(user), password_hash=user.password_hash)

    def find_by_id(self, user_id: str) -> UserRecord | None:
        user = self.get(user_id)
        return to_record(user) if user else None

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists.

        :param email: Email address to normalise and search.
        :type email: str
        :rtype: bool
        """
        stmt = select(User.id).where(User.email == normalize_email(email))
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Mutations ----------------------------

    def insert(self, *, name: str, email: str, password_hash: str, role: str = "user") -> UserRecord:
        """
        Insert a new user and flush so the id and timestamps materialize.

        :raises sqlalchemy.exc.IntegrityError: On a duplicate email
            (``uq_users_email``).
        """
        user = User(name=name, email=email, password_hash=password_hash, role=role)
        self.add(user)
        return to_record(user)

    def update_last_authenticated(self, user_id: str) -> None:
        """Stamp ``last_login_at`` with a single UPDATE statement."""
        stmt = update(User).where(User.id == user_id).values(last_login_at=utcnow())
        self.session.execute(stmt)

    def update_fields(self, user_id: str, fields: Mapping[str, Any]) -> UserRecord | None:
        """
        Apply whitelisted field updates.

        :returns: The updated record, or ``None`` if the user does not exist.
        :raises ValueError: On non-updatable keys.
        """
        user = self.get(user_id)
        if user is None:
            return None
        self.assign_updates(user, fields)
        return to_record(user)

    def set_role(self, user_id: str, role: str) -> UserRecord | None:
        user = self.get(user_id)
        if user is None:
            return None
        user.role = role
        self.flush()
        return to_record(user)

    def delete_by_id(self, user_id: str) -> bool:
        """Delete a user; returns ``False`` when nothing matched."""
        user = self.get(user_id)
        if user is None:
            return False
        self.delete(user)
        return True

    def list_records(self, *, limit: int, offset: int) -> list[UserRecord]:
        """Return a slice of users ordered by creation time."""
        return [to_record(u) for u in self.list(limit=limit, offset=offset)]
