from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class UserRecord:
    """
    Persistence-neutral view of a user row.

    The password hash is deliberately absent; it only travels inside
    :class:`UserCredentials`.

    :param id: UUID string identifier.
    :param name: Display name.
    :param email: Normalized email.
    :param role: Raw role tag as stored.
    :param created_at: Creation instant.
    :param updated_at: Last mutation instant.
    """

    id: str
    name: str
    email: str
    role: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class UserCredentials:
    """A user record paired with its password hash, for login only."""

    record: UserRecord
    password_hash: str


class UserRepositoryPort(Protocol):
    """Port for user lookups and mutations needed by the auth services."""

    def find_by_email(self, email: str) -> UserRecord | None: ...

    def find_credentials_by_email(self, email: str) -> UserCredentials | None: ...

    def find_by_id(self, user_id: str) -> UserRecord | None: ...

    def insert(
        self, *, name: str, email: str, password_hash: str, role: str = "user"
    ) -> UserRecord: ...

    def update_last_authenticated(self, user_id: str) -> None: ...

    def exists_by_email(self, email: str) -> bool: ...

    def update_fields(self, user_id: str, fields: Mapping[str, Any]) -> UserRecord | None: ...

    def delete_by_id(self, user_id: str) -> bool: ...

    def list_records(self, *, limit: int, offset: int) -> list[UserRecord]: ...

    def count(self) -> int: ...

    def set_role(self, user_id: str, role: str) -> UserRecord | None: ...
