# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from authcore.services._shared.policies import Role
from authcore.services._shared.ports.user_repository import UserRecord


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe user data; never carries the password hash.

    :param id: User identifier (UUID string).
    :type id: str
    :param name: Display name.
    :type name: str
    :param email: Normalized email.
    :type email: str
    :param role: Parsed role.
    :type role: Role
    :param created_at: Creation instant.
    :type created_at: datetime
    :param updated_at: Last mutation instant.
    :type updated_at: datetime
    """

    id: str
    name: str
    email: str
    role: Role
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: UserRecord) -> UserPublicOut:
        return cls(
            id=record.id,
            name=record.name,
            email=record.email,
            role=Role.parse(record.role),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Result of register, login and refresh.

    :param user: Authenticated identity.
    :type user: UserPublicOut
    :param access_token: Short-lived bearer token.
    :type access_token: str
    :param refresh_token: Long-lived token accepted only by refresh.
    :type refresh_token: str
    """

    user: UserPublicOut
    access_token: str
    refresh_token: str
