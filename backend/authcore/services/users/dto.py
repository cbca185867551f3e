"""
DTOs for UserService.
"""

from __future__ import annotations

from dataclasses import dataclass

from authcore.services._shared.dto import UserPublicOut


@dataclass(frozen=True, slots=True)
class UserUpdateIn:
    """
    Input DTO for a profile update; ``None`` leaves a field untouched.

    :param name: Optional new display name.
    :type name: str | None
    :param email: Optional new email.
    :type email: str | None
    :param password: Optional new raw password.
    :type password: str | None
    """

    name: str | None = None
    email: str | None = None
    password: str | None = None


@dataclass(frozen=True, slots=True)
class UserListIn:
    """
    :param limit: Page size, clamped to ``1..100``.
    :type limit: int
    :param offset: Rows to skip, clamped to ``>= 0``.
    :type offset: int
    """

    limit: int = 20
    offset: int = 0


@dataclass(frozen=True, slots=True)
class UserListOut:
    """
    One page of users.

    :param items: Users in creation order.
    :param total: Total number of users.
    :param limit: Effective page size.
    :param offset: Effective offset.
    :param has_more: Whether rows exist past this page.
    """

    items: list[UserPublicOut]
    total: int
    limit: int
    offset: int
    has_more: bool
