"""
UserService
===========

Profile reads and ownership-guarded mutations on the ``User`` aggregate.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from authcore.services._shared.base import BaseService
from authcore.services._shared.dto import UserPublicOut
from authcore.services._shared.errors import (
    ConflictError,
    NotFoundError,
    Reason,
    ValidationError,
    violates,
)
from authcore.services._shared.policies import Decision, Role, decide
from authcore.services._shared.ports import PasswordHasher
from authcore.services._shared.validators import (
    email_errors,
    is_uuid,
    name_errors,
    normalize_email,
    password_errors,
)
from authcore.services.users.dto import UserListIn, UserListOut, UserUpdateIn

log = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class UserService(BaseService):
    """
    Application service for user profiles.

    Responsibilities
    ----------------
    - Public reads (single user, paged list).
    - Update and delete, each guarded by the ownership policy on every call.
    - Role promotion for operators.

    :param hasher: Password hasher used when a profile update sets a new password.
    """

    def __init__(self, *, hasher: PasswordHasher, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.hasher = hasher

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_user(self, user_id: str) -> UserPublicOut:
        """
        :raises ValidationError: ``user_id`` is not a UUID.
        :raises NotFoundError: No such user.
        """
        self._require_uuid(user_id)
        with self.storage_guard("get_user"), self.ro_uow() as uow:
            record = uow.users.find_by_id(user_id)
        if record is None:
            raise NotFoundError(Reason.USER_NOT_FOUND)
        return UserPublicOut.from_record(record)

    def list_users(self, dto: UserListIn) -> UserListOut:
        """
        List users in creation order.

        :param dto: Paging input; out-of-range values are clamped.
        :returns: The page plus ``total`` and ``has_more``.
        """
        limit = min(max(int(dto.limit), 1), MAX_PAGE_SIZE)
        offset = max(int(dto.offset), 0)
        with self.storage_guard("list_users"), self.ro_uow() as uow:
            records = uow.users.list_records(limit=limit, offset=offset)
            total = uow.users.count()
        return UserListOut(
            items=[UserPublicOut.from_record(r) for r in records],
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(records) < total,
        )

    def can_modify(self, caller: UserPublicOut | None, user_id: str) -> bool:
        """Whether ``caller`` would pass the ownership guard on ``user_id``; anonymous callers never do."""
        if caller is None:
            return False
        return decide(caller.role, caller.id, user_id, role_override=self.role_override) is Decision.ALLOW

    # --------------------------------------------------------------------- #
    # Mutations
    # --------------------------------------------------------------------- #

    def update_user(self, caller: UserPublicOut, user_id: str, dto: UserUpdateIn) -> UserPublicOut:
        """
        Update name, email and/or password of ``user_id``.

        :param caller: Identity resolved from the request token.
        :param user_id: Target user.
        :param dto: Fields to change.
        :raises ValidationError: Bad id, no fields, or invalid values.
        :raises ForbiddenError: ``NOT_OWNER``.
        :raises NotFoundError: No such user.
        :raises ConflictError: ``EMAIL_TAKEN``.
        """
        self._require_uuid(user_id)
        self.ensure_owner(caller.id, user_id, actor_role=caller.role)

        errors: dict[str, list[str]] = {}
        if dto.name is not None and name_errors(dto.name):
            errors["name"] = name_errors(dto.name)
        if dto.email is not None and email_errors(dto.email):
            errors["email"] = email_errors(dto.email)
        if dto.password is not None and password_errors(dto.password):
            errors["password"] = password_errors(dto.password)
        if errors:
            raise ValidationError("Invalid update data", errors)
        if dto.name is None and dto.email is None and dto.password is None:
            raise ValidationError("No fields to update")

        updates: dict[str, Any] = {}
        if dto.name is not None:
            updates["name"] = dto.name.strip()
        if dto.email is not None:
            updates["email"] = normalize_email(dto.email)
        if dto.password is not None:
            updates["password_hash"] = self.hasher.hash(dto.password)

        with self.storage_guard("update_user"), self.rw_uow() as uow:
            current = uow.users.find_by_id(user_id)
            if current is None:
                raise NotFoundError(Reason.USER_NOT_FOUND)
            new_email = updates.get("email")
            if new_email and new_email != current.email and uow.users.exists_by_email(new_email):
                raise ConflictError(Reason.EMAIL_TAKEN)
            try:
                record = uow.users.update_fields(user_id, updates)
            except IntegrityError as exc:
                if violates(exc, "uq_users_email", "users.email"):
                    raise ConflictError(Reason.EMAIL_TAKEN) from exc
                raise

        log.info(
            "User updated",
            extra={"event": "user_updated", "user_id": user_id},
        )
        return UserPublicOut.from_record(record)

    def delete_user(self, caller: UserPublicOut, user_id: str) -> None:
        """
        Delete ``user_id``.

        :raises ValidationError: Bad id.
        :raises ForbiddenError: ``NOT_OWNER``.
        :raises NotFoundError: No such user.
        """
        self._require_uuid(user_id)
        self.ensure_owner(caller.id, user_id, actor_role=caller.role)

        with self.storage_guard("delete_user"), self.rw_uow() as uow:
            if not uow.users.delete_by_id(user_id):
                raise NotFoundError(Reason.USER_NOT_FOUND)
        log.info("User deleted", extra={"event": "user_deleted", "user_id": user_id})

    def promote(self, email: str, role: Role = Role.ADMIN) -> UserPublicOut:
        """
        Set the role of the user registered under ``email``.

        :raises NotFoundError: No user with that email.
        """
        with self.storage_guard("promote"), self.rw_uow() as uow:
            current = uow.users.find_by_email(normalize_email(email))
            if current is None:
                raise NotFoundError(Reason.USER_NOT_FOUND)
            record = uow.users.set_role(current.id, role.value)
        return UserPublicOut.from_record(record)

    # --------------------------------------------------------------------- #
    # Helpers
    # --------------------------------------------------------------------- #

    @staticmethod
    def _require_uuid(user_id: str) -> None:
        if not is_uuid(user_id):
            raise ValidationError("Invalid user id", {"id": ["Must be a UUID."]})
