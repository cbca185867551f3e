"""
CredentialService
=================

Turns a credential pair into a signed token pair:
- Registration (validation, uniqueness, hashing, token issuance)
- Login (constant-shape failure, best-effort last-login stamp)
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from authcore.services._shared.base import BaseService
from authcore.services._shared.dto import AuthResultOut, UserPublicOut
from authcore.services._shared.errors import (
    ConflictError,
    Reason,
    UnauthorizedError,
    ValidationError,
    violates,
)
from authcore.services._shared.policies import Role
from authcore.services._shared.ports import PasswordHasher, TokenProvider
from authcore.services._shared.validators import (
    email_errors,
    name_errors,
    normalize_email,
    password_errors,
)
from authcore.services.credentials.dto import LoginIn, RegisterIn

log = logging.getLogger(__name__)


class CredentialService(BaseService):
    """
    Application service for registration and login.

    :param hasher: Password hasher adapter.
    :param tokens: Token codec adapter.
    """

    def __init__(self, *, hasher: PasswordHasher, tokens: TokenProvider, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.hasher = hasher
        self.tokens = tokens
        # Compared against when the account does not exist, to even out timing
        self._dummy_hash = hasher.hash("timing-equalizer-Aa1!")

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Register a new user and sign them in.

        :param dto: Registration input.
        :returns: The new identity plus an access/refresh token pair.
        :raises ValidationError: Bad name, email or weak password.
        :raises ConflictError: ``USER_EXISTS`` for a taken email.
        """
        user = self.create_account(dto)
        pair = self.tokens.sign_pair(user.id, user.email)
        log.info("User registered", extra={"event": "register", "user_id": user.id})
        return AuthResultOut(user=user, access_token=pair.access_token, refresh_token=pair.refresh_token)

    def create_account(self, dto: RegisterIn, *, role: Role = Role.USER) -> UserPublicOut:
        """
        Validate, hash and insert a user without issuing tokens.

        Used by :meth:`register` and by the admin CLI.
        """
        errors: dict[str, list[str]] = {}
        for field, messages in (
            ("name", name_errors(dto.name)),
            ("email", email_errors(dto.email)),
            ("password", password_errors(dto.password)),
        ):
            if messages:
                errors[field] = messages
        if errors:
            raise ValidationError("Invalid registration data", errors)

        email = normalize_email(dto.email)

        with self.storage_guard("register"):
            with self.ro_uow() as uow:
                if uow.users.exists_by_email(email):
                    raise ConflictError(Reason.USER_EXISTS)

            password_hash = self.hasher.hash(dto.password)

            with self.rw_uow() as uow:
                try:
                    record = uow.users.insert(
                        name=dto.name.strip(),
                        email=email,
                        password_hash=password_hash,
                        role=role.value,
                    )
                except IntegrityError as exc:
                    # Lost a concurrent registration race on the same email
                    if violates(exc, "uq_users_email", "users.email"):
                        raise ConflictError(Reason.USER_EXISTS) from exc
                    raise

        return UserPublicOut.from_record(record)

    # --------------------------------------------------------------------- #
    # Login
    # --------------------------------------------------------------------- #

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown email and wrong password fail identically.

        :param dto: Login input.
        :returns: Identity plus token pair.
        :raises ValidationError: Email or password missing.
        :raises UnauthorizedError: ``INVALID_CREDENTIALS``.
        """
        errors: dict[str, list[str]] = {}
        if not isinstance(dto.email, str) or not dto.email.strip():
            errors["email"] = ["Email is required."]
        if not isinstance(dto.password, str) or not dto.password:
            errors["password"] = ["Password is required."]
        if errors:
            raise ValidationError("Email and password are required", errors)

        with self.storage_guard("login"), self.ro_uow() as uow:
            creds = uow.users.find_credentials_by_email(normalize_email(dto.email))

        if creds is None:
            self.hasher.verify(dto.password, self._dummy_hash)
            log.info("Login failed", extra={"event": "login_failed"})
            raise UnauthorizedError(Reason.INVALID_CREDENTIALS)

        if not self.hasher.verify(dto.password, creds.password_hash):
            log.info(
                "Login failed",
                extra={"event": "login_failed", "user_id": creds.record.id},
            )
            raise UnauthorizedError(Reason.INVALID_CREDENTIALS)

        user = UserPublicOut.from_record(creds.record)
        pair = self.tokens.sign_pair(user.id, user.email)
        self._record_login(user.id)
        log.info("Login succeeded", extra={"event": "login", "user_id": user.id})
        return AuthResultOut(user=user, access_token=pair.access_token, refresh_token=pair.refresh_token)

    def _record_login(self, user_id: str) -> None:
        """Stamp the last-login time; a failure here never fails the login."""
        try:
            with self.rw_uow() as uow:
                uow.users.update_last_authenticated(user_id)
        except Exception:
            log.warning(
                "Could not record last login",
                exc_info=True,
                extra={"event": "last_login_failed", "user_id": user_id},
            )
