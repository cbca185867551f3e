"""
IdentityService
===============

Resolves a bearer token into the calling identity:
- Header parsing (``Authorization: Bearer <token>``)
- Token verification, access tokens only
- Subject lookup, so deleted accounts holding live tokens are rejected
"""

from __future__ import annotations

import logging
from typing import Any

from authcore.services._shared.base import BaseService
from authcore.services._shared.dto import UserPublicOut
from authcore.services._shared.errors import Reason, ServiceError, UnauthorizedError
from authcore.services._shared.ports import (
    ExpiredTokenError,
    InvalidTokenError,
    TokenProvider,
    TokenType,
)

log = logging.getLogger(__name__)

BEARER_SCHEME = "Bearer"


def extract_bearer(header: str | None) -> str:
    """
    Pull the token out of an ``Authorization`` header value.

    :param header: Raw header value.
    :returns: The token.
    :raises UnauthorizedError: ``NO_TOKEN`` when absent or not ``Bearer <token>``.
    """
    if not isinstance(header, str):
        raise UnauthorizedError(Reason.NO_TOKEN)
    parts = header.strip().split(" ")
    if len(parts) != 2 or parts[0] != BEARER_SCHEME or not parts[1]:
        raise UnauthorizedError(Reason.NO_TOKEN)
    return parts[1]


class IdentityService(BaseService):
    """
    Token verification step of the request pipeline.

    :param tokens: Token codec adapter.
    """

    def __init__(self, *, tokens: TokenProvider, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.tokens = tokens

    def authenticate(self, authorization: str | None) -> UserPublicOut:
        """
        Resolve the identity behind an ``Authorization`` header.

        :param authorization: Raw header value (may be ``None``).
        :returns: The calling user.
        :raises UnauthorizedError: ``NO_TOKEN``, ``INVALID_TOKEN``,
            ``EXPIRED_TOKEN`` or ``USER_NOT_FOUND``.
        """
        token = extract_bearer(authorization)

        try:
            payload = self.tokens.verify(token)
        except ExpiredTokenError as exc:
            raise UnauthorizedError(Reason.EXPIRED_TOKEN) from exc
        except InvalidTokenError as exc:
            raise UnauthorizedError(Reason.INVALID_TOKEN) from exc

        # Refresh tokens only authorize the refresh operation
        if payload.token_type is not TokenType.ACCESS:
            raise UnauthorizedError(Reason.INVALID_TOKEN)

        with self.storage_guard("authenticate"), self.ro_uow() as uow:
            record = uow.users.find_by_id(payload.user_id)
        if record is None:
            log.info(
                "Token subject no longer exists",
                extra={"event": "auth_failed", "user_id": payload.user_id},
            )
            raise UnauthorizedError(Reason.USER_NOT_FOUND)
        return UserPublicOut.from_record(record)

    def authenticate_optional(self, authorization: str | None) -> UserPublicOut | None:
        """Same as :meth:`authenticate`, but any failure yields ``None``."""
        try:
            return self.authenticate(authorization)
        except ServiceError as exc:
            log.debug("Optional authentication skipped: %s", exc.reason.value)
            return None
