from __future__ import annotations

import logging
from typing import Any

from authcore.services._shared.base import BaseService
from authcore.services._shared.dto import AuthResultOut, UserPublicOut
from authcore.services._shared.errors import (
    NotFoundError,
    Reason,
    UnauthorizedError,
    ValidationError,
)
from authcore.services._shared.ports import TokenError, TokenProvider, TokenType
from authcore.services.tokens.dto import RefreshIn

log = logging.getLogger(__name__)


class TokenRefreshService(BaseService):
    """
    Exchange a refresh token for a brand-new token pair.

    Security
    --------
    - Every verification failure collapses to one ``INVALID_REFRESH_TOKEN``
      error so callers cannot tell which check failed.
    - Both tokens are reissued. No server-side state is kept, so two
      concurrent refreshes with the same token both succeed.
    """

    def __init__(self, *, tokens: TokenProvider, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.tokens = tokens

    def refresh(self, dto: RefreshIn) -> AuthResultOut:
        """
        :param dto: Refresh input.
        :returns: Identity plus the reissued pair.
        :raises ValidationError: Empty refresh token.
        :raises UnauthorizedError: ``INVALID_REFRESH_TOKEN``.
        :raises NotFoundError: ``USER_NOT_FOUND`` when the subject is gone.
        """
        if not isinstance(dto.refresh_token, str) or not dto.refresh_token.strip():
            raise ValidationError("Refresh token is required", {"refreshToken": ["Refresh token is required."]})

        try:
            payload = self.tokens.verify(dto.refresh_token.strip())
        except TokenError as exc:
            log.info("Refresh rejected", extra={"event": "refresh_failed", "reason": type(exc).__name__})
            raise UnauthorizedError(Reason.INVALID_REFRESH_TOKEN) from exc

        if payload.token_type is not TokenType.REFRESH:
            log.info("Refresh rejected", extra={"event": "refresh_failed", "reason": "wrong_type"})
            raise UnauthorizedError(Reason.INVALID_REFRESH_TOKEN)

        with self.storage_guard("refresh"), self.ro_uow() as uow:
            record = uow.users.find_by_id(payload.user_id)
        if record is None:
            raise NotFoundError(Reason.USER_NOT_FOUND)

        user = UserPublicOut.from_record(record)
        pair = self.tokens.sign_pair(user.id, user.email)
        log.info("Tokens refreshed", extra={"event": "refresh", "user_id": user.id})
        return AuthResultOut(user=user, access_token=pair.access_token, refresh_token=pair.refresh_token)
