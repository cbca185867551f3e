from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol


class TokenType(str, Enum):
    """Purpose a token was issued for; carried in the ``type`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Identity claims embedded into a token at signing time.

    :param user_id: Subject identifier.
    :param email: Subject email at issuance.
    :param token_type: ``access`` or ``refresh``.
    """

    user_id: str
    email: str
    token_type: TokenType = TokenType.ACCESS


@dataclass(frozen=True, slots=True)
class JwtPayload:
    """
    Verified token contents.

    :param user_id: Subject identifier.
    :param email: Subject email at issuance.
    :param token_type: ``access`` or ``refresh``.
    :param issued_at: ``iat`` as an aware UTC datetime.
    :param expires_at: ``exp`` as an aware UTC datetime.
    :param token_id: Unique ``jti`` of this token.
    """

    user_id: str
    email: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    token_id: str


@dataclass(frozen=True, slots=True)
class TokenPair:
    """Access and refresh tokens issued together."""

    access_token: str
    refresh_token: str


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidTokenError(TokenError):
    """Malformed token, bad signature, or wrong issuer/audience."""


class ExpiredTokenError(TokenError):
    """Signature and bindings are valid but ``now >= exp``."""


class TokenProvider(Protocol):
    """Port for issuing and verifying signed identity tokens."""

    def sign(self, claims: TokenClaims, ttl: timedelta | None = None) -> str: ...

    def verify(self, token: str) -> JwtPayload: ...

    def sign_pair(self, user_id: str, email: str) -> TokenPair: ...
