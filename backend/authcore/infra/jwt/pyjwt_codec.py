"""Token codec: HS256 JWTs signed and verified with PyJWT."""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import jwt as pyjwt

from authcore.core.config import AuthSettings
from authcore.services._shared.ports.token_provider import (
    ExpiredTokenError,
    InvalidTokenError,
    JwtPayload,
    TokenClaims,
    TokenError,
    TokenPair,
    TokenProvider,
    TokenType,
)

REQUIRED_CLAIMS = ("sub", "email", "type", "jti", "iat", "exp", "iss", "aud")

# Signature only; the remaining checks run in a fixed order below
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_iss": False,
    "verify_aud": False,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PyJWTCodec(TokenProvider):
    """
    Stateless signer/verifier for access and refresh tokens.

    Every token carries ``sub`` (mirrored as ``userId``), ``email``, ``type``,
    a unique ``jti``, ``iat``/``exp`` and the configured ``iss``/``aud``.

    Parameters
    ----------
    settings : AuthSettings
        Secret, algorithm, issuer, audience, lifetimes and leeway.
    clock : Callable[[], datetime], optional
        Source of the current aware UTC time.

    Notes
    -----
    Instances hold only immutable configuration and are safe to share
    across threads.
    """

    def __init__(self, settings: AuthSettings, *, clock: Callable[[], datetime] = _utcnow) -> None:
        settings.check_secret(strict=False)
        self._settings = settings
        self._clock = clock

    # ------------------------------------------------------------------ #
    # Signing
    # ------------------------------------------------------------------ #

    def sign(self, claims: TokenClaims, ttl: timedelta | None = None) -> str:
        """
        Sign ``claims`` into a compact JWT.

        :param claims: Identity claims.
        :param ttl: Lifetime; defaults to the configured lifetime of the
            token type. May be negative, which yields an expired token.
            Fractions of a second round up to the next whole second.
        :returns: Encoded token string.
        """
        if ttl is None:
            ttl = (
                self._settings.refresh_expires
                if claims.token_type is TokenType.REFRESH
                else self._settings.access_expires
            )
        issued_at = int(self._clock().timestamp())
        payload: dict[str, Any] = {
            "sub": claims.user_id,
            "userId": claims.user_id,
            "email": claims.email,
            "type": TokenType(claims.token_type).value,
            "jti": uuid4().hex,
            "iat": issued_at,
            "exp": issued_at + math.ceil(ttl.total_seconds()),
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
        }
        return pyjwt.encode(payload, self._settings.secret, algorithm=self._settings.algorithm)

    def sign_pair(self, user_id: str, email: str) -> TokenPair:
        """Issue a fresh access and refresh token for one identity."""
        return TokenPair(
            access_token=self.sign(TokenClaims(user_id, email, TokenType.ACCESS)),
            refresh_token=self.sign(TokenClaims(user_id, email, TokenType.REFRESH)),
        )

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def verify(self, token: str) -> JwtPayload:
        """
        Verify ``token`` and return its payload.

        Checks run in order: signature and structure, issuer, audience,
        expiry. The first failing check decides the error.

        :raises InvalidTokenError: Bad signature, malformed token or claims,
            wrong issuer or audience.
        :raises ExpiredTokenError: ``now >= exp + leeway``.
        """
        if not isinstance(token, str) or not token:
            raise InvalidTokenError("Token is empty.")
        try:
            raw = pyjwt.decode(
                token,
                self._settings.secret,
                algorithms=[self._settings.algorithm],
                options=_DECODE_OPTIONS,
            )
        except pyjwt.PyJWTError as exc:
            raise InvalidTokenError("Token signature or structure is invalid.") from exc

        missing = [claim for claim in REQUIRED_CLAIMS if claim not in raw]
        if missing:
            raise InvalidTokenError(f"Token is missing claims: {missing}")

        if raw["iss"] != self._settings.issuer:
            raise InvalidTokenError("Token issuer mismatch.")
        if not _audience_matches(raw["aud"], self._settings.audience):
            raise InvalidTokenError("Token audience mismatch.")

        payload = _to_payload(raw)
        now = self._clock()
        if now >= payload.expires_at + self._settings.leeway:
            raise ExpiredTokenError("Token has expired.")
        return payload


def _audience_matches(aud: Any, expected: str) -> bool:
    if isinstance(aud, str):
        return aud == expected
    if isinstance(aud, list):
        return expected in aud
    return False


def _to_payload(raw: Mapping[str, Any]) -> JwtPayload:
    try:
        return JwtPayload(
            user_id=str(raw["sub"]),
            email=str(raw["email"]),
            token_type=TokenType(raw["type"]),
            issued_at=datetime.fromtimestamp(int(raw["iat"]), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(raw["exp"]), tz=timezone.utc),
            token_id=str(raw["jti"]),
        )
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        raise InvalidTokenError("Token claims are malformed.") from exc


__all__ = [
    "PyJWTCodec",
    "TokenClaims",
    "TokenType",
    "TokenPair",
    "JwtPayload",
    "TokenError",
    "InvalidTokenError",
    "ExpiredTokenError",
]
