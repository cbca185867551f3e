"""
Client-side token lifecycle.

Holds the signed-in identity in a durable store, reports whether it is still
usable, and refreshes it shortly before the access token expires.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt as pyjwt

from authcore.client.api import ApiError, AuthApiClient
from authcore.client.store import AuthUser, ClientUser, TokenStore

log = logging.getLogger(__name__)

DEFAULT_REFRESH_THRESHOLD = timedelta(minutes=5)
DEFAULT_TOKEN_LIFETIME = timedelta(hours=1)


class SessionExpiredError(Exception):
    """The stored session could not be refreshed; sign in again."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def token_expiry(token: str) -> datetime | None:
    """
    Read ``exp`` from a JWT without verifying it.

    The client holds no signing secret; the server still verifies every
    token it receives.
    """
    try:
        claims = pyjwt.decode(token, options={"verify_signature": False})
    except pyjwt.PyJWTError:
        return None
    exp = claims.get("exp")
    if not isinstance(exp, int | float):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


class TokenLifecycleManager:
    """
    Parameters
    ----------
    api : AuthApiClient
        Client for the auth endpoints.
    store : TokenStore
        Where the current :class:`AuthUser` is kept.
    refresh_threshold : timedelta, optional
        Refresh once the access token has less than this left. Defaults to
        five minutes.
    fallback_lifetime : timedelta, optional
        Lifetime assumed when the access token carries no readable ``exp``.
    clock : Callable[[], datetime], optional
        Source of the current aware UTC time.

    Notes
    -----
    Refreshes are single-flight: concurrent :meth:`ensure_fresh` calls in
    one process trigger one refresh request. A failed refresh is not
    retried; the store is cleared instead.
    """

    def __init__(
        self,
        api: AuthApiClient,
        store: TokenStore,
        *,
        refresh_threshold: timedelta = DEFAULT_REFRESH_THRESHOLD,
        fallback_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.api = api
        self.store = store
        self.refresh_threshold = refresh_threshold
        self.fallback_lifetime = fallback_lifetime
        self._clock = clock
        self._refresh_lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Sign-in / sign-out
    # ------------------------------------------------------------------ #

    def login(self, email: str, password: str) -> AuthUser:
        return self._store_result(self.api.login(email, password))

    def register(self, name: str, email: str, password: str) -> AuthUser:
        return self._store_result(self.api.register(name, email, password))

    def logout(self) -> None:
        self.store.clear()

    def current(self) -> AuthUser | None:
        return self.store.load()

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    def is_authenticated(self) -> bool:
        """True iff an access token is stored and has not expired yet."""
        auth_user = self.store.load()
        return bool(auth_user and auth_user.access_token and auth_user.token_expires > self._clock())

    def needs_refresh(self) -> bool:
        """True iff tokens are stored and the access token expires within the threshold."""
        auth_user = self.store.load()
        if auth_user is None or not auth_user.refresh_token:
            return False
        return auth_user.token_expires - self._clock() < self.refresh_threshold

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self) -> AuthUser:
        """
        Exchange the stored refresh token for a new pair and replace the store.

        :raises SessionExpiredError: The refresh failed; the store was cleared.
        """
        with self._refresh_lock:
            return self._refresh_locked()

    def ensure_fresh(self) -> AuthUser | None:
        """
        Refresh when needed and return the current identity.

        :raises SessionExpiredError: A needed refresh failed.
        """
        if not self.needs_refresh():
            return self.store.load()
        with self._refresh_lock:
            # Another thread may have refreshed while we waited
            if not self.needs_refresh():
                return self.store.load()
            return self._refresh_locked()

    def access_token(self) -> str | None:
        """Return a usable access token, refreshing first if needed."""
        self.ensure_fresh()
        if not self.is_authenticated():
            return None
        auth_user = self.store.load()
        return auth_user.access_token if auth_user else None

    def authorization_header(self) -> dict[str, str]:
        token = self.access_token()
        return {"Authorization": f"Bearer {token}"} if token else {}

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _refresh_locked(self) -> AuthUser:
        auth_user = self.store.load()
        if auth_user is None or not auth_user.refresh_token:
            self.store.clear()
            raise SessionExpiredError("No refresh token available")
        try:
            # A malformed 200 body surfaces as ApiError from _store_result too
            return self._store_result(self.api.refresh(auth_user.refresh_token))
        except ApiError as exc:
            log.warning("Token refresh failed; clearing session", extra={"reason": exc.status})
            self.store.clear()
            raise SessionExpiredError("Session expired, please sign in again") from exc

    def _store_result(self, data: dict[str, Any]) -> AuthUser:
        try:
            access_token = str(data["token"])
            refresh_token = str(data["refreshToken"])
            user = ClientUser.from_wire(data["user"])
        except (KeyError, TypeError) as exc:
            raise ApiError(200, "Malformed auth response") from exc
        expires = token_expiry(access_token) or (self._clock() + self.fallback_lifetime)
        auth_user = AuthUser(
            user=user,
            access_token=access_token,
            refresh_token=refresh_token,
            token_expires=expires,
        )
        self.store.save(auth_user)
        return auth_user
