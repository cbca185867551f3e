"""Durable storage for the signed-in identity on the calling side."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ClientUser:
    """User fields as returned on the wire."""

    id: str
    name: str
    email: str
    role: str
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> ClientUser:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            email=str(data.get("email", "")),
            role=str(data.get("role", "user")),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )


@dataclass(frozen=True, slots=True)
class AuthUser:
    """
    Identity plus tokens and the absolute access-token expiry.

    :param user: The signed-in user.
    :param access_token: Current bearer token.
    :param refresh_token: Token accepted by the refresh endpoint.
    :param token_expires: Aware UTC instant at which ``access_token`` expires.
    """

    user: ClientUser
    access_token: str
    refresh_token: str
    token_expires: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": asdict(self.user),
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_expires": self.token_expires.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthUser:
        return cls(
            user=ClientUser(**data["user"]),
            access_token=str(data["access_token"]),
            refresh_token=str(data["refresh_token"]),
            token_expires=datetime.fromisoformat(data["token_expires"]),
        )


class TokenStore(Protocol):
    """Where the current :class:`AuthUser` lives between calls."""

    def load(self) -> AuthUser | None: ...

    def save(self, auth_user: AuthUser) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore(TokenStore):
    """Process-local store, mostly for tests and short-lived scripts."""

    def __init__(self, auth_user: AuthUser | None = None) -> None:
        self._auth_user = auth_user
        self._lock = threading.Lock()

    def load(self) -> AuthUser | None:
        with self._lock:
            return self._auth_user

    def save(self, auth_user: AuthUser) -> None:
        with self._lock:
            self._auth_user = auth_user

    def clear(self) -> None:
        with self._lock:
            self._auth_user = None


class FileTokenStore(TokenStore):
    """
    JSON file store.

    Writes go to a temporary file in the same directory which then replaces
    the target, so readers never observe a half-written identity.

    :param path: Location of the JSON file.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def load(self) -> AuthUser | None:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return AuthUser.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError):
            log.warning("Ignoring unreadable token store at %s", self.path)
            return None

    def save(self, auth_user: AuthUser) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".tokens-", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(auth_user.to_dict(), fh)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
