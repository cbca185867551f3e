"""Client-side helpers for applications calling the auth API."""

from __future__ import annotations

from .api import ApiError, AuthApiClient
from .manager import SessionExpiredError, TokenLifecycleManager, token_expiry
from .store import AuthUser, ClientUser, FileTokenStore, MemoryTokenStore, TokenStore

__all__ = [
    "ApiError",
    "AuthApiClient",
    "AuthUser",
    "ClientUser",
    "FileTokenStore",
    "MemoryTokenStore",
    "SessionExpiredError",
    "TokenLifecycleManager",
    "TokenStore",
    "token_expiry",
]
