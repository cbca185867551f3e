"""
authcore.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) the service layer depends on.

Modules
-------
- :mod:`user_repository`:
    Defines :class:`~.UserRepositoryPort` plus the :class:`~.UserRecord`
    and :class:`~.UserCredentials` views it returns.

- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`: one-way salted hashing.

- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`: signing and verification of identity
    tokens, with its claim/payload types and error hierarchy.

Design Notes
------------
Concrete adapters live under ``authcore.infra`` and
``authcore.repositories``.
"""

from __future__ import annotations

from .password_hasher import PasswordHasher
from .token_provider import (
    ExpiredTokenError,
    InvalidTokenError,
    JwtPayload,
    TokenClaims,
    TokenError,
    TokenPair,
    TokenProvider,
    TokenType,
)
from .user_repository import UserCredentials, UserRecord, UserRepositoryPort

__all__ = [
    "PasswordHasher",
    "TokenProvider",
    "TokenClaims",
    "TokenType",
    "TokenPair",
    "JwtPayload",
    "TokenError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "UserRepositoryPort",
    "UserRecord",
    "UserCredentials",
]
