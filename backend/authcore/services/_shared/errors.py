"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. Each one carries a closed :class:`Reason` tag plus a message that is
safe to show to clients. The translation to HTTP responses happens in
``authcore/core/errors.py``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, *markers: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name (``uq_users_email``); SQLite only
    reports the column (``users.email``), so callers may pass both.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param markers: Constraint names or column paths to look for.
    :returns: ``True`` if any marker appears in the driver message.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return any(marker.lower() in message for marker in markers)


class Reason(str, Enum):
    """Closed set of failure kinds surfaced by the auth core."""

    INVALID_INPUT = "invalid_input"
    NO_TOKEN = "no_token"
    INVALID_TOKEN = "invalid_token"
    EXPIRED_TOKEN = "expired_token"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"
    USER_NOT_FOUND = "user_not_found"
    USER_EXISTS = "user_exists"
    EMAIL_TAKEN = "email_taken"
    NOT_OWNER = "not_owner"
    STORAGE_UNAVAILABLE = "storage_unavailable"


DEFAULT_MESSAGES: dict[Reason, str] = {
    Reason.INVALID_INPUT: "Invalid input",
    Reason.NO_TOKEN: "Authentication required",
    Reason.INVALID_TOKEN: "Invalid token",
    Reason.EXPIRED_TOKEN: "Token has expired",
    Reason.INVALID_CREDENTIALS: "Invalid email or password",
    Reason.INVALID_REFRESH_TOKEN: "Invalid refresh token",
    Reason.USER_NOT_FOUND: "User not found",
    Reason.USER_EXISTS: "User already exists",
    Reason.EMAIL_TAKEN: "Email already exists",
    Reason.NOT_OWNER: "You can only modify your own profile",
    Reason.STORAGE_UNAVAILABLE: "Service temporarily unavailable",
}


# --------------------------------------------------------------------------- #
# Base type
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors; the API layer maps them to status codes.
    - ``message`` is always client-safe; internal causes are chained via
      ``raise ... from`` and only reach the logs.
    """

    default_reason: Reason = Reason.INVALID_INPUT

    def __init__(self, reason: Reason | None = None, message: str | None = None) -> None:
        self.reason = reason or self.default_reason
        self.message = message or DEFAULT_MESSAGES[self.reason]
        super().__init__(self.message)


# --------------------------------------------------------------------------- #
# Specific kinds
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """
    Raised when input is missing or malformed.

    :param message: Summary message.
    :param errors: Per-field messages, e.g. ``{"email": ["..."]}``.
    """

    default_reason = Reason.INVALID_INPUT

    def __init__(self, message: str = "Invalid input", errors: dict[str, Any] | None = None) -> None:
        super().__init__(Reason.INVALID_INPUT, message)
        self.errors = errors or {}


class UnauthorizedError(ServiceError):
    """Bad credentials or a missing/invalid/expired token."""

    default_reason = Reason.INVALID_TOKEN


class ForbiddenError(ServiceError):
    """Authenticated, but not permitted to act on the target resource."""

    default_reason = Reason.NOT_OWNER


class NotFoundError(ServiceError):
    """The referenced user no longer exists."""

    default_reason = Reason.USER_NOT_FOUND


class ConflictError(ServiceError):
    """A uniqueness rule (email) would be violated."""

    default_reason = Reason.USER_EXISTS


class StorageUnavailableError(ServiceError):
    """
    The user store could not be reached (connectivity, pool timeout).

    Transient: callers may retry. The message never includes driver text.
    """

    default_reason = Reason.STORAGE_UNAVAILABLE
