"""Service layer public API.

Re-exports the framework-agnostic error types and shared DTOs so callers can
import them from :mod:`authcore.services`. Concrete services live in their own
subpackages (``credentials``, ``identity``, ``tokens``, ``users``) and are
imported from there to keep this package free of persistence imports.
"""

from __future__ import annotations

from authcore.services._shared.dto import AuthResultOut, UserPublicOut
from authcore.services._shared.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    Reason,
    ServiceError,
    StorageUnavailableError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "AuthResultOut",
    "UserPublicOut",
    "Reason",
    "ServiceError",
    "ValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "StorageUnavailableError",
]
