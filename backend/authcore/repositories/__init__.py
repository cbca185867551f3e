"""SQLAlchemy repositories behind the service-layer ports."""

from __future__ import annotations

from authcore.repositories.base import BaseRepository
from authcore.repositories.user import UserRepository, to_record

__all__ = ["BaseRepository", "UserRepository", "to_record"]
