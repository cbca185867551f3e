"""Authentication and authorization core: ``from authcore import create_app``."""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
