"""Version 1 of the auth API.

``REGISTRY`` pairs each blueprint with its prefix relative to ``/api/v1``:
health at the version root, credentials under ``/auth`` and profiles under
``/users``.
"""

from __future__ import annotations

from flask import Blueprint

from authcore.api.v1.auth import bp as auth_bp
from authcore.api.v1.health import bp as health_bp
from authcore.api.v1.users import bp as users_bp

API_VERSION = "v1"

REGISTRY: tuple[tuple[Blueprint, str], ...] = (
    (health_bp, ""),
    (auth_bp, "auth"),
    (users_bp, "users"),
)
