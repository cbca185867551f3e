"""HTTP surface: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def join_prefix(*segments: str) -> str:
    """Join URL segments with single slashes, skipping empty ones.

    ``join_prefix("/api/v1/", "")`` is ``"/api/v1"``; ``join_prefix("/api",
    "v1", "/auth")`` is ``"/api/v1/auth"``.
    """
    parts = [s.strip("/") for s in segments if s.strip("/")]
    return "/" + "/".join(parts)


def register_blueprint_group(app: Flask, *, base_prefix: str, entries: Iterable[tuple[Blueprint, str]]) -> None:
    """Mount each ``(blueprint, relative_prefix)`` beneath ``base_prefix``."""
    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=join_prefix(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Mount ``/api/v1``."""
    from authcore.api import v1

    base = join_prefix(app.config.get("API_BASE_PREFIX", "/api"), v1.API_VERSION)
    register_blueprint_group(app, base_prefix=base, entries=v1.REGISTRY)


__all__ = ["init_app", "join_prefix", "register_blueprint_group"]
