"""Liveness endpoint reporting whether the user store answers."""

from __future__ import annotations

from flask import Blueprint, current_app

from authcore.api.deps import json_response, timing
from authcore.core.extensions import database_ok

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """``status`` is always ``ok`` when the process serves; ``db`` says ``ok`` or ``fail``."""

    return json_response(
        {
            "status": "ok",
            "db": "ok" if database_ok() else "fail",
            "version": current_app.config.get("APP_VERSION", "dev"),
        }
    )
