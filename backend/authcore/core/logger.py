"""JSON logging with request correlation and credential redaction.

Every record carries the request id of the HTTP request that produced it
and, once a bearer token has been resolved, the caller's user id. Values
under credential-bearing keys are masked before serialization.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import IO, Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")

# Client-supplied ids are echoed into logs and headers; keep them tame
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

# ``extra`` keys copied onto the JSON payload
EXTRA_KEYS = ("endpoint", "elapsed_ms", "user_id", "reason", "event")

# Masked even when passed through ``extra``
REDACTED_KEYS = frozenset({"password", "password_hash", "token", "refresh_token", "authorization"})
MASK = "***"


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        payload.update({key: MASK for key in REDACTED_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp ``request_id`` (and ``user_id`` when known) onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not has_request_context():
            record.request_id = None
            return True
        record.request_id = ensure_request_id()
        user = g.get("current_user")
        if user is not None and not hasattr(record, "user_id"):
            record.user_id = user.id
        return True


def ensure_request_id() -> str:
    """Return the id of the current request, adopting a safe inbound header or minting a UUID4."""
    if not has_request_context():
        return str(uuid4())
    current = g.get("request_id")
    if current:
        return current
    inbound = (request.headers.get(h) for h in CORRELATION_HEADERS)
    request_id = next((v for v in inbound if v and _SAFE_REQUEST_ID.match(v)), None) or str(uuid4())
    g.request_id = request_id
    return request_id


def configure_logging(level: str | int = "INFO", *, stream: IO[str] | None = None) -> None:
    """Send root logging to ``stream`` (stdout by default) as JSON."""
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Reset the request id per request and echo it back on the response."""
    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _seed_request_id() -> None:
        # The app context may outlive a request (tests, CLI); start clean
        g.pop("request_id", None)
        g.pop("current_user", None)
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["JSONFormatter", "configure_logging", "ensure_request_id", "init_app"]
