"""Shared API helpers for authentication and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from authcore.factory import ServiceContainer, get_services
from authcore.services._shared.dto import UserPublicOut
from authcore.services._shared.errors import Reason, UnauthorizedError

F = TypeVar("F", bound=Callable[..., Any])


def services() -> ServiceContainer:
    """Return the service container of the current app."""
    return get_services()


def current_user() -> UserPublicOut | None:
    """Identity attached by :func:`require_auth` / :func:`optional_auth`."""
    return g.get("current_user")


def require_user() -> UserPublicOut:
    """Return the attached identity.

    :raises UnauthorizedError: When the handler runs without one.
    """
    user = current_user()
    if user is None:
        raise UnauthorizedError(Reason.NO_TOKEN)
    return user


def require_auth(func: F) -> F:
    """Reject the request unless it carries a valid access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.current_user = None
        g.current_user = services().identity.authenticate(request.headers.get("Authorization"))
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def optional_auth(func: F) -> F:
    """Attach the identity when a valid token is present; never reject."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.current_user = services().identity.authenticate_optional(
            request.headers.get("Authorization")
        )
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_body() -> dict[str, Any]:
    """Return the JSON object body, or ``{}`` when absent or not an object."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
