"""Centralized JSON error handling for the API.

Every error leaves the service as::

    {"error": {"message": str, "status": int, "code": str, "request_id": str}}

plus ``details`` when validation produced per-field messages.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from authcore.core.logger import ensure_request_id
from authcore.services._shared.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    StorageUnavailableError,
    UnauthorizedError,
    ValidationError,
)

log = logging.getLogger(__name__)


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        415: "unsupported_media_type",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_error(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build the error envelope.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: ``{"error": {...}}`` dictionary.
    """
    body: dict[str, Any] = {
        "message": message,
        "status": int(status),
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return {"error": body}


def _error_response(payload: dict[str, Any], status: int) -> tuple[Response, int]:
    return jsonify(payload), int(status)


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier. Defaults to ``"bad_request"``.
    details : dict[str, Any] | None, optional
        Optional structured payload included in the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize into the wire error envelope."""
        return _as_error(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


# status per service error kind; order matters for subclass checks
_SERVICE_STATUS: tuple[tuple[type[ServiceError], HTTPStatus], ...] = (
    (ValidationError, HTTPStatus.BAD_REQUEST),
    (UnauthorizedError, HTTPStatus.UNAUTHORIZED),
    (ForbiddenError, HTTPStatus.FORBIDDEN),
    (NotFoundError, HTTPStatus.NOT_FOUND),
    (ConflictError, HTTPStatus.CONFLICT),
    (StorageUnavailableError, HTTPStatus.SERVICE_UNAVAILABLE),
)


def to_api_error(exc: ServiceError) -> APIError:
    """
    Map a service-level error to an :class:`APIError`.

    :param exc: Error raised by the service layer.
    :returns: API error carrying the status, the reason as ``code`` and the
        client-safe message.
    """
    status = HTTPStatus.BAD_REQUEST
    for kind, mapped in _SERVICE_STATUS:
        if isinstance(exc, kind):
            status = mapped
            break
    details = {"errors": exc.errors} if isinstance(exc, ValidationError) and exc.errors else None
    return APIError(exc.message, status_code=status, code=exc.reason.value, details=details)


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - 5xx are logged with ``exc_info`` for traceability; 4xx as warnings.
    - Driver and internal error text never reaches the client.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        payload = err.to_dict()
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "APIError: code=%s status=%s msg=%s",
            err.code,
            err.status_code,
            err.message,
        )
        return _error_response(payload, err.status_code)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        return handle_api_error(to_api_error(err))

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND and request:
            message = f"Route '{request.path}' not found"
        level = log.error if status >= 500 else log.warning
        level("HTTPException: code=%s status=%s detail=%s", error_code, status, message)
        return _error_response(_as_error(status=status, code=error_code, message=message), status)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        payload = _as_error(
            status=HTTPStatus.BAD_REQUEST,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.messages},
        )
        log.warning("ValidationError: fields=%s", sorted(err.messages_dict or {}))
        return _error_response(payload, HTTPStatus.BAD_REQUEST)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        log.error("IntegrityError", exc_info=True)
        payload = _as_error(status=HTTPStatus.CONFLICT, code="conflict", message="Resource conflict")
        return _error_response(payload, HTTPStatus.CONFLICT)

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        log.error("OperationalError", exc_info=True)
        payload = _as_error(
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            code="service_unavailable",
            message="Service temporarily unavailable",
        )
        return _error_response(payload, HTTPStatus.SERVICE_UNAVAILABLE)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        log.error("Unhandled exception", exc_info=True)
        payload = _as_error(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        return _error_response(payload, HTTPStatus.INTERNAL_SERVER_ERROR)
