"""Tests for the service-error to HTTP mapping."""

from __future__ import annotations

import pytest
from authcore.core.errors import to_api_error
from authcore.services._shared.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    Reason,
    StorageUnavailableError,
    UnauthorizedError,
    ValidationError,
)


class TestToApiError:
    @pytest.mark.parametrize(
        ("exc", "status", "code"),
        [
            (ValidationError("Bad"), 400, "invalid_input"),
            (UnauthorizedError(Reason.NO_TOKEN), 401, "no_token"),
            (UnauthorizedError(Reason.EXPIRED_TOKEN), 401, "expired_token"),
            (ForbiddenError(), 403, "not_owner"),
            (NotFoundError(), 404, "user_not_found"),
            (ConflictError(Reason.EMAIL_TAKEN), 409, "email_taken"),
            (StorageUnavailableError(), 503, "storage_unavailable"),
        ],
    )
    def test_status_and_code(self, app, exc, status, code):
        with app.test_request_context("/"):
            err = to_api_error(exc)

        assert err.status_code == status
        assert err.code == code

    def test_validation_details_are_carried(self, app):
        with app.test_request_context("/"):
            body = to_api_error(ValidationError("Invalid", {"email": ["Email is required."]})).to_dict()

        assert body["error"]["details"] == {"errors": {"email": ["Email is required."]}}
        assert body["error"]["status"] == 400
        assert body["error"]["request_id"]
