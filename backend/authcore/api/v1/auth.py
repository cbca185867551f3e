"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint

from authcore.api.deps import json_body, json_response, require_auth, require_user, services, timing
from authcore.schemas import (
    AuthResultSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    UserSchema,
)
from authcore.services.credentials.dto import LoginIn, RegisterIn
from authcore.services.tokens.dto import RefreshIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
auth_result_schema = AuthResultSchema()
user_schema = UserSchema()


@bp.post("/register")
@timing
def register():
    """Register a new user and return it with a token pair."""

    data = register_schema.load(json_body())
    result = services().credentials.register(RegisterIn(**data))
    body = {"data": auth_result_schema.dump(result), "message": "User registered successfully"}
    return json_response(body, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(json_body())
    result = services().credentials.login(LoginIn(**data))
    return json_response({"data": auth_result_schema.dump(result), "message": "Login successful"})


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a refresh token for a new token pair."""

    data = refresh_schema.load(json_body())
    result = services().refresh.refresh(RefreshIn(**data))
    return json_response(
        {"data": auth_result_schema.dump(result), "message": "Token refreshed successfully"}
    )


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user profile."""

    return json_response({"data": user_schema.dump(require_user())})
