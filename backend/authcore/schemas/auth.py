"""Authentication-related Marshmallow schemas.

Input schemas only shape the payload (types, unknown keys dropped); the
credential rules live in the services so they apply to every caller.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields

from .user import UserSchema


class RegisterSchema(Schema):
    """Input payload for account registration."""

    class Meta:
        unknown = EXCLUDE

    name = fields.String(load_default=None)
    email = fields.String(load_default=None)
    password = fields.String(load_default=None)


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    class Meta:
        unknown = EXCLUDE

    email = fields.String(load_default=None)
    password = fields.String(load_default=None)


class RefreshSchema(Schema):
    """Input payload carrying the refresh token."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(data_key="refreshToken", load_default=None)


class AuthResultSchema(Schema):
    """``{user, token, refreshToken}``; never includes the password hash."""

    user = fields.Nested(UserSchema, required=True)
    token = fields.String(attribute="access_token", required=True)
    refresh_token = fields.String(data_key="refreshToken", required=True)
