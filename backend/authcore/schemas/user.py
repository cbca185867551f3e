"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields

from authcore.services._shared.policies import Role


class UserSchema(Schema):
    """Public representation of a user."""

    id = fields.String(required=True)
    name = fields.String(required=True)
    email = fields.String(required=True)
    role = fields.Enum(Role, by_value=True, required=True)
    created_at = fields.DateTime(data_key="createdAt", required=True)
    updated_at = fields.DateTime(data_key="updatedAt", required=True)


class UserUpdateSchema(Schema):
    """Profile update payload; omitted keys stay unchanged."""

    class Meta:
        unknown = EXCLUDE

    name = fields.String(load_default=None)
    email = fields.String(load_default=None)
    password = fields.String(load_default=None)


class UserListQuerySchema(Schema):
    """Supported query parameters for listing users."""

    class Meta:
        unknown = EXCLUDE

    limit = fields.Integer(load_default=20)
    offset = fields.Integer(load_default=0)


class UserListSchema(Schema):
    """One page of users with paging metadata."""

    items = fields.List(fields.Nested(UserSchema), data_key="users")
    total = fields.Integer()
    limit = fields.Integer()
    offset = fields.Integer()
    has_more = fields.Boolean(data_key="hasMore")
