"""User endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from authcore.api.deps import (
    current_user,
    json_body,
    json_response,
    optional_auth,
    require_auth,
    require_user,
    services,
    timing,
)
from authcore.schemas import UserListQuerySchema, UserListSchema, UserSchema, UserUpdateSchema
from authcore.services.users.dto import UserListIn, UserUpdateIn

bp = Blueprint("users", __name__)

user_schema = UserSchema()
user_list_schema = UserListSchema()
user_update_schema = UserUpdateSchema()
user_list_query_schema = UserListQuerySchema()


@bp.get("")
@optional_auth
@timing
def list_users():
    """Return a page of users; ``meta.editableIds`` lists those the caller may modify."""

    query = user_list_query_schema.load(request.args)
    users = services().users
    page = users.list_users(UserListIn(**query))
    viewer = current_user()
    editable = [u.id for u in page.items if users.can_modify(viewer, u.id)]
    return json_response({"data": user_list_schema.dump(page), "meta": {"editableIds": editable}})


@bp.get("/<user_id>")
@optional_auth
@timing
def get_user(user_id: str):
    """Return a single user and whether the caller may modify it."""

    users = services().users
    user = users.get_user(user_id)
    can_modify = users.can_modify(current_user(), user.id)
    return json_response({"data": user_schema.dump(user), "meta": {"canModify": can_modify}})


@bp.put("/<user_id>")
@require_auth
@timing
def update_user(user_id: str):
    """Update the caller's own profile (or any profile, for admins)."""

    data = user_update_schema.load(json_body())
    user = services().users.update_user(require_user(), user_id, UserUpdateIn(**data))
    return json_response({"data": user_schema.dump(user), "message": "User updated successfully"})


@bp.delete("/<user_id>")
@require_auth
@timing
def delete_user(user_id: str):
    """Delete the caller's own account (or any account, for admins)."""

    services().users.delete_user(require_user(), user_id)
    return json_response({"data": None, "message": "User deleted successfully"})
