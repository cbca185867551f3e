"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import AuthResultSchema, LoginSchema, RefreshSchema, RegisterSchema
from .user import UserListQuerySchema, UserListSchema, UserSchema, UserUpdateSchema

__all__ = [
    "AuthResultSchema",
    "LoginSchema",
    "RefreshSchema",
    "RegisterSchema",
    "UserListQuerySchema",
    "UserListSchema",
    "UserSchema",
    "UserUpdateSchema",
]
