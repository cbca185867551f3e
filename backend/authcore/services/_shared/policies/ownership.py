"""Ownership policy for mutating operations on user resources."""

from __future__ import annotations

from enum import Enum

from authcore.services._shared.errors import ForbiddenError, Reason


class Role(str, Enum):
    """Closed set of caller roles."""

    USER = "user"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: str | None) -> Role:
        """Map a stored role tag onto :class:`Role`; unknown tags become ``USER``."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.USER


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource."""
    return actor_id is not None and str(actor_id) == str(owner_id)


def decide(
    caller_role: Role | str,
    caller_id: str | None,
    target_id: str,
    *,
    role_override: bool = True,
) -> Decision:
    """
    Decide whether ``caller_id`` may mutate the resource ``target_id``.

    Allowed iff the caller is the target, or the caller is an admin and the
    role override is enabled. Pure: no I/O, no caching.
    """
    if is_owner(actor_id=caller_id, owner_id=target_id):
        return Decision.ALLOW
    if role_override and Role.parse(caller_role) is Role.ADMIN:
        return Decision.ALLOW
    return Decision.DENY


def authorize_owner(
    caller_id: str | None,
    target_id: str,
    *,
    caller_role: Role | str = Role.USER,
    role_override: bool = True,
) -> None:
    """
    Raise unless :func:`decide` allows the call.

    :raises ForbiddenError: ``NOT_OWNER`` when denied.
    """
    if decide(caller_role, caller_id, target_id, role_override=role_override) is Decision.DENY:
        raise ForbiddenError(Reason.NOT_OWNER)
