from .ownership import Decision, Role, authorize_owner, decide, is_owner

__all__ = ["Decision", "Role", "authorize_owner", "decide", "is_owner"]
