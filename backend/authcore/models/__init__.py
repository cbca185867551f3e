from authcore.models.user import User

__all__ = ["User"]
