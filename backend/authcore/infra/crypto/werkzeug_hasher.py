"""Password hashing backed by Werkzeug's salted KDF helpers."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from authcore.services._shared.ports.password_hasher import PasswordHasher

SUPPORTED_METHODS = ("scrypt", "pbkdf2")


class WerkzeugPasswordHasher(PasswordHasher):
    """
    One-way salted password hasher.

    :param method: Werkzeug method string with its work factor, e.g.
        ``"scrypt:32768:8:1"`` or ``"pbkdf2:sha256:600000"``.
    :param salt_length: Length of the random salt.
    :raises ValueError: If the method family is not supported.
    """

    def __init__(self, method: str = "scrypt:32768:8:1", salt_length: int = 16) -> None:
        family = method.split(":", 1)[0]
        if family not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported password hash method: {method!r}")
        if salt_length < 8:
            raise ValueError("Salt length must be at least 8.")
        self.method = method
        self.salt_length = salt_length

    def hash(self, plaintext: str) -> str:
        """Return a salted hash; two calls on the same input differ."""
        return generate_password_hash(plaintext, self.method, self.salt_length)

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Compare ``plaintext`` to ``hashed`` in constant time.

        Never raises: malformed or empty hashes and non-string input
        return ``False``.
        """
        if not isinstance(plaintext, str) or not isinstance(hashed, str) or not hashed:
            return False
        try:
            return bool(check_password_hash(hashed, plaintext))
        except (ValueError, TypeError):
            return False

