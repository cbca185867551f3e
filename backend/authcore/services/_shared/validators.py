"""Input rules shared by registration and profile updates."""

from __future__ import annotations

import re
from typing import Any
from uuid import UUID

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_PASSWORD_LENGTH = 8
MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 254


def is_symbol(char: str) -> bool:
    """A symbol is any character that is neither alphanumeric nor whitespace."""
    return not char.isalnum() and not char.isspace()


def name_errors(name: Any) -> list[str]:
    if not isinstance(name, str) or not name.strip():
        return ["Name is required."]
    if len(name.strip()) > MAX_NAME_LENGTH:
        return [f"Name must be at most {MAX_NAME_LENGTH} characters."]
    return []


def email_errors(email: Any) -> list[str]:
    if not isinstance(email, str) or not email.strip():
        return ["Email is required."]
    value = email.strip()
    if len(value) > MAX_EMAIL_LENGTH:
        return [f"Email must be at most {MAX_EMAIL_LENGTH} characters."]
    if not EMAIL_RE.match(value):
        return ["Email format is invalid."]
    return []


def password_errors(password: Any) -> list[str]:
    """
    Check the password strength policy.

    :param password: Candidate password.
    :returns: One message per unmet rule; empty when the password is acceptable.
    """
    if not isinstance(password, str) or not password:
        return ["Password is required."]
    errors: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if not any(c.islower() for c in password):
        errors.append("Password must contain a lowercase letter.")
    if not any(c.isupper() for c in password):
        errors.append("Password must contain an uppercase letter.")
    if not any(c.isdigit() for c in password):
        errors.append("Password must contain a digit.")
    if not any(is_symbol(c) for c in password):
        errors.append("Password must contain a symbol.")
    return errors


def is_uuid(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def normalize_email(value: str) -> str:
    """Return ``value`` trimmed and lower-cased."""
    return value.strip().lower()
