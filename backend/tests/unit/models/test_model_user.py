"""Tests for the User model."""

from __future__ import annotations

import pytest
from authcore.models.user import User
from sqlalchemy.exc import IntegrityError


class TestUser:
    def test_defaults_and_timestamps(self, session):
        u = User(name="Ann", email="ann@example.com", password_hash="x")
        session.add(u)
        session.commit()

        assert len(u.id) == 36
        assert u.role == "user"
        assert u.created_at is not None
        assert u.updated_at is not None
        assert u.last_login_at is None

    def test_email_normalized_and_unique(self, session):
        u1 = User(name="Alice", email="  Alice@Example.com ", password_hash="x")
        session.add(u1)
        session.commit()
        assert u1.email == "alice@example.com"

        u2 = User(name="Alice 2", email="alice@example.com", password_hash="x")
        session.add(u2)
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_name_is_trimmed(self):
        u = User(name="  Bob  ", email="bob@example.com", password_hash="x")
        assert u.name == "Bob"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name_rejected(self, name):
        with pytest.raises(ValueError):
            User(name=name, email="c@example.com", password_hash="x")

    def test_missing_email_rejected(self):
        with pytest.raises(ValueError):
            User(name="C", email="", password_hash="x")

    def test_repr_does_not_leak_hash(self):
        u = User(name="D", email="d@example.com", password_hash="pbkdf2:secret-material")
        assert "secret-material" not in repr(u)
