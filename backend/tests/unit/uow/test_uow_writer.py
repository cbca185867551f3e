"""Tests for the read-write SQLAlchemy Unit of Work."""

from __future__ import annotations

import pytest
from authcore.uow import SQLAlchemyUnitOfWork

from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, session):
        with SQLAlchemyUnitOfWork() as uow:
            uow.users.insert(name="Ann", email="ann@example.com", password_hash="h")

        with SQLAlchemyUnitOfWork() as uow:
            assert uow.users.exists_by_email("ann@example.com") is True

    def test_rolls_back_on_error(self, session):
        with pytest.raises(RuntimeError):
            with SQLAlchemyUnitOfWork() as uow:
                uow.users.insert(name="Bob", email="bob@example.com", password_hash="h")
                raise RuntimeError("boom")

        with SQLAlchemyUnitOfWork() as uow:
            assert uow.users.exists_by_email("bob@example.com") is False

    def test_rollback_keeps_previously_committed_rows(self, session):
        user = UserFactory()
        user_id = user.id

        with pytest.raises(RuntimeError):
            with SQLAlchemyUnitOfWork() as uow:
                uow.users.delete_by_id(user_id)
                raise RuntimeError("boom")

        with SQLAlchemyUnitOfWork() as uow:
            assert uow.users.find_by_id(user_id) is not None
