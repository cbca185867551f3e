"""Shared fixtures: one app per run, one rolled-back transaction per test.

The in-memory SQLite database lives on a single connection. Each test opens
an outer transaction plus a SAVEPOINT on it and points ``db.session`` at a
session bound to that connection. Units of work commit and roll back their
own inner SAVEPOINTs; the outer transaction is discarded at teardown, so
nothing leaks between tests.
"""

from __future__ import annotations

import os
from collections.abc import Callable

import pytest
from authcore.core.config import TestingConfig
from authcore.core.extensions import db as _db
from authcore.factory import ServiceContainer, create_app, get_services
from authcore.services._shared.ports import TokenPair
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker


@pytest.fixture(scope="session")
def app():
    """Flask app built from :class:`TestingConfig` (fast hashing, fixed secret)."""
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create the ``users`` table once and keep an app context for the run."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Session on the shared connection, installed as ``db.session`` for one test."""
    outer = connection.begin()
    scoped = scoped_session(sessionmaker(bind=connection, future=True, autoflush=False))
    nested = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        nonlocal nested
        if trans.nested and not trans._parent.nested:
            nested = connection.begin_nested()

    original = db.session
    db.session.remove()
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original
        outer.rollback()


@pytest.fixture()
def client(app, session):
    return app.test_client()


@pytest.fixture()
def services(app) -> ServiceContainer:
    """The hasher, codec and services the app itself uses."""
    return get_services(app)


@pytest.fixture()
def issue_tokens(services) -> Callable[..., TokenPair]:
    """Sign an access/refresh pair for a persisted user."""

    def _issue(user) -> TokenPair:
        return services.tokens.sign_pair(user.id, user.email)

    return _issue


@pytest.fixture()
def bearer(issue_tokens) -> Callable[..., dict[str, str]]:
    """``Authorization`` header carrying a fresh access token for ``user``."""

    def _bearer(user) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_tokens(user).access_token}"}

    return _bearer


@pytest.fixture(autouse=True)
def _factories_session(session):
    """Point every factory at this test's session."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
