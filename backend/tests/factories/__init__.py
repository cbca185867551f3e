"""factory_boy base wired to the per-test session."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Holder for the session installed by the ``session`` fixture."""

    _session = None

    @classmethod
    def set(cls, session):
        cls._session = session

    @classmethod
    def get(cls):
        if cls._session is None:
            raise RuntimeError("Factories session not set. Did you pass the 'session' fixture?")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Commits each row.

    A commit only releases the session's SAVEPOINT, so seeded rows survive a
    unit of work rolling back later in the same test, as real rows would.
    """

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "commit"
