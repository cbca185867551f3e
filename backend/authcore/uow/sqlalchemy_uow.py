"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from authcore.core.extensions import db
from authcore.repositories import UserRepository
from authcore.uow.base import UnitOfWork

log = logging.getLogger(__name__)


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    The same session is shared across all repositories for a consistent transaction.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Blocks ORM flushes that would write while it is open.
    - Applies ``SET TRANSACTION READ ONLY`` on PostgreSQL when it opened the
      transaction itself.
    - Rolls back on exit only a transaction it opened, so an enclosing
      transaction (e.g. a test fixture) keeps its state.
    - Disallows ``commit()``.
    """

    def __init__(self, *, enforce_db_readonly: bool = True) -> None:
        # Concrete session so the flush guard stays local to this scope
        super().__init__(session=db.session())
        self.enforce_db_readonly = enforce_db_readonly
        self._owned = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._owned = not self.session.in_transaction()
        event.listen(self.session, "before_flush", _block_flush)
        if self._owned and self.enforce_db_readonly:
            bind = self.session.get_bind()
            if bind.dialect.name == "postgresql":
                try:
                    self.session.execute(text("SET TRANSACTION READ ONLY"))
                except SQLAlchemyError as exc:
                    log.warning("SET TRANSACTION READ ONLY failed (%s); guards only.", exc)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned:
                self.rollback()
        finally:
            with suppress(Exception):
                event.remove(self.session, "before_flush", _block_flush)

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()


def _block_flush(session, flush_context, instances):
    if session.new or session.dirty or session.deleted:
        raise RuntimeError("Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present).")
