"""Persistence-only repository base for SQLAlchemy 2.x.

Repositories stage and flush; they never commit or roll back. The Unit of
Work that owns the session decides the transaction outcome.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from authcore.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Generic repository for one mapped class.

    Subclasses set ``model`` and may override :meth:`_updatable_fields`
    and :meth:`_default_order`.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session shared across the Unit of Work scope. Falls
            back to the Flask-scoped ``db.session`` when omitted.
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Hooks ------------------------------------

    def _pk(self) -> InstrumentedAttribute[Any]:
        pk = getattr(self.model, "id", None)
        if pk is None:
            raise RuntimeError(f"{self.model.__name__} has no 'id' column.")
        return pk

    def _updatable_fields(self) -> set[str]:
        """Keys an update mapping may contain."""
        return set()

    def _default_order(self) -> Sequence[InstrumentedAttribute[Any]]:
        """Columns listing is ordered by; the primary key is always appended."""
        return ()

    # ------------------------------ Writes -----------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so defaults and the PK materialize."""
        self.session.add(instance)
        self.session.flush()
        return instance

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.session.flush()

    def flush(self) -> None:
        self.session.flush()

    def assign_updates(self, instance: E, fields: Mapping[str, Any]) -> E:
        """Assign whitelisted keys through ``setattr`` (so ``@validates`` runs) and flush.

        :raises ValueError: When ``fields`` names a key outside the whitelist.
        """
        rejected = sorted(set(fields) - self._updatable_fields())
        if rejected:
            raise ValueError(f"Fields not updatable: {rejected}")
        for key, value in fields.items():
            setattr(instance, key, value)
        self.session.flush()
        return instance

    # ------------------------------ Reads ------------------------------------

    def get(self, entity_id: Any) -> E | None:
        stmt = select(self.model).where(self._pk() == entity_id)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def count(self) -> int:
        stmt = select(func.count()).select_from(self.model)
        return int(self.session.execute(stmt).scalar_one())

    def list(self, *, limit: int | None = None, offset: int | None = None) -> list[E]:
        """Return rows in :meth:`_default_order`, PK as tiebreaker, optionally sliced."""
        order = [col.asc() for col in self._default_order()]
        stmt = select(self.model).order_by(*order, self._pk().asc())
        if limit is not None:
            stmt = stmt.limit(int(limit))
        if offset is not None:
            stmt = stmt.offset(int(offset))
        return list(self.session.execute(stmt).scalars().all())
