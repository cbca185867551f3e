"""Flask extension singletons: the user store and its migrations."""

from __future__ import annotations

import logging

from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData, text
from sqlalchemy.exc import SQLAlchemyError

log = logging.getLogger(__name__)

# Constraint names are stable across backends; registration and profile
# updates recognise a duplicate email by ``uq_users_email``.
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
    session_options={"autoflush": False},
)
migrate = Migrate(render_as_batch=True)


def init_app(app: Flask) -> None:
    """Bind ``db`` and ``migrate`` to ``app``.

    Importing :mod:`authcore.models` here registers the ``users`` table on
    the metadata before Alembic autogenerate inspects it.
    """
    db.init_app(app)

    from authcore import models as _models  # noqa: F401

    migrate.init_app(app, db)


def database_ok() -> bool:
    """Run ``SELECT 1`` on the current session; ``False`` if the store is unreachable."""
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        log.error("Database ping failed", exc_info=True)
        return False
    return True
