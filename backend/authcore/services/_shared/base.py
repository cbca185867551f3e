from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from authcore.services._shared.errors import StorageUnavailableError
from authcore.services._shared.policies import Role, authorize_owner
from authcore.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

log = logging.getLogger(__name__)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Collapse storage failures into a generic, retryable error.
    * Centralize the ownership check.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - No retries happen here; retry policy belongs to the caller.
    """

    def __init__(self, *, role_override: bool = True) -> None:
        """
        :param role_override: Whether admins bypass the ownership check.
        :type role_override: bool
        """
        self.role_override = role_override

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, enforce_db_readonly: bool = True) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(enforce_db_readonly=enforce_db_readonly)

    # -------------------------- Error handling ------------------------------

    @contextmanager
    def storage_guard(self, operation: str) -> Iterator[None]:
        """
        Turn driver/connection failures into :class:`StorageUnavailableError`.

        The driver text is logged with a traceback and never reaches the
        caller. Wrap the UoW so failures during commit are covered too.
        Constraint violations are not transient; an ``IntegrityError`` the
        service did not map itself propagates unchanged.

        :param operation: Name used in the log record.
        :type operation: str
        :raises StorageUnavailableError: On any other ``SQLAlchemyError``.
        """
        try:
            yield
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            log.error("Storage failure during %s", operation, exc_info=True)
            raise StorageUnavailableError() from exc

    # --------------------------- AuthZ --------------------------------

    def ensure_owner(self, actor_id: str | None, owner_id: str, *, actor_role: Role | str) -> None:
        """
        Ensure the current actor is the resource owner (or an admin when the
        override is enabled). Evaluated on every call, never cached.

        :raises ForbiddenError: If the actor may not act on ``owner_id``.
        """
        authorize_owner(
            actor_id,
            owner_id,
            caller_role=actor_role,
            role_override=self.role_override,
        )
