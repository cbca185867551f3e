"""The transaction boundary services run their storage steps in."""

from __future__ import annotations

from abc import ABC, abstractmethod

from authcore.services._shared.ports.user_repository import UserRepositoryPort


class UnitOfWork(ABC):
    """
    One connection, one transaction, one ``users`` repository bound to both.

    Implementations decide the outcome on ``__exit__`` and always release the
    connection, whichever way the block ends.
    """

    users: UserRepositoryPort

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
