"""ABOUTME: Transaction boundary for the user service
ABOUTME: A `with uow:` block sees one session; it commits on a clean exit and rolls back when the block raises"""

from __future__ import annotations

import abc
from types import TracebackType
from typing import Self

from sqlalchemy.orm import Session, sessionmaker

from userapi.adapters.sql_repository import SqlAlchemyUserRepository
from userapi.service_layer.repositories import UserRepository


class AbstractUnitOfWork(abc.ABC):
    users: UserRepository

    def __enter__(self) -> Self:
        self._begin()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._end()

    def _begin(self) -> None:  # noqa: B027
        pass

    def _end(self) -> None:  # noqa: B027
        pass

    @abc.abstractmethod
    def commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    Each `with` block gets a fresh session from `session_factory`, so one
    instance can be reused for several transactions in turn but not nested.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory
        self._session: Session | None = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("SqlAlchemyUnitOfWork used outside a `with` block")
        return self._session

    def _begin(self) -> None:
        self._session = self.session_factory()
        self.users = SqlAlchemyUserRepository(self._session)

    def _end(self) -> None:
        self.session.close()
        self._session = None

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
