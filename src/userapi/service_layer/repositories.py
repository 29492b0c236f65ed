"""ABOUTME: Storage interface the user service depends on
ABOUTME: Implemented by the SQLAlchemy repository and by in-memory fakes in tests"""

from __future__ import annotations

import abc
from collections.abc import Iterable

from userapi.domain.users import User

SORTABLE_FIELDS = ("id", "name", "email")


class UserRepository(abc.ABC):
    """
    Users keyed by their integer id. `add` must leave the id set on the user,
    and emails are unique across the repository.
    """

    @abc.abstractmethod
    def add(self, user: User) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def get(self, user_id: int) -> User | None:
        raise NotImplementedError

    @abc.abstractmethod
    def get_by_email(self, email: str) -> User | None:
        """Exact, case-sensitive match."""
        raise NotImplementedError

    @abc.abstractmethod
    def all(self) -> Iterable[User]:
        """Every user, in id order."""
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, user: User) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def count(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def filter_paginated(
        self,
        search: str | None = None,
        sort_by: str = "id",
        sort_order: str = "asc",
        limit: int | None = None,
        offset: int = 0,
    ) -> list[User]:
        """
        Users whose name or email contains `search` (case-insensitive), ordered
        by `sort_by`, then cut down by `offset` and `limit`.

        Raises:
            ValueError: if `sort_by` is not one of SORTABLE_FIELDS
        """
        raise NotImplementedError
