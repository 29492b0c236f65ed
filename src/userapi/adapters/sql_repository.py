"""ABOUTME: SQLAlchemy implementation of the user repository
ABOUTME: Queries the users table through a session owned by the unit of work"""

from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from userapi.adapters import orm
from userapi.domain.users import User
from userapi.service_layer.repositories import SORTABLE_FIELDS, UserRepository


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, user: User) -> None:
        self.session.add(user)
        # flush so the database assigns the integer id
        self.session.flush()

    def get(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        return self.session.scalars(select(User).where(orm.users.c.email == email)).first()

    def all(self) -> list[User]:
        return list(self.session.scalars(select(User).order_by(orm.users.c.id)))

    def delete(self, user: User) -> None:
        self.session.delete(user)

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(orm.users)) or 0

    def filter_paginated(
        self,
        search: str | None = None,
        sort_by: str = "id",
        sort_order: str = "asc",
        limit: int | None = None,
        offset: int = 0,
    ) -> list[User]:
        if sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort users by '{sort_by}'")

        statement = select(User)
        if search:
            pattern = f"%{search}%"
            statement = statement.where(or_(orm.users.c.name.ilike(pattern), orm.users.c.email.ilike(pattern)))

        column = orm.users.c[sort_by]
        statement = statement.order_by(column.desc() if sort_order == "desc" else column.asc())
        if offset:
            statement = statement.offset(offset)
        if limit is not None:
            statement = statement.limit(limit)
        return list(self.session.scalars(statement))
