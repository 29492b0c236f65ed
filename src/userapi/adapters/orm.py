"""ABOUTME: The users table for the imperative mapping
ABOUTME: Column limits mirror the field rules in userapi.domain.validators"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import TIMESTAMP, Column, Index, Integer, String, Table, TypeDecorator
from sqlalchemy.engine.interfaces import Dialect
from sqlalchemy.orm import registry


class UTCDateTime(TypeDecorator):
    """Stores aware datetimes as UTC and reads them back aware, including from SQLite."""

    impl = TIMESTAMP(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> datetime | None:
        if isinstance(value, datetime) and value.tzinfo is not None:
            return value.astimezone(UTC)
        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


def _now() -> datetime:
    return datetime.now(UTC)


mapper_registry = registry()
metadata = mapper_registry.metadata

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(50), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("bio", String(200), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False, default=_now),
)

# name search and sort
Index("ix_users_name", users.c.name)
