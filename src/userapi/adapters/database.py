"""ABOUTME: Engine and session factory construction, plus the User mapping
ABOUTME: SQLite (in-memory or file) for development and tests, PostgreSQL in deployment"""

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import clear_mappers as sqla_clear_mappers
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from userapi.adapters import orm
from userapi.config import SQLITE_DB_URI, bool_environ_get, get_db_uri
from userapi.domain import users

_mapped = False


def _engine_options(database_url: str) -> dict[str, Any]:
    if database_url.startswith("postgresql"):
        return {"pool_pre_ping": True, "pool_recycle": 3600}
    if database_url == SQLITE_DB_URI:
        # in-memory: every thread has to share the one connection or it sees an empty database
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {}


def create_session_factory(database_url: str = "", echo: bool = False, create_tables: bool = False) -> sessionmaker:
    """
    Build a session factory for `database_url`, or for the configured database
    when it is empty. DB_ECHO=true in the environment turns on SQL echo.
    """
    database_url = database_url or get_db_uri()
    engine = create_engine(database_url, echo=echo or bool_environ_get("DB_ECHO"), **_engine_options(database_url))
    if create_tables:
        orm.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)


def start_mappers() -> None:
    """Map User onto the users table. Safe to call more than once."""
    global _mapped
    if not _mapped:
        orm.mapper_registry.map_imperatively(users.User, orm.users)
        _mapped = True


def clear_mappers() -> None:
    global _mapped
    sqla_clear_mappers()
    _mapped = False
