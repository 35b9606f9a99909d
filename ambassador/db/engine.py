"""SQLAlchemy engine and session factory for the persisted ledger.

When DATABASE_URL is configured, build_program creates one engine with
``create_ledger_engine`` and hands a session factory to the unit of work and
the SQL-backed repos.  Without it the service runs on the in-memory stores.

The services hold per-identity locks across a whole unit of work, so the
engine is synchronous: units run in FastAPI's threadpool, one session each.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for ambassador tables."""


def sync_url(url: str) -> str:
    """Swap an async driver in DATABASE_URL for its sync counterpart."""
    return url.replace("postgresql+asyncpg", "postgresql+psycopg2")


def create_ledger_engine(url: str, *, echo: bool = False) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(
            sync_url(url),
            echo=echo,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
        )

    # One shared connection so an in-memory database outlives each session.
    engine = create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite opens transactions lazily and breaks SAVEPOINT; emit BEGIN
    # ourselves so nested units work.
    @event.listens_for(engine, "connect")
    def _no_implicit_transactions(dbapi_connection, _record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(connection) -> None:
        connection.exec_driver_sql("BEGIN")

    return engine


def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def lifespan_db(engine: Engine | None) -> AsyncGenerator[None, None]:
    if engine is None:
        logger.info("No DATABASE_URL configured; ledger runs in memory")
        yield
        return

    logger.info("Database engine created: %s", engine.url.render_as_string())
    yield
    engine.dispose()
    logger.info("Database engine disposed")
