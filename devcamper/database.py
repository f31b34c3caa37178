"""
DevCamper API — Database Engine & Session Management
======================================================

What:  Async SQLAlchemy engine factory, declarative base and the per-request
       session dependency.
How:   `build_engine()` creates an engine from Settings; the application
       context owns it. `get_db_session` yields a session from the context's
       factory and rolls back on error; services commit their own writes.

Connection pooling (PostgreSQL):
    pool_size / max_overflow from settings, pool_pre_ping on, connections
    recycled hourly. SQLite (tests, local hacking) uses SQLAlchemy's default
    pool since it rejects the sizing arguments.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from devcamper.config import Settings


# Deterministic constraint names keep Alembic migrations reproducible
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    All models share this metadata; Alembic reads it for autogenerate and the
    test suite calls `Base.metadata.create_all` on it.
    """

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def build_engine(settings: Settings) -> AsyncEngine:
    """Creates the async engine described by `settings.database_url`."""
    kwargs = {
        "echo": settings.log_level == "DEBUG",
        "pool_pre_ping": settings.db_pool_pre_ping,
    }
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: response models read attributes after commit
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the application context's factory
        2. Yields it to the route handler
        3. On error: rolls back and re-raises for the exception handlers

    Writes are committed by the service methods before the route returns.
    """
    factory = request.app.state.context.session_factory
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
