"""
Wanderlust Backend - Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   `build_engine()` creates an async engine from Settings; the application
       factory stores the engine and session factory on `app.state`, and
       `get_db_session` hands each request its own session that commits on
       success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.

Connection Pooling Strategy:
    PostgreSQL (asyncpg): pooled, sized from DB_POOL_SIZE / DB_MAX_OVERFLOW,
        pre-ping enabled, connections recycled hourly.
    SQLite (aiosqlite):   a single shared connection (StaticPool) so an
        in-memory database survives across sessions in local runs and tests.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from wanderlust.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers models with one shared metadata object (used by Alembic and by
    `create_all()` when DB_AUTO_CREATE is set).
    """
    pass


class DocumentValidationError(ValueError):
    """
    Raised by the store when a row is missing required values.

    `errors` holds one message per offending column, in column order.
    """

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


@event.listens_for(Base, "before_insert", propagate=True)
def _check_required_columns(mapper, connection, target) -> None:
    """Reject inserts that leave a NOT NULL column without a value or default."""
    errors = []
    for column in mapper.columns:
        if column.nullable or column.primary_key:
            continue
        if column.default is not None or column.server_default is not None:
            continue
        if getattr(target, mapper.get_property_by_column(column).key) is None:
            errors.append(f"Path `{column.key}` is required.")
    if errors:
        raise DocumentValidationError(errors)


# ── Engine Configuration ──────────────────────────────────────────────────
def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for `settings.database_url`."""
    if settings.is_sqlite:
        return create_async_engine(
            settings.database_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=settings.log_level == "DEBUG",
        )
    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: attributes stay readable after commit
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory on `app.state`
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables (local development and tests)."""
    # Models must be imported so their tables are registered on Base.metadata.
    from wanderlust import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """Close all pooled connections during application shutdown."""
    await engine.dispose()
