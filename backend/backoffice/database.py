"""
Back-Office Backend: Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling, provides a session
       dependency that auto-commits on success and auto-rolls-back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Transaction boundary:
    One request == one transaction. Multi-step workflows (the cascading
    user deletion in particular) rely on this: if any step raises, the
    rollback in get_db_session discards every earlier step as well.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from backoffice.config import settings


def _engine_options() -> dict:
    """Pool options for the configured backend (SQLite rejects pool sizing)."""
    options = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,  # Recycle after 1 hour to prevent stale connections
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options())

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: response models are built from ORM objects after
# the service returns, which would otherwise trigger lazy reloads.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic reads for autogenerate and
    the test suite uses for create_all on SQLite.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler (the handler performs queries)
        3. On success: commits the transaction
        4. On error: rolls back the transaction (discards changes)
        5. Always: closes the session (returns connection to pool)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            # Roll back for ANY failure, including non-DB errors raised by
            # the service after some writes were flushed
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections; called from the lifespan shutdown."""
    await engine.dispose()
