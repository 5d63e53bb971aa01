"""Pooled read access to the workspace database (psycopg v3).

The assistant only reads users, workspaces, projects, tasks and sprints, so
pooled connections run in autocommit mode and, unless ``db_read_only`` is
off, with ``default_transaction_read_only`` set for the session.
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool

from pm_assistant.config import Settings, get_settings

READ_ONLY_OPTIONS = "-c default_transaction_read_only=on"

# Initialized at startup when data_backend=postgres
_pool: Optional[AsyncConnectionPool] = None


def connection_kwargs(settings: Settings) -> dict[str, Any]:
    """Per-connection arguments handed to psycopg by the pool."""
    kwargs: dict[str, Any] = {"autocommit": True}
    if settings.db_read_only:
        kwargs["options"] = READ_ONLY_OPTIONS
    return kwargs


async def init_db(settings: Optional[Settings] = None) -> None:
    """Open the workspace read pool.

    Pool bounds, acquire timeout and the read-only flag come from settings.

    Raises:
        RuntimeError: If the pool is already open.
        psycopg.OperationalError: If the database cannot be reached.
    """
    global _pool
    if _pool is not None:
        raise RuntimeError("Database pool already initialized. Call close_db() first.")

    settings = settings or get_settings()
    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        timeout=settings.db_pool_timeout_seconds,
        kwargs=connection_kwargs(settings),
        open=False,
    )
    await pool.open()
    _pool = pool


async def close_db() -> None:
    """Close the pool. No-op if it was never opened."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


def is_initialized() -> bool:
    return _pool is not None


@asynccontextmanager
async def get_connection() -> AsyncGenerator[AsyncConnection, None]:
    """Borrow a pooled connection for workspace reads.

    Raises:
        RuntimeError: If init_db() has not run.
    """
    if _pool is None:
        raise RuntimeError(
            "Database pool not initialized. Call init_db() at application startup."
        )

    async with _pool.connection() as conn:
        yield conn
