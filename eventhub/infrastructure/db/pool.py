from __future__ import annotations

import logging
from typing import Optional

from psycopg_pool import AsyncConnectionPool

from eventhub.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_pool: Optional[AsyncConnectionPool] = None


def _with_connect_timeout(dsn: str, seconds: int) -> str:
    """Bound how long a single connection attempt may hang."""
    if "connect_timeout=" in dsn:
        return dsn
    sep = "&" if "?" in dsn else "?"
    return f"{dsn}{sep}connect_timeout={seconds}"


def build_pool(settings: Settings) -> AsyncConnectionPool:
    # created closed; open_pool() or the app lifespan opens it
    return AsyncConnectionPool(
        _with_connect_timeout(settings.database_url, settings.db_connect_timeout),
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        timeout=settings.db_pool_timeout,
        open=False,
    )


def get_pool() -> AsyncConnectionPool:
    global _pool
    if _pool is None:
        _pool = build_pool(get_settings())
    return _pool


async def open_pool(*, wait_seconds: float | None = None) -> AsyncConnectionPool:
    """Open the shared pool; optionally block until min_size connections are up."""
    pool = get_pool()
    await pool.open()
    if wait_seconds is not None:
        await pool.wait(timeout=wait_seconds)
    logger.info("db pool open", extra={"max_size": pool.max_size})
    return pool


async def close_pool() -> None:
    global _pool
    pool, _pool = _pool, None
    if pool is not None:
        await pool.close()
