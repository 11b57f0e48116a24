from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from typing import Any, Optional

import psycopg
from psycopg_pool import AsyncConnectionPool

from eventhub.domain.ports.unit_of_work import UnitOfWorkPort
from eventhub.infrastructure.db.users_repo import PgUserRepository

logger = logging.getLogger(__name__)


class PgUnitOfWork(UnitOfWorkPort):
    """
    Borrows one pooled connection per `async with` block.

    Work done inside the block is kept only if `commit()` was awaited before
    the block ended; otherwise (or on error) the connection is rolled back
    before it goes back to the pool.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._stack: Optional[AsyncExitStack] = None
        self._conn: Optional[psycopg.AsyncConnection] = None
        self._committed = False
        self.db_users: PgUserRepository

    async def __aenter__(self) -> "PgUnitOfWork":
        stack = AsyncExitStack()
        self._conn = await stack.enter_async_context(self._pool.connection())
        self._stack = stack
        self._committed = False
        self.db_users = PgUserRepository(self._conn)
        return self

    async def __aexit__(self, exc_type, exc_value, traceback: Any) -> None:
        stack, conn, committed = self._stack, self._conn, self._committed
        self._stack, self._conn, self._committed = None, None, False
        try:
            if conn is not None and (exc_value is not None or not committed):
                await self._discard(conn)
        finally:
            if stack is not None:
                await stack.__aexit__(exc_type, exc_value, traceback)

    @staticmethod
    async def _discard(conn: psycopg.AsyncConnection) -> None:
        try:
            await conn.rollback()
        except psycopg.Error:
            # the pool checks the connection's state on return
            logger.exception("rollback failed")

    async def commit(self) -> None:
        if self._conn is None:
            raise RuntimeError("commit() called outside of `async with`")
        await self._conn.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self._conn is not None:
            await self._conn.rollback()
        self._committed = False
