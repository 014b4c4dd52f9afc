"""
Strata DB Backend — PostgreSQL adapter via asyncpg.

Connection pool for ordinary statements; a transaction holds one pooled
connection until it commits or rolls back.

Requires asyncpg:
    pip install asyncpg
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from .base import DatabaseAdapter, ExecResult, mask_url

logger = logging.getLogger("strata.db.backends.postgres")

__all__ = ["PostgresAdapter", "rowcount_from_status"]

try:
    import asyncpg
    _HAS_ASYNCPG = True
except ImportError:
    asyncpg = None  # type: ignore
    _HAS_ASYNCPG = False


def rowcount_from_status(status: str) -> int:
    """
    Affected row count from an asyncpg command tag.

    ``"UPDATE 3"`` -> 3, ``"INSERT 0 1"`` -> 1, ``"CREATE TABLE"`` -> 0.
    """
    if not status:
        return 0
    last = status.rsplit(" ", 1)[-1]
    return int(last) if last.isdigit() else 0


class PostgresAdapter(DatabaseAdapter):
    """
    PostgreSQL adapter using asyncpg with connection pooling.

    Options:
        pool_min_size (int): default 2
        pool_max_size (int): default 10
    """

    name = "postgresql"

    def __init__(self):
        self._pool: Any = None
        self._txn_conn: Any = None
        self._txn_obj: Any = None
        self._connected = False
        self._in_transaction = False

    async def connect(self, url: str, **options) -> None:
        if self._connected:
            return

        if not _HAS_ASYNCPG:
            raise ImportError(
                "asyncpg is required for PostgreSQL support.\n"
                "Install: pip install asyncpg"
            )

        min_size = options.pop("pool_min_size", 2)
        max_size = options.pop("pool_max_size", 10)
        self._pool = await asyncpg.create_pool(
            url, min_size=min_size, max_size=max_size, **options
        )
        self._connected = True
        logger.info(f"PostgreSQL connected via asyncpg: {mask_url(url)}")

    async def disconnect(self) -> None:
        if not self._connected:
            return
        if self._txn_conn is not None:
            try:
                await self._txn_obj.rollback()
            finally:
                await self._release_txn()
        if self._pool:
            await self._pool.close()
            self._pool = None
        self._connected = False
        logger.info("PostgreSQL disconnected")

    def _require(self) -> None:
        if not self._connected:
            raise RuntimeError("Not connected to PostgreSQL")

    async def _run(self, method: str, sql: str, params: Sequence[Any]) -> Any:
        self._require()
        if self._in_transaction:
            return await getattr(self._txn_conn, method)(sql, *params)
        async with self._pool.acquire() as conn:
            return await getattr(conn, method)(sql, *params)

    async def execute(self, sql: str, params: Sequence[Any]) -> ExecResult:
        status = await self._run("execute", sql, params)
        return ExecResult(rowcount=rowcount_from_status(status))

    async def fetch_all(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        rows = await self._run("fetch", sql, params)
        return [dict(row) for row in rows]

    async def fetch_one(self, sql: str, params: Sequence[Any]) -> Optional[Dict[str, Any]]:
        row = await self._run("fetchrow", sql, params)
        if row is None:
            return None
        return dict(row)

    async def fetch_val(self, sql: str, params: Sequence[Any]) -> Any:
        return await self._run("fetchval", sql, params)

    # ── Transactions ─────────────────────────────────────────────────

    async def begin(self) -> None:
        """Acquire a dedicated connection and start a transaction."""
        self._require()
        self._txn_conn = await self._pool.acquire()
        self._txn_obj = self._txn_conn.transaction()
        try:
            await self._txn_obj.start()
        except Exception:
            await self._release_txn()
            raise
        self._in_transaction = True

    async def _release_txn(self) -> None:
        self._in_transaction = False
        conn, self._txn_conn, self._txn_obj = self._txn_conn, None, None
        if conn is not None:
            await self._pool.release(conn)

    async def commit(self) -> None:
        if not self._in_transaction:
            return
        try:
            await self._txn_obj.commit()
        finally:
            await self._release_txn()

    async def rollback(self) -> None:
        if not self._in_transaction:
            return
        try:
            await self._txn_obj.rollback()
        finally:
            await self._release_txn()

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    @property
    def is_connected(self) -> bool:
        return self._connected and self._pool is not None
