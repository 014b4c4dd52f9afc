"""
Strata DB Backend — SQLite adapter via aiosqlite.

This is the default backend. A single connection in autocommit mode;
transactions are opened explicitly with BEGIN.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from .base import DatabaseAdapter, ExecResult

try:
    import aiosqlite
except ImportError:
    aiosqlite = None  # type: ignore[assignment]

logger = logging.getLogger("strata.db.backends.sqlite")

__all__ = ["SQLiteAdapter"]


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite adapter using aiosqlite.

    Features:
    - WAL journal mode for file databases
    - Foreign key enforcement
    - Explicit BEGIN/COMMIT (the connection runs in autocommit mode)
    """

    name = "sqlite"

    def __init__(self):
        self._connection: Any = None
        self._connected = False
        self._lock = asyncio.Lock()
        self._in_transaction = False

    async def connect(self, url: str, **options) -> None:
        if self._connected:
            return
        if aiosqlite is None:
            raise ImportError(
                "aiosqlite is required for SQLite backend. "
                "Install: pip install aiosqlite"
            )
        async with self._lock:
            if self._connected:
                return
            db_path = self._parse_url(url)
            foreign_keys = options.pop("foreign_keys", True)
            self._connection = await aiosqlite.connect(db_path, isolation_level=None, **options)
            self._connection.row_factory = aiosqlite.Row
            if db_path != ":memory:":
                await self._connection.execute("PRAGMA journal_mode=WAL")
            if foreign_keys:
                await self._connection.execute("PRAGMA foreign_keys=ON")
            self._connected = True
            logger.info(f"SQLite connected: {db_path}")

    async def disconnect(self) -> None:
        if not self._connected:
            return
        async with self._lock:
            if self._connection:
                if self._in_transaction:
                    await self._connection.rollback()
                    self._in_transaction = False
                await self._connection.close()
                self._connection = None
            self._connected = False
            logger.info("SQLite disconnected")

    def _require(self) -> Any:
        if not self._connected:
            raise RuntimeError("Not connected")
        return self._connection

    async def execute(self, sql: str, params: Sequence[Any]) -> ExecResult:
        conn = self._require()
        async with conn.execute(sql, list(params)) as cursor:
            return ExecResult(rowcount=cursor.rowcount, lastrowid=cursor.lastrowid)

    async def fetch_all(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        conn = self._require()
        async with conn.execute(sql, list(params)) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def fetch_one(self, sql: str, params: Sequence[Any]) -> Optional[Dict[str, Any]]:
        conn = self._require()
        async with conn.execute(sql, list(params)) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def fetch_val(self, sql: str, params: Sequence[Any]) -> Any:
        conn = self._require()
        async with conn.execute(sql, list(params)) as cursor:
            row = await cursor.fetchone()
        if row is None:
            return None
        return row[0]

    # ── Transactions ─────────────────────────────────────────────────

    async def begin(self) -> None:
        await self._require().execute("BEGIN")
        self._in_transaction = True

    async def commit(self) -> None:
        try:
            await self._require().commit()
        finally:
            self._in_transaction = False

    async def rollback(self) -> None:
        try:
            await self._require().rollback()
        finally:
            self._in_transaction = False

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    @property
    def is_connected(self) -> bool:
        return self._connected

    @staticmethod
    def _parse_url(url: str) -> str:
        """Extract file path from sqlite URL."""
        for prefix in ("sqlite:///", "sqlite://"):
            if url.startswith(prefix):
                path = url[len(prefix):]
                return path or ":memory:"
        return url.replace("sqlite:", "").lstrip("/") or ":memory:"
