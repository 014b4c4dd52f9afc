"""
Shared test fixtures and helpers for the Strata test suite.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Sequence

import pytest
import pytest_asyncio

from strata.db import Database, ExecResult
from strata.dialect import MySQLDialect, PostgresDialect, SQLiteDialect
from strata.models import ModelCache
from strata.sqlbuilder import SQLBuilder


# ============================================================================
# Recording engine
# ============================================================================


class RecordingEngine:
    """
    Engine stand-in that renders statements without a database.

    Every call is recorded as ``(operation, sql, args)``; query results come
    from ``rows`` / ``value``.
    """

    def __init__(self, dialect, table_prefix: str = ""):
        self.dialect = dialect
        self.table_prefix = table_prefix
        self.models = ModelCache()
        self.sql = SQLBuilder(self)
        self.in_transaction = False
        self.calls: List[tuple] = []
        self.rows: List[Dict[str, Any]] = []
        self.value: Any = None
        self.result = ExecResult(rowcount=1, lastrowid=1)

    async def query(self, sql: str, args: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        self.calls.append(("query", sql, list(args or [])))
        return list(self.rows)

    async def query_one(self, sql: str, args: Optional[Sequence[Any]] = None) -> Optional[Dict[str, Any]]:
        self.calls.append(("query_one", sql, list(args or [])))
        return self.rows[0] if self.rows else None

    async def query_val(self, sql: str, args: Optional[Sequence[Any]] = None) -> Any:
        self.calls.append(("query_val", sql, list(args or [])))
        return self.value

    async def exec(self, sql: str, args: Optional[Sequence[Any]] = None) -> ExecResult:
        self.calls.append(("exec", sql, list(args or [])))
        return self.result

    async def exec_ddl(self, *statements: str) -> None:
        for stmt in statements:
            self.calls.append(("ddl", stmt, []))

    @asynccontextmanager
    async def transaction(self):
        self.calls.append(("begin", "", []))
        self.in_transaction = True
        try:
            yield self
        except BaseException:
            self.calls.append(("rollback", "", []))
            raise
        else:
            self.calls.append(("commit", "", []))
        finally:
            self.in_transaction = False

    @property
    def statements(self) -> List[str]:
        return [sql for _, sql, _ in self.calls]


@pytest.fixture
def sqlite_engine():
    return RecordingEngine(SQLiteDialect())


@pytest.fixture
def pg_engine():
    return RecordingEngine(PostgresDialect())


@pytest.fixture
def mysql_engine():
    return RecordingEngine(MySQLDialect())


# ============================================================================
# In-memory SQLite
# ============================================================================


@pytest_asyncio.fixture
async def db():
    database = Database("sqlite:///:memory:")
    await database.connect()
    yield database
    await database.disconnect()


@pytest_asyncio.fixture
async def prefixed_db():
    database = Database("sqlite:///:memory:", table_prefix="app_")
    await database.connect()
    yield database
    await database.disconnect()
