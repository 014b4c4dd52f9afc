"""
Strata Dialect — SQLite.

SQLite stores everything in five storage classes, so most primitive types
collapse onto INTEGER/REAL/NUMERIC/TEXT/BLOB. An auto-increment column is
declared inline as ``INTEGER PRIMARY KEY AUTOINCREMENT``.

ALTER TABLE cannot drop constraints, so column and constraint removal is
emulated by rebuilding the table (see ``sqlite_table``).
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Sequence, Tuple

from ..models.column import Column, PrimitiveType
from .base import Dialect, mysql_limit_sql
from .sqlite_table import QUERY_CREATE_TABLE, QUERY_INDEXES, SQLiteTable

__all__ = ["SQLiteDialect"]


class SQLiteDialect(Dialect):
    """SQLite 3 via aiosqlite."""

    name = "sqlite"
    driver_name = "sqlite"
    quotes = ('"', '"')
    inline_ai_primary_key = True
    supports_alter_drop = False

    def column_type(self, col: Column) -> str:
        t = col.primitive_type
        if t is PrimitiveType.BOOL or t.is_integer:
            return "INTEGER"
        if t.is_float:
            self._check_float(col)
            return "REAL"
        if t is PrimitiveType.DECIMAL:
            self._check_decimal(col)
            return "NUMERIC"
        if t is PrimitiveType.STRING:
            return "TEXT"
        if t is PrimitiveType.BYTES:
            return "BLOB"
        if t is PrimitiveType.TIME:
            self._time_precision(col)
            return "TIMESTAMP"
        raise self._unmapped(col)

    def auto_increment_sql(self, col: Column) -> str:
        return "PRIMARY KEY AUTOINCREMENT"

    def adapt_value(self, value: Any) -> Any:
        # sqlite3 has no Decimal adapter; the datetime adapters are deprecated.
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, datetime):
            return value.isoformat(sep=" ")
        if isinstance(value, date):
            return value.isoformat()
        return value

    def limit_sql(self, limit: Any, offset: Any = None) -> Tuple[str, List[Any]]:
        return mysql_limit_sql(limit, offset)

    def transactional_ddl(self) -> bool:
        return True

    def create_table_options_sql(self, meta: Dict[str, List[str]]) -> str:
        rowid = meta.get("sqlite_rowid")
        if rowid and rowid[0].lower() in ("false", "0", "no"):
            return " WITHOUT ROWID"
        return ""

    def truncate_table_sql(self, table: str, ai_column: str = "") -> List[str]:
        stmts = ["DELETE FROM {" + table + "}"]
        if ai_column:
            stmts.append("DELETE FROM sqlite_sequence WHERE name='" + table.replace("'", "''") + "'")
        return stmts

    def create_view_sql(
        self,
        replace: bool,
        temporary: bool,
        name: str,
        select_query: str,
        cols: Sequence[str] = (),
    ) -> List[str]:
        stmts: List[str] = []
        if replace:
            stmts.append("DROP VIEW IF EXISTS {" + name + "}")
        stmts.extend(super().create_view_sql(False, temporary, name, select_query, cols))
        return stmts

    def drop_constraint_sql(self, table: str, name: str, pk: bool = False) -> str:
        raise self._fault("ALTER TABLE DROP CONSTRAINT is emulated by rebuilding the table")

    def version_sql(self) -> str:
        return "SELECT sqlite_version()"

    # ── Table rebuild ───────────────────────────────────────────────────

    def table_definition_queries(self, table: str) -> Tuple[Tuple[str, List[Any]], Tuple[str, List[Any]]]:
        """Queries fetching the stored CREATE TABLE and CREATE INDEX text."""
        return (QUERY_CREATE_TABLE, [table]), (QUERY_INDEXES, [table])

    def parse_table(self, table: str, create_sql: str, indexes: Sequence[Tuple[str, str]]) -> SQLiteTable:
        return SQLiteTable.parse(table, create_sql, indexes)
