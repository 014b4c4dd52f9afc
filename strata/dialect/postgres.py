"""
Strata Dialect — PostgreSQL.

Native placeholders are ``$1..$n``. Auto-increment columns use the SERIAL
family and the generated id is read back with ``RETURNING``. Pagination
uses the SQL:2008 ``OFFSET .. ROWS FETCH NEXT .. ROWS ONLY`` form.
"""

from __future__ import annotations

from typing import Any, List, Tuple

from ..models.column import Column, PrimitiveType
from .base import Dialect, standard_limit_sql

__all__ = ["PostgresDialect"]

_INTEGER_TYPES = {
    PrimitiveType.INT8: ("SMALLINT", "SMALLSERIAL"),
    PrimitiveType.UINT8: ("SMALLINT", "SMALLSERIAL"),
    PrimitiveType.INT16: ("SMALLINT", "SMALLSERIAL"),
    PrimitiveType.UINT16: ("INT", "SERIAL"),
    PrimitiveType.INT32: ("INT", "SERIAL"),
    PrimitiveType.UINT32: ("BIGINT", "BIGSERIAL"),
    PrimitiveType.INT: ("BIGINT", "BIGSERIAL"),
    PrimitiveType.INT64: ("BIGINT", "BIGSERIAL"),
    PrimitiveType.UINT: ("BIGINT", "BIGSERIAL"),
    PrimitiveType.UINT64: ("BIGINT", "BIGSERIAL"),
}


class PostgresDialect(Dialect):
    """PostgreSQL via asyncpg."""

    name = "postgresql"
    driver_name = "postgresql"
    quotes = ('"', '"')

    def positional(self, index: int) -> str:
        return f"${index}"

    def column_type(self, col: Column) -> str:
        t = col.primitive_type
        if t is PrimitiveType.BOOL:
            return "BOOLEAN"
        if t.is_integer:
            plain, serial = _INTEGER_TYPES[t]
            return serial if col.ai else plain
        if t is PrimitiveType.FLOAT32:
            self._check_float(col)
            return "REAL"
        if t is PrimitiveType.FLOAT64:
            self._check_float(col)
            return "DOUBLE PRECISION"
        if t is PrimitiveType.DECIMAL:
            precision, scale = self._check_decimal(col)
            return f"NUMERIC({precision},{scale})"
        if t is PrimitiveType.STRING:
            if col.length and 0 < col.length[0] < 65535:
                return f"VARCHAR({col.length[0]})"
            return "TEXT"
        if t is PrimitiveType.BYTES:
            return "BYTEA"
        if t is PrimitiveType.TIME:
            precision = self._time_precision(col)
            if precision is None:
                return "TIMESTAMP WITH TIME ZONE"
            return f"TIMESTAMP({precision}) WITH TIME ZONE"
        raise self._unmapped(col)

    def bool_literal(self, value: bool) -> str:
        return "TRUE" if value else "FALSE"

    def format_default(self, col: Column, value: Any) -> str:
        if isinstance(value, (bytes, bytearray)):
            return "'\\x" + bytes(value).hex() + "'"
        return super().format_default(col, value)

    def limit_sql(self, limit: Any, offset: Any = None) -> Tuple[str, List[Any]]:
        return standard_limit_sql(limit, offset)

    def transactional_ddl(self) -> bool:
        return True

    def last_insert_id_sql(self, table: str, col: str) -> Tuple[str, bool]:
        return " RETURNING {" + col + "}", True

    def truncate_table_sql(self, table: str, ai_column: str = "") -> List[str]:
        sql = "TRUNCATE TABLE {" + table + "}"
        if ai_column:
            sql += " RESTART IDENTITY"
        return [sql]

    def version_sql(self) -> str:
        return "SHOW server_version"
