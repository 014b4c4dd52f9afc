"""
Strata Dialect — MySQL and MariaDB.

aiomysql binds with ``%s`` format-style placeholders, so every literal
``%`` in a statement is doubled. DDL is not transactional: a failed
migration leaves the statements before it applied.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

from ..models.column import Column, PrimitiveType
from .base import Dialect, mysql_limit_sql

__all__ = ["MySQLDialect", "MariaDBDialect"]

_INTEGER_TYPES = {
    PrimitiveType.INT8: "TINYINT",
    PrimitiveType.UINT8: "TINYINT",
    PrimitiveType.INT16: "SMALLINT",
    PrimitiveType.UINT16: "SMALLINT",
    PrimitiveType.INT32: "INT",
    PrimitiveType.UINT32: "INT",
    PrimitiveType.INT: "BIGINT",
    PrimitiveType.UINT: "BIGINT",
    PrimitiveType.INT64: "BIGINT",
    PrimitiveType.UINT64: "BIGINT",
}


class MySQLDialect(Dialect):
    """MySQL via aiomysql."""

    name = "mysql"
    driver_name = "mysql"
    quotes = ("`", "`")
    escape_percent = True

    def positional(self, index: int) -> str:
        return "%s"

    def column_type(self, col: Column) -> str:
        t = col.primitive_type
        if t is PrimitiveType.BOOL:
            return "BOOLEAN"
        if t.is_integer:
            sql = _INTEGER_TYPES[t]
            if col.length:
                if col.length[0] < 0:
                    raise self._fault(f"invalid display width {col.length[0]} for column '{col.name}'")
                sql += f"({col.length[0]})"
            if t.is_unsigned:
                sql += " UNSIGNED"
            return sql
        if t.is_float:
            sql = "FLOAT" if t is PrimitiveType.FLOAT32 else "DOUBLE"
            size = self._check_float(col)
            if size is not None:
                sql += f"({size[0]},{size[1]})"
            return sql
        if t is PrimitiveType.DECIMAL:
            precision, scale = self._check_decimal(col)
            return f"DECIMAL({precision},{scale})"
        if t is PrimitiveType.STRING:
            if col.length and 0 < col.length[0] < 65533:
                return f"VARCHAR({col.length[0]})"
            return "LONGTEXT"
        if t is PrimitiveType.BYTES:
            return "BLOB"
        if t is PrimitiveType.TIME:
            precision = self._time_precision(col)
            if precision is None:
                return "DATETIME"
            return f"DATETIME({precision})"
        raise self._unmapped(col)

    def auto_increment_sql(self, col: Column) -> str:
        return "AUTO_INCREMENT"

    def limit_sql(self, limit: Any, offset: Any = None) -> Tuple[str, List[Any]]:
        return mysql_limit_sql(limit, offset)

    def transactional_ddl(self) -> bool:
        return False

    def create_table_options_sql(self, meta: Dict[str, List[str]]) -> str:
        sql = ""
        engine = meta.get("mysql_engine")
        if engine:
            sql += " ENGINE=" + engine[0]
        charset = meta.get("mysql_charset")
        if charset:
            sql += " CHARACTER SET=" + charset[0]
        return sql

    def truncate_table_sql(self, table: str, ai_column: str = "") -> List[str]:
        return ["TRUNCATE TABLE {" + table + "}"]

    def create_view_sql(
        self,
        replace: bool,
        temporary: bool,
        name: str,
        select_query: str,
        cols: Sequence[str] = (),
    ) -> List[str]:
        if temporary:
            raise self._fault("temporary views are not supported")
        return super().create_view_sql(replace, False, name, select_query, cols)

    def drop_index_sql(self, table: str, index: str) -> str:
        return "ALTER TABLE {" + table + "} DROP INDEX {" + index + "}"

    def drop_constraint_sql(self, table: str, name: str, pk: bool = False) -> str:
        if pk:
            return "ALTER TABLE {" + table + "} DROP PRIMARY KEY"
        return super().drop_constraint_sql(table, name, pk)

    def insert_default_values_sql(self, table: str) -> str:
        return "INSERT INTO {" + table + "} () VALUES ()"

    def version_sql(self) -> str:
        return "SELECT VERSION()"


class MariaDBDialect(MySQLDialect):
    """MariaDB; same syntax as MySQL, registered under its own driver name."""

    name = "mariadb"
    driver_name = "mariadb"
