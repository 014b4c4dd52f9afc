"""
Strata Dialect — abstract dialect interface.

A Dialect hides the syntactic differences between SQL engines: column type
rendering, pagination, identifier quoting, native placeholders and the
handful of DDL statements that have no common form.

Every statement a dialect returns is written in the engine-neutral
placeholder language (see ``placeholders``) and goes through ``fix`` before
it reaches the driver.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..faults import DialectFault
from ..models.column import Column
from .placeholders import Named, check_orders, reorder, rewrite

__all__ = [
    "Dialect",
    "mysql_limit_sql",
    "standard_limit_sql",
    "quote_literal",
]


def _placeholder(value: Any) -> str:
    if isinstance(value, Named):
        return "@" + value.name
    return "?"


def mysql_limit_sql(limit: Any, offset: Any = None) -> Tuple[str, List[Any]]:
    """``LIMIT ? OFFSET ?`` pagination (MySQL, SQLite, H2...)."""
    if offset is None:
        return f" LIMIT {_placeholder(limit)} ", [limit]
    return f" LIMIT {_placeholder(limit)} OFFSET {_placeholder(offset)} ", [limit, offset]


def standard_limit_sql(limit: Any, offset: Any = None) -> Tuple[str, List[Any]]:
    """SQL:2008 ``OFFSET ? ROWS FETCH NEXT ? ROWS ONLY`` pagination."""
    if offset is None:
        return f" FETCH NEXT {_placeholder(limit)} ROWS ONLY ", [limit]
    return (
        f" OFFSET {_placeholder(offset)} ROWS FETCH NEXT {_placeholder(limit)} ROWS ONLY ",
        [offset, limit],
    )


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class Dialect(ABC):
    """
    Abstract SQL dialect.

    Class attributes:
        name: Dialect name ("sqlite", "postgresql", "mysql", "mariadb")
        driver_name: Driver name used for registry lookup
        quotes: Identifier quote pair
        escape_percent: Driver binds with ``%s`` so literal ``%`` is doubled
        inline_ai_primary_key: ``sql_type`` of an AI column already makes it
            the primary key
        supports_alter_drop: ALTER TABLE can drop columns and constraints
    """

    name: str = ""
    driver_name: str = ""
    quotes: Tuple[str, str] = ('"', '"')
    escape_percent: bool = False
    inline_ai_primary_key: bool = False
    supports_alter_drop: bool = True

    # ── Placeholders ────────────────────────────────────────────────────

    def positional(self, index: int) -> str:
        """Native placeholder for the ``index``-th (1-based) argument."""
        return "?"

    def prepare(self, query: str, table_prefix: str = "") -> Tuple[str, Dict[str, int]]:
        """
        Rewrite ``query`` for later execution with different argument sets.

        Returns:
            (native_query, orders) where orders maps named placeholders to
            their positions; empty for positional queries.
        """
        native, orders, _ = rewrite(
            query,
            self.quotes,
            table_prefix,
            self.positional,
            self.escape_percent,
        )
        check_orders(orders)
        return native, orders

    def fix(
        self,
        query: str,
        args: Sequence[Any] = (),
        table_prefix: str = "",
    ) -> Tuple[str, List[Any]]:
        """Rewrite ``query`` and order ``args`` for immediate execution."""
        native, orders = self.prepare(query, table_prefix)
        values = reorder(args, orders)
        return native, [self.adapt_value(v) for v in values]

    def adapt_value(self, value: Any) -> Any:
        """Convert a python value into something the driver binds."""
        return value

    # ── Type mapping ────────────────────────────────────────────────────

    def _fault(self, reason: str) -> DialectFault:
        return DialectFault(self.name, reason)

    @abstractmethod
    def column_type(self, col: Column) -> str:
        """Base type keyword(s) of ``col`` including length/precision."""

    def sql_type(self, col: Column) -> str:
        """
        Full column definition fragment after the column name.

        ``TYPE [identity] [NOT NULL] [DEFAULT literal]``
        """
        parts = [self.column_type(col)]
        if col.ai:
            ai = self.auto_increment_sql(col)
            if ai:
                parts.append(ai)
        if not col.nullable:
            parts.append("NOT NULL")
        if col.has_default:
            parts.append("DEFAULT " + self.format_default(col, col.default))
        return " ".join(parts)

    def auto_increment_sql(self, col: Column) -> str:
        return ""

    def bool_literal(self, value: bool) -> str:
        return "1" if value else "0"

    def format_default(self, col: Column, value: Any) -> str:
        """Render a default value as a SQL literal."""
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return self.bool_literal(value)
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        if isinstance(value, (bytes, bytearray)):
            return "X'" + bytes(value).hex() + "'"
        if isinstance(value, datetime):
            return quote_literal(value.isoformat(sep=" "))
        if isinstance(value, date):
            return quote_literal(value.isoformat())
        return quote_literal(str(value))

    def _check_decimal(self, col: Column) -> Tuple[int, int]:
        if len(col.length) != 2:
            raise self._fault(
                f"decimal column '{col.name}' needs precision and scale, got {col.length}"
            )
        precision, scale = col.length
        if precision <= 0 or scale < 0 or scale > precision:
            raise self._fault(f"invalid decimal({precision},{scale}) for column '{col.name}'")
        return precision, scale

    def _check_float(self, col: Column) -> Optional[Tuple[int, int]]:
        if not col.length:
            return None
        if len(col.length) != 2:
            raise self._fault(
                f"float column '{col.name}' takes zero or two lengths, got {col.length}"
            )
        return col.length[0], col.length[1]

    def _time_precision(self, col: Column) -> Optional[int]:
        if not col.length:
            return None
        precision = col.length[0]
        if precision < 0 or precision > 6:
            raise self._fault(
                f"time column '{col.name}' precision must be between 0 and 6, got {precision}"
            )
        return precision

    def _unmapped(self, col: Column) -> DialectFault:
        return self._fault(f"unsupported type {col.primitive_type.value} for column '{col.name}'")

    # ── Statements ──────────────────────────────────────────────────────

    @abstractmethod
    def limit_sql(self, limit: Any, offset: Any = None) -> Tuple[str, List[Any]]:
        """Pagination clause plus its argument values."""

    @abstractmethod
    def transactional_ddl(self) -> bool:
        """Whether DDL statements take part in transactions."""

    def last_insert_id_sql(self, table: str, col: str) -> Tuple[str, bool]:
        """
        SQL retrieving the id generated by an insert.

        Returns:
            (sql, append): when ``append`` is true ``sql`` is appended to the
            insert and the id comes back as a result row. An empty ``sql``
            means the driver reports the id itself.
        """
        return "", False

    def create_table_options_sql(self, meta: Dict[str, List[str]]) -> str:
        return ""

    @abstractmethod
    def truncate_table_sql(self, table: str, ai_column: str = "") -> List[str]:
        """Statements removing every row and resetting the AI counter."""

    def create_view_sql(
        self,
        replace: bool,
        temporary: bool,
        name: str,
        select_query: str,
        cols: Sequence[str] = (),
    ) -> List[str]:
        sql = "CREATE "
        if replace:
            sql += "OR REPLACE "
        if temporary:
            sql += "TEMPORARY "
        sql += "VIEW {" + name + "}"
        if cols:
            sql += " (" + ",".join("{" + c + "}" for c in cols) + ")"
        sql += " AS " + select_query
        return [sql]

    def drop_index_sql(self, table: str, index: str) -> str:
        return "DROP INDEX IF EXISTS {" + index + "}"

    def drop_constraint_sql(self, table: str, name: str, pk: bool = False) -> str:
        return "ALTER TABLE {" + table + "} DROP CONSTRAINT {" + name + "}"

    def insert_default_values_sql(self, table: str) -> str:
        return "INSERT INTO {" + table + "} DEFAULT VALUES"

    @abstractmethod
    def version_sql(self) -> str:
        """Query returning the server version as a single value."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
