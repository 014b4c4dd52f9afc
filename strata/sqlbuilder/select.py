"""
Strata SQLBuilder — SELECT.

    stmt = (
        SelectStmt(db)
        .columns("{id}", "{name}")
        .from_("#users")
        .where("{age} > ?", 18)
        .desc("id")
        .limit(10, 20)
    )
    rows = await stmt.query()
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from ..faults import SQLBuildFault, TableIsEmptyFault
from .base import QueryStmt, WhereMixin
from .text import TextBuilder
from .where import WhereStmt, column_ref

__all__ = ["SelectStmt"]


class SelectStmt(QueryStmt, WhereMixin):
    """SELECT statement builder."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._where = WhereStmt()
        self._table = ""
        self._alias = ""
        self._columns: List[str] = []
        self._distinct = False
        self._joins: List[str] = []
        self._group_by: List[str] = []
        self._having = ""
        self._having_args: List[Any] = []
        self._order: List[str] = []
        self._limit: Optional[Tuple[Any, Any]] = None
        self._count = ""
        self._for_update = False

    def reset(self) -> "SelectStmt":
        self.__init__(self.engine)
        return self

    def columns(self, *cols: str) -> "SelectStmt":
        self._columns.extend(cols)
        return self

    def column(self, col: str, alias: str = "") -> "SelectStmt":
        if alias:
            col = f"{col} AS {column_ref(alias)}"
        self._columns.append(col)
        return self

    def distinct(self) -> "SelectStmt":
        self._distinct = True
        return self

    def from_(self, table: str, alias: str = "") -> "SelectStmt":
        self._table = table
        self._alias = alias
        return self

    def join(self, kind: str, table: str, alias: str, on: str) -> "SelectStmt":
        kind = kind.upper()
        if kind not in ("INNER", "LEFT", "RIGHT", "FULL", "CROSS"):
            return self.fail(SQLBuildFault(f"unknown join type '{kind}'"))
        sql = f" {kind} JOIN {{{table}}}"
        if alias:
            sql += f" AS {alias}"
        if on:
            sql += f" ON {on}"
        self._joins.append(sql)
        return self

    def inner_join(self, table: str, alias: str, on: str) -> "SelectStmt":
        return self.join("INNER", table, alias, on)

    def left_join(self, table: str, alias: str, on: str) -> "SelectStmt":
        return self.join("LEFT", table, alias, on)

    def right_join(self, table: str, alias: str, on: str) -> "SelectStmt":
        return self.join("RIGHT", table, alias, on)

    def group_by(self, *cols: str) -> "SelectStmt":
        self._group_by.extend(column_ref(c) for c in cols)
        return self

    def having(self, expr: str, *args: Any) -> "SelectStmt":
        self._having = expr
        self._having_args = list(args)
        return self

    def asc(self, *cols: str) -> "SelectStmt":
        self._order.extend(column_ref(c) + " ASC" for c in cols)
        return self

    def desc(self, *cols: str) -> "SelectStmt":
        self._order.extend(column_ref(c) + " DESC" for c in cols)
        return self

    def order_by(self, *exprs: str) -> "SelectStmt":
        self._order.extend(exprs)
        return self

    def limit(self, limit: Any, offset: Any = None) -> "SelectStmt":
        self._limit = (limit, offset)
        return self

    def count(self, expr: str = "COUNT(*) AS count") -> "SelectStmt":
        """
        Replace the column list with ``expr``.

        ORDER BY and LIMIT are dropped in count mode. Pass an empty string to
        leave count mode.
        """
        self._count = expr
        return self

    def for_update(self) -> "SelectStmt":
        self._for_update = True
        return self

    def sql(self) -> Tuple[str, List[Any]]:
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()

        builder = TextBuilder("SELECT ")
        if self._distinct:
            builder.w("DISTINCT ")
        if self._count:
            builder.w(self._count)
        elif self._columns:
            builder.w(",".join(self._columns))
        else:
            builder.w("*")

        builder.w(" FROM ").quote_column(self._table)
        if self._alias:
            builder.w(" AS ", self._alias)
        builder.w(*self._joins)

        where, args = self._where_sql()
        builder.w(where)

        if self._group_by:
            builder.w(" GROUP BY ", ",".join(self._group_by))
        if self._having:
            builder.w(" HAVING ", self._having)
            args.extend(self._having_args)

        if not self._count:
            if self._order:
                builder.w(" ORDER BY ", ",".join(self._order))
            if self._limit is not None:
                limit_sql, limit_args = self.dialect.limit_sql(*self._limit)
                builder.w(limit_sql.rstrip())
                args.extend(limit_args)

        if self._for_update:
            builder.w(" FOR UPDATE")

        return builder.string(), args

    async def query_int(self, col: str = "count") -> int:
        """First column ``col`` of the first row as an int (0 without rows)."""
        row = await self.query_one()
        if row is None:
            return 0
        value = row.get(col)
        if value is None and row:
            value = next(iter(row.values()))
        return int(value or 0)
