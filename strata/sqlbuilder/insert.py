"""
Strata SQLBuilder — INSERT.

Each ``values()`` call adds one row; several calls produce a multi-row
insert. With no columns at all the statement inserts one all-default row.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from ..faults import (
    ArgsNotMatchFault,
    SQLBuildFault,
    TableIsEmptyFault,
    UnsupportedOperationFault,
    ValuesIsEmptyFault,
)
from .base import ExecStmt
from .select import SelectStmt
from .text import TextBuilder

__all__ = ["InsertStmt"]


class InsertStmt(ExecStmt):
    """INSERT statement builder."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._table = ""
        self._columns: List[str] = []
        self._rows: List[List[Any]] = []
        self._key_name = ""
        self._select: Optional[SelectStmt] = None

    def reset(self) -> "InsertStmt":
        self.__init__(self.engine)
        return self

    def table(self, table: str) -> "InsertStmt":
        self._table = table
        return self

    def columns(self, *cols: str) -> "InsertStmt":
        self._columns.extend(cols)
        return self

    def values(self, *vals: Any) -> "InsertStmt":
        self._rows.append(list(vals))
        return self

    def key_value(self, col: str, value: Any) -> "InsertStmt":
        """Add one column and its value to a single-row insert."""
        if len(self._rows) > 1:
            return self.fail(UnsupportedOperationFault("key_value", "multi-row insert"))
        if not self._rows:
            self._rows.append([])
        self._columns.append(col)
        self._rows[0].append(value)
        return self

    def key_name(self, col: str) -> "InsertStmt":
        """Column whose generated value ``last_insert_id()`` returns."""
        self._key_name = col
        return self

    def select(self, stmt: SelectStmt) -> "InsertStmt":
        """``INSERT INTO t (cols) SELECT ...``."""
        self._select = stmt
        return self

    @property
    def is_multi_row(self) -> bool:
        return len(self._rows) > 1

    def sql(self) -> Tuple[str, List[Any]]:
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()

        if self._select is not None:
            query, args = self._select.sql()
            builder = TextBuilder("INSERT INTO ").quote_column(self._table)
            if self._columns:
                builder.w(" (", ",".join("{" + c + "}" for c in self._columns), ")")
            builder.w(" ", query)
            return builder.string(), args

        if not self._columns:
            if any(self._rows):
                raise SQLBuildFault("values given without columns")
            if self.is_multi_row:
                raise UnsupportedOperationFault("default values insert", "multi-row insert")
            return self.dialect.insert_default_values_sql(self._table), []

        if not self._rows:
            raise ValuesIsEmptyFault()

        builder = TextBuilder("INSERT INTO ").quote_column(self._table)
        builder.w(" (", ",".join("{" + c + "}" for c in self._columns), ") VALUES ")
        args: List[Any] = []
        placeholders = "(" + ",".join("?" * len(self._columns)) + ")"
        for row in self._rows:
            if len(row) != len(self._columns):
                raise ArgsNotMatchFault(len(self._columns), len(row))
            builder.w(placeholders, ",")
            args.extend(row)
        builder.truncate_last(1)
        return builder.string(), args

    async def last_insert_id(self) -> int:
        """
        Execute and return the generated key.

        Raises:
            UnsupportedOperationFault: Multi-row insert
            SQLBuildFault: No ``key_name`` set
        """
        if self.is_multi_row:
            raise UnsupportedOperationFault("last_insert_id", "multi-row insert")
        if not self._key_name:
            raise SQLBuildFault("last_insert_id requires key_name()")

        query, args = self.sql()
        suffix, append = self.dialect.last_insert_id_sql(self._table, self._key_name)
        if append:
            return int(await self.engine.query_val(query + suffix, args))
        result = await self.engine.exec(query, args)
        return int(result.lastrowid)
