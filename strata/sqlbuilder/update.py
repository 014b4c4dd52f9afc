"""
Strata SQLBuilder — UPDATE.

``occ(col, expected)`` turns the statement into an optimistic-concurrency
update: the version column is incremented and the row only matches while
it still holds ``expected``. A lost race shows up as ``rowcount == 0``;
nothing is retried.
"""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from ..faults import ColumnsIsEmptyFault, DuplicateColumnFault, TableIsEmptyFault
from .base import ExecStmt, WhereMixin
from .text import TextBuilder
from .where import WhereStmt

__all__ = ["UpdateStmt"]


class UpdateStmt(ExecStmt, WhereMixin):
    """UPDATE statement builder."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._where = WhereStmt()
        self._table = ""
        # (column, operator, value); operator is "" for plain assignment
        self._values: List[Tuple[str, str, Any]] = []
        self._occ: Optional[Tuple[str, Any]] = None

    def reset(self) -> "UpdateStmt":
        self.__init__(self.engine)
        return self

    def table(self, table: str) -> "UpdateStmt":
        self._table = table
        return self

    def set(self, col: str, value: Any) -> "UpdateStmt":
        self._values.append((col, "", value))
        return self

    def increase(self, col: str, value: Any) -> "UpdateStmt":
        self._values.append((col, "+", value))
        return self

    def decrease(self, col: str, value: Any) -> "UpdateStmt":
        self._values.append((col, "-", value))
        return self

    def occ(self, col: str, expected: Any) -> "UpdateStmt":
        """Increment ``col`` by one and require its current value to be ``expected``."""
        self._occ = (col, expected)
        return self

    def _check_columns(self) -> None:
        names = sorted(col for col, _, _ in self._values)
        if self._occ is not None:
            names = sorted(names + [self._occ[0]])
        for prev, cur in zip(names, names[1:]):
            if prev == cur:
                raise DuplicateColumnFault(cur)

    def sql(self) -> Tuple[str, List[Any]]:
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()
        if not self._values and self._occ is None:
            raise ColumnsIsEmptyFault()
        self._check_columns()

        builder = TextBuilder("UPDATE ").quote_column(self._table).w(" SET ")
        args: List[Any] = []
        for col, op, value in self._values:
            builder.quote_column(col).w("=")
            if op:
                builder.quote_column(col).w(op)
            builder.w("?,")
            args.append(value)

        if self._occ is not None:
            col = self._occ[0]
            builder.quote_column(col).w("=").quote_column(col).w("+1,")
        builder.truncate_last(1)

        where, where_args = self._where_sql()
        args.extend(where_args)
        if self._occ is not None:
            col, expected = self._occ
            if where:
                builder.w(" WHERE (", where[len(" WHERE "):], ") AND ")
            else:
                builder.w(" WHERE ")
            builder.quote_column(col).w("=?")
            args.append(expected)
        else:
            builder.w(where)

        return builder.string(), args
