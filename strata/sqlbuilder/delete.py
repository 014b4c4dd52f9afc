"""
Strata SQLBuilder — DELETE.
"""

from __future__ import annotations

from typing import Any, List, Tuple

from ..faults import TableIsEmptyFault
from .base import ExecStmt, WhereMixin
from .text import TextBuilder
from .where import WhereStmt

__all__ = ["DeleteStmt"]


class DeleteStmt(ExecStmt, WhereMixin):
    """DELETE statement builder; without conditions every row is removed."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._where = WhereStmt()
        self._table = ""

    def reset(self) -> "DeleteStmt":
        self.__init__(self.engine)
        return self

    def table(self, table: str) -> "DeleteStmt":
        self._table = table
        return self

    def sql(self) -> Tuple[str, List[Any]]:
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()
        where, args = self._where_sql()
        return TextBuilder("DELETE FROM ").quote_column(self._table).w(where).string(), args
