"""
Strata SQLBuilder — index DDL.
"""

from __future__ import annotations

from typing import Any, List, Sequence

from ..faults import ColumnsIsEmptyFault, SQLBuildFault, TableIsEmptyFault
from ..models.constraint import IndexKind
from .base import DDLStmt

__all__ = ["CreateIndexStmt", "DropIndexStmt", "create_index_sql"]


def create_index_sql(kind: IndexKind, name: str, table: str, cols: Sequence[str]) -> str:
    sql = "CREATE UNIQUE INDEX " if kind is IndexKind.UNIQUE else "CREATE INDEX "
    return sql + "{" + name + "} ON {" + table + "} (" + ",".join("{" + c + "}" for c in cols) + ")"


class CreateIndexStmt(DDLStmt):
    """CREATE [UNIQUE] INDEX name ON table (cols)."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._table = ""
        self._name = ""
        self._kind = IndexKind.DEFAULT
        self._columns: List[str] = []

    def table(self, table: str) -> "CreateIndexStmt":
        self._table = table
        return self

    def name(self, name: str, kind: IndexKind = IndexKind.DEFAULT) -> "CreateIndexStmt":
        self._name = name
        self._kind = kind
        return self

    def columns(self, *cols: str) -> "CreateIndexStmt":
        self._columns.extend(cols)
        return self

    def ddl_sql(self) -> List[str]:
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()
        if not self._name:
            raise SQLBuildFault("index name is empty")
        if not self._columns:
            raise ColumnsIsEmptyFault()
        return [create_index_sql(self._kind, self._name, self._table, self._columns)]


class DropIndexStmt(DDLStmt):
    def __init__(self, engine: Any):
        super().__init__(engine)
        self._table = ""
        self._name = ""

    def table(self, table: str) -> "DropIndexStmt":
        self._table = table
        return self

    def name(self, name: str) -> "DropIndexStmt":
        self._name = name
        return self

    def ddl_sql(self) -> List[str]:
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()
        if not self._name:
            raise SQLBuildFault("index name is empty")
        return [self.dialect.drop_index_sql(self._table, self._name)]
