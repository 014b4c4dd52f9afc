"""
Strata SQLBuilder — view DDL.

A view's select cannot carry bound arguments; the select text is embedded
as-is.
"""

from __future__ import annotations

from typing import Any, List, Union

from ..faults import SQLBuildFault, TableIsEmptyFault
from .base import DDLStmt
from .select import SelectStmt

__all__ = ["CreateViewStmt", "DropViewStmt"]


class CreateViewStmt(DDLStmt):
    def __init__(self, engine: Any):
        super().__init__(engine)
        self._name = ""
        self._select: Union[SelectStmt, str, None] = None
        self._columns: List[str] = []
        self._replace = False
        self._temporary = False

    def name(self, name: str) -> "CreateViewStmt":
        self._name = name
        return self

    def select(self, select: Union[SelectStmt, str]) -> "CreateViewStmt":
        """Defining query, as a SelectStmt or raw select text."""
        self._select = select
        return self

    def columns(self, *cols: str) -> "CreateViewStmt":
        self._columns.extend(cols)
        return self

    def replace(self) -> "CreateViewStmt":
        self._replace = True
        return self

    def temporary(self) -> "CreateViewStmt":
        self._temporary = True
        return self

    def ddl_sql(self) -> List[str]:
        self._check_err()
        if not self._name:
            raise TableIsEmptyFault()
        if self._select is None:
            raise SQLBuildFault(f"view '{self._name}' has no select statement")

        if isinstance(self._select, SelectStmt):
            query, args = self._select.sql()
            if args:
                raise SQLBuildFault(f"view '{self._name}' select cannot take arguments")
        else:
            query = self._select

        return self.dialect.create_view_sql(
            self._replace,
            self._temporary,
            self._name,
            query,
            self._columns,
        )


class DropViewStmt(DDLStmt):
    def __init__(self, engine: Any):
        super().__init__(engine)
        self._name = ""

    def name(self, name: str) -> "DropViewStmt":
        self._name = name
        return self

    def ddl_sql(self) -> List[str]:
        self._check_err()
        if not self._name:
            raise TableIsEmptyFault()
        return ["DROP VIEW IF EXISTS {" + self._name + "}"]
