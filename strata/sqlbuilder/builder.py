"""
Strata SQLBuilder — statement factory bound to an engine.
"""

from __future__ import annotations

from typing import Any

from .constraint import AddConstraintStmt, DropConstraintStmt
from .delete import DeleteStmt
from .index import CreateIndexStmt, DropIndexStmt
from .insert import InsertStmt
from .select import SelectStmt
from .table import (
    AddColumnStmt,
    CreateTableStmt,
    DropColumnStmt,
    DropTableStmt,
    TruncateStmt,
)
from .update import UpdateStmt
from .view import CreateViewStmt, DropViewStmt
from .where import WhereStmt

__all__ = ["SQLBuilder"]


class SQLBuilder:
    """
    Creates statements bound to ``engine``.

    Example:
        >>> rows = await db.sql.select().columns("id").from_("#users").query()
    """

    def __init__(self, engine: Any):
        self.engine = engine

    def select(self, *cols: str) -> SelectStmt:
        stmt = SelectStmt(self.engine)
        if cols:
            stmt.columns(*cols)
        return stmt

    def insert(self, table: str = "") -> InsertStmt:
        return InsertStmt(self.engine).table(table)

    def update(self, table: str = "") -> UpdateStmt:
        return UpdateStmt(self.engine).table(table)

    def delete(self, table: str = "") -> DeleteStmt:
        return DeleteStmt(self.engine).table(table)

    def where(self) -> WhereStmt:
        return WhereStmt()

    def create_table(self, table: str = "") -> CreateTableStmt:
        stmt = CreateTableStmt(self.engine)
        return stmt.table(table) if table else stmt

    def drop_table(self, *tables: str) -> DropTableStmt:
        return DropTableStmt(self.engine).table(*tables)

    def truncate(self, table: str = "", ai_column: str = "") -> TruncateStmt:
        return TruncateStmt(self.engine).table(table, ai_column)

    def add_column(self, table: str = "") -> AddColumnStmt:
        return AddColumnStmt(self.engine).table(table)

    def drop_column(self, table: str = "", column: str = "") -> DropColumnStmt:
        return DropColumnStmt(self.engine).table(table).column(column)

    def create_index(self, table: str = "") -> CreateIndexStmt:
        return CreateIndexStmt(self.engine).table(table)

    def drop_index(self, table: str = "", name: str = "") -> DropIndexStmt:
        return DropIndexStmt(self.engine).table(table).name(name)

    def add_constraint(self, table: str = "") -> AddConstraintStmt:
        return AddConstraintStmt(self.engine).table(table)

    def drop_constraint(self, table: str = "", name: str = "", pk: bool = False) -> DropConstraintStmt:
        return DropConstraintStmt(self.engine).table(table).constraint(name, pk)

    def create_view(self, name: str = "") -> CreateViewStmt:
        return CreateViewStmt(self.engine).name(name)

    def drop_view(self, name: str = "") -> DropViewStmt:
        return DropViewStmt(self.engine).name(name)
