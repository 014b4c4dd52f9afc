"""
Strata SQLBuilder — table DDL.

CREATE TABLE is driven by a Model: the builder either wraps an existing
Model (``from_model``) or assembles one through its fluent methods, then
sanitizes it before rendering. Indexes become separate CREATE INDEX
statements after the table.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from ..faults import (
    ColumnsIsEmptyFault,
    Fault,
    SQLBuildFault,
    TableIsEmptyFault,
    UnsupportedOperationFault,
)
from ..models.column import Column, PrimitiveType
from ..models.constraint import ForeignKey, IndexKind
from ..models.model import Model, ai_name
from .base import DDLStmt
from .constraint import check_sql, fk_sql, pk_sql, unique_sql
from .index import create_index_sql
from .rebuild import load_table

__all__ = [
    "CreateTableStmt",
    "DropTableStmt",
    "TruncateStmt",
    "AddColumnStmt",
    "DropColumnStmt",
    "column_definition",
]

_MISSING = object()


def column_definition(dialect: Any, col: Column) -> str:
    return "{" + col.name + "} " + dialect.sql_type(col)


def _make_column(
    name: str,
    primitive_type: PrimitiveType,
    nullable: bool,
    default: Any,
    length: Sequence[int],
) -> Column:
    col = Column(name, primitive_type, nullable=nullable, length=list(length))
    if default is not _MISSING:
        col.set_default(default)
    return col


class CreateTableStmt(DDLStmt):
    """CREATE TABLE IF NOT EXISTS plus its indexes."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._table = ""
        self.model = Model("")

    def reset(self) -> "CreateTableStmt":
        self.__init__(self.engine)
        return self

    def _try(self, fn, *args: Any) -> "CreateTableStmt":
        if self._err is not None:
            return self
        try:
            fn(*args)
        except Fault as exc:
            self.fail(exc)
        return self

    def table(self, name: str) -> "CreateTableStmt":
        """Table name as rendered (may carry ``#``); also names the model."""
        self._table = name
        self.model.name = name.replace("#", "")
        return self

    def from_model(self, model: Model, table: Optional[str] = None) -> "CreateTableStmt":
        """Render ``model``; ``table`` overrides the rendered name (e.g. ``#`` + name)."""
        self.model = model
        self._table = table or model.name
        return self

    def column(
        self,
        name: str,
        primitive_type: PrimitiveType,
        *,
        nullable: bool = False,
        default: Any = _MISSING,
        length: Sequence[int] = (),
    ) -> "CreateTableStmt":
        col = _make_column(name, primitive_type, nullable, default, length)
        return self._try(self.model.add_column, col)

    def auto_increment(self, name: str, primitive_type: PrimitiveType = PrimitiveType.INT64) -> "CreateTableStmt":
        return self._try(self.model.add_column, Column(name, primitive_type, ai=True))

    def _find(self, name: str) -> Optional[Column]:
        col = self.model.find_column(name)
        if col is None:
            self.fail(SQLBuildFault(f"column '{name}' is not defined"))
        return col

    def pk(self, *cols: str) -> "CreateTableStmt":
        for name in cols:
            col = self._find(name)
            if col is not None:
                self._try(self.model.add_primary_key, col)
        return self

    def unique(self, name: str, *cols: str) -> "CreateTableStmt":
        return self.index(IndexKind.UNIQUE, name, *cols)

    def index(self, kind: IndexKind, name: str, *cols: str) -> "CreateTableStmt":
        for col_name in cols:
            col = self._find(col_name)
            if col is not None:
                self._try(self.model.add_index, kind, name, col)
        return self

    def check(self, name: str, expr: str) -> "CreateTableStmt":
        return self._try(self.model.new_check, name, expr)

    def foreign_key(
        self,
        name: str,
        col: str,
        ref_table: str,
        ref_col: str,
        update_rule: str = "",
        delete_rule: str = "",
    ) -> "CreateTableStmt":
        fk = ForeignKey(name, col, ref_table, ref_col, update_rule or None, delete_rule or None)
        return self._try(self.model.new_foreign_key, fk)

    def options(self, key: str, *values: str) -> "CreateTableStmt":
        self.model.meta[key] = list(values)
        return self

    def ddl_sql(self) -> List[str]:
        """
        CREATE TABLE followed by one CREATE INDEX per index.

        Raises:
            SchemaFault: The model fails ``sanitize()``
            ColumnsIsEmptyFault: No columns
        """
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()
        model = self.model
        model.sanitize()
        if not model.columns:
            raise ColumnsIsEmptyFault()

        dialect = self.dialect
        lines = [column_definition(dialect, col) for col in model.columns]

        if model.auto_increment is not None and not dialect.inline_ai_primary_key:
            lines.append(pk_sql(ai_name(model.name), [model.auto_increment.name]))
        if model.primary_key is not None:
            lines.append(pk_sql(model.primary_key.name, model.primary_key.column_names))
        for name, cons in model.unique_constraints.items():
            lines.append(unique_sql(name, cons.column_names))
        for name, expr in model.checks.items():
            lines.append(check_sql(name, expr))
        for fk in model.foreign_keys.values():
            lines.append(fk_sql(fk))

        sql = (
            "CREATE TABLE IF NOT EXISTS {" + self._table + "} ("
            + ",".join(lines)
            + ")"
            + dialect.create_table_options_sql(model.meta)
        )
        stmts = [sql]
        for name, cons in model.indexes.items():
            stmts.append(create_index_sql(IndexKind.DEFAULT, name, self._table, cons.column_names))
        return stmts


class DropTableStmt(DDLStmt):
    """DROP TABLE IF EXISTS for one or more tables."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._tables: List[str] = []

    def table(self, *tables: str) -> "DropTableStmt":
        self._tables.extend(tables)
        return self

    def ddl_sql(self) -> List[str]:
        self._check_err()
        if not self._tables:
            raise TableIsEmptyFault()
        return ["DROP TABLE IF EXISTS {" + t + "}" for t in self._tables]


class TruncateStmt(DDLStmt):
    """Remove every row and reset the auto-increment counter."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._table = ""
        self._ai_column = ""

    def table(self, table: str, ai_column: str = "") -> "TruncateStmt":
        self._table = table
        self._ai_column = ai_column
        return self

    def ddl_sql(self) -> List[str]:
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()
        # Resolved here because some dialects name the table inside a literal.
        table = self._table.replace("#", self.engine.table_prefix)
        return self.dialect.truncate_table_sql(table, self._ai_column)


class AddColumnStmt(DDLStmt):
    """ALTER TABLE ... ADD column."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._table = ""
        self._column: Optional[Column] = None

    def table(self, table: str) -> "AddColumnStmt":
        self._table = table
        return self

    def column(
        self,
        name: str,
        primitive_type: PrimitiveType,
        *,
        nullable: bool = False,
        default: Any = _MISSING,
        length: Sequence[int] = (),
    ) -> "AddColumnStmt":
        return self.from_column(_make_column(name, primitive_type, nullable, default, length))

    def from_column(self, col: Column) -> "AddColumnStmt":
        if col.ai:
            return self.fail(UnsupportedOperationFault("add column", "auto-increment columns"))
        self._column = col
        return self

    def ddl_sql(self) -> List[str]:
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()
        if self._column is None:
            raise ColumnsIsEmptyFault()
        self._column.check(self._table)
        return ["ALTER TABLE {" + self._table + "} ADD " + column_definition(self.dialect, self._column)]


class DropColumnStmt(DDLStmt):
    """ALTER TABLE ... DROP COLUMN, or a table rebuild where unsupported."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._table = ""
        self._column = ""

    def table(self, table: str) -> "DropColumnStmt":
        self._table = table
        return self

    def column(self, name: str) -> "DropColumnStmt":
        self._column = name
        return self

    def _validate(self) -> None:
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()
        if not self._column:
            raise ColumnsIsEmptyFault()

    def ddl_sql(self) -> List[str]:
        self._validate()
        if not self.dialect.supports_alter_drop:
            raise SQLBuildFault(
                f"{self.dialect.name} drops columns by rebuilding the table; use exec()"
            )
        return ["ALTER TABLE {" + self._table + "} DROP COLUMN {" + self._column + "}"]

    async def build(self) -> List[str]:
        self._validate()
        if self.dialect.supports_alter_drop:
            return self.ddl_sql()
        table = await load_table(self.engine, self._table)
        return table.without_column(self._column).rebuild_sql()
