"""
Strata SQLBuilder — table constraints.

Fragment helpers shared by CREATE TABLE and ALTER TABLE ADD CONSTRAINT,
plus the add/drop constraint statements. On dialects without ALTER TABLE
... DROP/ADD CONSTRAINT (SQLite) the statements rebuild the table.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from ..faults import SQLBuildFault, TableIsEmptyFault
from ..models.constraint import ConstraintKind, ForeignKey
from .base import DDLStmt
from .rebuild import load_table

__all__ = [
    "pk_sql",
    "unique_sql",
    "check_sql",
    "fk_sql",
    "AddConstraintStmt",
    "DropConstraintStmt",
]


def _cols(cols: Sequence[str]) -> str:
    return ",".join("{" + c + "}" for c in cols)


def pk_sql(name: str, cols: Sequence[str]) -> str:
    return "CONSTRAINT {" + name + "} PRIMARY KEY(" + _cols(cols) + ")"


def unique_sql(name: str, cols: Sequence[str]) -> str:
    return "CONSTRAINT {" + name + "} UNIQUE(" + _cols(cols) + ")"


def check_sql(name: str, expr: str) -> str:
    return "CONSTRAINT {" + name + "} CHECK(" + expr + ")"


def fk_sql(fk: ForeignKey) -> str:
    sql = (
        "CONSTRAINT {" + fk.name + "} FOREIGN KEY({" + fk.column + "}) "
        "REFERENCES {" + fk.ref_table + "}({" + fk.ref_column + "})"
    )
    if fk.update_rule:
        sql += " ON UPDATE " + fk.update_rule
    if fk.delete_rule:
        sql += " ON DELETE " + fk.delete_rule
    return sql


class AddConstraintStmt(DDLStmt):
    """ALTER TABLE ... ADD CONSTRAINT."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._table = ""
        self._name = ""
        self._kind: Optional[ConstraintKind] = None
        self._sql = ""

    def table(self, table: str) -> "AddConstraintStmt":
        self._table = table
        return self

    def _set(self, name: str, kind: ConstraintKind, sql: str) -> "AddConstraintStmt":
        if self._kind is not None:
            return self.fail(SQLBuildFault(f"constraint '{self._name}' already described"))
        self._name, self._kind, self._sql = name, kind, sql
        return self

    def pk(self, name: str, *cols: str) -> "AddConstraintStmt":
        if not cols:
            return self.fail(SQLBuildFault(f"primary key '{name}' has no columns"))
        return self._set(name, ConstraintKind.PRIMARY_KEY, pk_sql(name, cols))

    def unique(self, name: str, *cols: str) -> "AddConstraintStmt":
        if not cols:
            return self.fail(SQLBuildFault(f"unique constraint '{name}' has no columns"))
        return self._set(name, ConstraintKind.UNIQUE, unique_sql(name, cols))

    def check(self, name: str, expr: str) -> "AddConstraintStmt":
        if not expr:
            return self.fail(SQLBuildFault(f"check constraint '{name}' has no expression"))
        return self._set(name, ConstraintKind.CHECK, check_sql(name, expr))

    def fk(
        self,
        name: str,
        col: str,
        ref_table: str,
        ref_col: str,
        update_rule: str = "",
        delete_rule: str = "",
    ) -> "AddConstraintStmt":
        fk = ForeignKey(name, col, ref_table, ref_col, update_rule or None, delete_rule or None)
        return self._set(name, ConstraintKind.FOREIGN_KEY, fk_sql(fk))

    def _validate(self) -> None:
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()
        if self._kind is None:
            raise SQLBuildFault("no constraint described")

    def ddl_sql(self) -> List[str]:
        self._validate()
        if not self.dialect.supports_alter_drop:
            raise SQLBuildFault(
                f"{self.dialect.name} adds constraints by rebuilding the table; use exec()"
            )
        return ["ALTER TABLE {" + self._table + "} ADD " + self._sql]

    async def build(self) -> List[str]:
        self._validate()
        if self.dialect.supports_alter_drop:
            return self.ddl_sql()
        table = await load_table(self.engine, self._table)
        return table.with_constraint(self._name, self._kind, self._sql).rebuild_sql()


class DropConstraintStmt(DDLStmt):
    """ALTER TABLE ... DROP CONSTRAINT; ``pk=True`` for the primary key."""

    def __init__(self, engine: Any):
        super().__init__(engine)
        self._table = ""
        self._name = ""
        self._pk = False

    def table(self, table: str) -> "DropConstraintStmt":
        self._table = table
        return self

    def constraint(self, name: str, pk: bool = False) -> "DropConstraintStmt":
        self._name = name
        self._pk = pk
        return self

    def _validate(self) -> None:
        self._check_err()
        if not self._table:
            raise TableIsEmptyFault()
        if not self._name:
            raise SQLBuildFault("constraint name is empty")

    def ddl_sql(self) -> List[str]:
        self._validate()
        if not self.dialect.supports_alter_drop:
            raise SQLBuildFault(
                f"{self.dialect.name} drops constraints by rebuilding the table; use exec()"
            )
        return [self.dialect.drop_constraint_sql(self._table, self._name, self._pk)]

    async def build(self) -> List[str]:
        self._validate()
        if self.dialect.supports_alter_drop:
            return self.ddl_sql()
        table = await load_table(self.engine, self._table)
        return table.without_constraint(self._name).rebuild_sql()
