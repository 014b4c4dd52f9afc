"""
Strata Upgrade — batch schema changes for one mapped table.

    await (
        Upgrader(db, User)
        .drop_columns("legacy")
        .add_column("email")
        .add_index("i_user_email")
        .do()
    )

Drops run before adds (columns, then constraints, then indexes). With
transactional DDL the whole batch is one transaction.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from .faults import ConstraintNotFoundFault, Fault, SchemaFault
from .models.column import Column
from .models.model import Model
from .sqlbuilder import (
    AddColumnStmt,
    AddConstraintStmt,
    CreateIndexStmt,
    DropColumnStmt,
    DropConstraintStmt,
    DropIndexStmt,
)

logger = logging.getLogger("strata.upgrade")

__all__ = ["Upgrader"]


class Upgrader:
    """
    Collects add/drop operations against the current Model of ``cls``.

    Names passed to the ``add_*`` methods must exist in the Model; names
    passed to ``drop_*`` are whatever the live table still has. The first
    problem is kept and raised by ``do()``.
    """

    def __init__(self, engine: Any, cls: type):
        self.engine = engine
        self._err: Optional[Fault] = None
        try:
            self.model: Optional[Model] = engine.models.get(cls)
        except Fault as exc:
            self.model = None
            self._err = exc
        self._add_cols: List[Column] = []
        self._drop_cols: List[str] = []
        self._add_conts: List[str] = []
        self._drop_conts: List[str] = []
        self._add_idxs: List[str] = []
        self._drop_idxs: List[str] = []

    @property
    def err(self) -> Optional[Fault]:
        return self._err

    def _fail(self, err: Fault) -> "Upgrader":
        if self._err is None:
            self._err = err
        return self

    @property
    def _table(self) -> str:
        return "#" + self.model.name

    def add_column(self, *names: str) -> "Upgrader":
        if self._err is not None:
            return self
        for name in names:
            col = self.model.find_column(name)
            if col is None:
                return self._fail(SchemaFault(self.model.name, f"column '{name}' does not exist"))
            self._add_cols.append(col)
        return self

    def drop_columns(self, *names: str) -> "Upgrader":
        if self._err is None:
            self._drop_cols.extend(names)
        return self

    def add_constraint(self, *names: str) -> "Upgrader":
        if self._err is not None:
            return self
        for name in names:
            if name not in self._constraint_names():
                return self._fail(ConstraintNotFoundFault(self.model.name, name))
            self._add_conts.append(name)
        return self

    def drop_constraint(self, *names: str) -> "Upgrader":
        if self._err is None:
            self._drop_conts.extend(names)
        return self

    def add_index(self, *names: str) -> "Upgrader":
        if self._err is not None:
            return self
        for name in names:
            if name not in self.model.indexes:
                return self._fail(ConstraintNotFoundFault(self.model.name, name))
            self._add_idxs.append(name)
        return self

    def drop_index(self, *names: str) -> "Upgrader":
        if self._err is None:
            self._drop_idxs.extend(names)
        return self

    def _constraint_names(self) -> List[str]:
        model = self.model
        names = list(model.unique_constraints) + list(model.checks) + list(model.foreign_keys)
        if model.primary_key is not None:
            names.append(model.primary_key.name)
        return names

    async def do(self) -> None:
        """
        Apply every collected change.

        Raises:
            Fault: The first recorded error, or the first statement failure
                (after rolling back when DDL is transactional)
        """
        if self._err is not None:
            raise self._err

        engine = self.engine
        logger.info(
            "Upgrading '%s': -%d/+%d columns, -%d/+%d constraints, -%d/+%d indexes",
            self.model.name,
            len(self._drop_cols), len(self._add_cols),
            len(self._drop_conts), len(self._add_conts),
            len(self._drop_idxs), len(self._add_idxs),
        )
        if engine.dialect.transactional_ddl() and not engine.in_transaction:
            async with engine.transaction() as tx:
                await self._apply(tx)
        else:
            await self._apply(engine)

    async def _apply(self, e: Any) -> None:
        table = self._table
        model = self.model

        for name in self._drop_cols:
            await DropColumnStmt(e).table(table).column(name).exec()

        pk_name = model.primary_key.name if model.primary_key is not None else None
        for name in self._drop_conts:
            await DropConstraintStmt(e).table(table).constraint(name, pk=name == pk_name).exec()

        for name in self._drop_idxs:
            await DropIndexStmt(e).table(table).name(name).exec()

        for col in self._add_cols:
            await AddColumnStmt(e).table(table).from_column(col).exec()

        for name in self._add_conts:
            await self._add_constraint_stmt(e, name).exec()

        for name in self._add_idxs:
            cols = model.indexes[name].column_names
            await CreateIndexStmt(e).table(table).name(name).columns(*cols).exec()

    def _add_constraint_stmt(self, e: Any, name: str) -> AddConstraintStmt:
        model = self.model
        stmt = AddConstraintStmt(e).table(self._table)
        if name in model.unique_constraints:
            return stmt.unique(name, *model.unique_constraints[name].column_names)
        if name in model.checks:
            return stmt.check(name, model.checks[name])
        if name in model.foreign_keys:
            fk = model.foreign_keys[name]
            return stmt.fk(
                name,
                fk.column,
                fk.ref_table,
                fk.ref_column,
                fk.update_rule or "",
                fk.delete_rule or "",
            )
        return stmt.pk(name, *model.primary_key.column_names)
