"""
Strata Models — Model (table/view description).

A Model is built incrementally (normally by the mapping step) and sealed by
``sanitize()``; a mutator called on a sealed model raises SchemaFault.
Every mutator validates the invariant it touches and raises SchemaFault on
violation; cross-cutting checks run once in ``sanitize()``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterator, List, Optional

from ..faults import SchemaFault
from .column import Column
from .constraint import Constraint, ForeignKey, IndexKind

logger = logging.getLogger("strata.models")


class ModelKind(str, Enum):
    TABLE = "table"
    VIEW = "view"


def pk_name(table: str) -> str:
    """Name of the primary key constraint of ``table``."""
    return table + "_pk"


def ai_name(table: str) -> str:
    """Name of the auto-increment constraint of ``table``."""
    return table + "_ai"


class Model:
    """
    Schema description of a single table or view.

    Attributes:
        name: Table (or view) name, without prefix
        kind: TABLE or VIEW
        view_as: Select text for a view
        columns: Ordered columns
        auto_increment: The auto-increment column, if any
        primary_key: Primary key constraint, if any
        unique_constraints: name -> Constraint, in declaration order
        indexes: name -> Constraint, in declaration order
        checks: name -> expression
        foreign_keys: name -> ForeignKey
        occ: Optimistic-concurrency version column, if any
        meta: Free-form options (mysql_engine, sqlite_rowid, ...)
    """

    def __init__(self, name: str, kind: ModelKind = ModelKind.TABLE, view_as: str = ""):
        self.name = name
        self.kind = kind
        self.view_as = view_as
        self.columns: List[Column] = []
        self.auto_increment: Optional[Column] = None
        self.primary_key: Optional[Constraint] = None
        self.unique_constraints: Dict[str, Constraint] = {}
        self.indexes: Dict[str, Constraint] = {}
        self.checks: Dict[str, str] = {}
        self.foreign_keys: Dict[str, ForeignKey] = {}
        self.occ: Optional[Column] = None
        self.meta: Dict[str, List[str]] = {}
        self.sealed = False

    # ── Columns ─────────────────────────────────────────────────────────

    def find_column(self, name: str) -> Optional[Column]:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def find_field(self, field_name: str) -> Optional[Column]:
        for col in self.columns:
            if col.field_name == field_name:
                return col
        return None

    def _fault(self, reason: str) -> SchemaFault:
        return SchemaFault(self.name, reason)

    def _require_open(self) -> None:
        if self.sealed:
            raise self._fault("model is sealed")

    def _require_added(self, col: Column) -> None:
        if not any(c is col for c in self.columns):
            raise self._fault(f"column '{col.name}' has not been added to the model")

    def add_column(self, col: Column) -> None:
        self._require_open()
        if not col.name:
            raise self._fault("column name is empty")
        if self.find_column(col.name) is not None:
            raise self._fault(f"column '{col.name}' already exists")

        self.columns.append(col)
        if col.ai:
            self.set_auto_increment(col)

    def set_auto_increment(self, col: Column) -> None:
        self._require_open()
        if not col.primitive_type.is_integer:
            raise self._fault(
                f"auto-increment column '{col.name}' must be an integer, not {col.primitive_type.value}"
            )
        if self.auto_increment is not None and self.auto_increment is not col:
            raise self._fault(
                f"auto-increment column already set to '{self.auto_increment.name}'"
            )
        if self.primary_key is not None:
            raise self._fault("auto-increment and primary key are mutually exclusive")
        self._require_added(col)

        col.ai = True
        self.auto_increment = col

    def add_primary_key(self, col: Column) -> None:
        self._require_open()
        if self.auto_increment is not None:
            raise self._fault("auto-increment and primary key are mutually exclusive")
        self._require_added(col)

        if self.primary_key is None:
            self.primary_key = Constraint(pk_name(self.name))
        self.primary_key.add(col)

    def set_occ(self, col: Column) -> None:
        self._require_open()
        if col.ai:
            raise self._fault(f"OCC column '{col.name}' cannot be auto-increment")
        if col.nullable:
            raise self._fault(f"OCC column '{col.name}' cannot be nullable")
        if self.occ is not None:
            raise self._fault(f"OCC column already set to '{self.occ.name}'")
        if not col.primitive_type.is_numeric:
            raise self._fault(
                f"OCC column '{col.name}' must be numeric, not {col.primitive_type.value}"
            )
        self._require_added(col)

        self.occ = col

    # ── Constraints ─────────────────────────────────────────────────────

    def add_index(self, kind: IndexKind, name: str, col: Column) -> None:
        self._require_open()
        if kind is IndexKind.UNIQUE:
            self.add_unique(name, col)
            return
        self._require_added(col)
        self.indexes.setdefault(name, Constraint(name)).add(col)

    def add_unique(self, name: str, col: Column) -> None:
        self._require_open()
        self._require_added(col)
        self.unique_constraints.setdefault(name, Constraint(name)).add(col)

    def new_check(self, name: str, expr: str) -> None:
        self._require_open()
        if name in self.checks:
            raise self._fault(f"check constraint '{name}' already exists")
        if not expr:
            raise self._fault(f"check constraint '{name}' has no expression")
        self.checks[name] = expr

    def new_foreign_key(self, fk: ForeignKey) -> None:
        self._require_open()
        if fk.name in self.foreign_keys:
            raise self._fault(f"foreign key '{fk.name}' already exists")
        if not fk.column:
            raise self._fault(f"foreign key '{fk.name}' has no column")
        if self.find_column(fk.column) is None:
            raise self._fault(f"foreign key '{fk.name}' column '{fk.column}' does not exist")
        if not fk.ref_table or not fk.ref_column:
            raise self._fault(f"foreign key '{fk.name}' has no referenced table or column")
        self.foreign_keys[fk.name] = fk

    def constraint_names(self) -> List[str]:
        names: List[str] = []
        if self.auto_increment is not None:
            names.append(ai_name(self.name))
        if self.primary_key is not None:
            names.append(self.primary_key.name)
        names.extend(self.indexes)
        names.extend(self.unique_constraints)
        names.extend(self.checks)
        names.extend(self.foreign_keys)
        return names

    # ── Validation ──────────────────────────────────────────────────────

    def sanitize(self) -> None:
        """
        Validate the whole model.

        Raises:
            SchemaFault: On the first violated invariant
        """
        if not self.name:
            raise SchemaFault("<unnamed>", "model name is empty")
        if not isinstance(self.kind, ModelKind):
            raise self._fault(f"invalid model kind {self.kind!r}")
        if self.kind is ModelKind.VIEW and not self.view_as:
            raise self._fault("view has no select statement")

        if self.primary_key is not None and len(self.primary_key.columns) == 1:
            col = self.primary_key.columns[0]
            if col.has_default:
                raise self._fault(f"single column primary key '{col.name}' cannot have a default value")
            if col.nullable:
                raise self._fault(f"single column primary key '{col.name}' cannot be nullable")

        for col in self.columns:
            col.check(self.name)

        names = sorted(n.lower() for n in self.constraint_names())
        for prev, cur in zip(names, names[1:]):
            if prev == cur:
                raise self._fault(f"duplicate constraint name '{cur}'")

        self.sealed = True
        logger.debug("Model '%s' sanitized (%d columns)", self.name, len(self.columns))

    # ── Introspection helpers ───────────────────────────────────────────

    @property
    def is_view(self) -> bool:
        return self.kind is ModelKind.VIEW

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def __iter__(self) -> Iterator[Column]:
        return iter(self.columns)

    def __repr__(self) -> str:
        return f"<Model {self.name} ({self.kind.value}, {len(self.columns)} columns)>"


__all__ = ["Model", "ModelKind", "pk_name", "ai_name"]
