"""
Strata Models — Constraint definitions.

Primary keys, unique constraints and plain indexes share one shape: a name
plus an ordered column list. Foreign keys carry a single local column and
its reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .column import Column


class IndexKind(str, Enum):
    DEFAULT = "index"
    UNIQUE = "unique"


class ConstraintKind(str, Enum):
    """Constraint kinds addressable by name (used by alter-table builders)."""

    PRIMARY_KEY = "primary_key"
    UNIQUE = "unique"
    INDEX = "index"
    CHECK = "check"
    FOREIGN_KEY = "foreign_key"
    AUTO_INCREMENT = "auto_increment"


@dataclass
class Constraint:
    """
    Named, ordered set of columns.

    Used for the primary key, unique constraints and indexes.
    """

    name: str
    columns: List[Column] = field(default_factory=list)

    def add(self, col: Column) -> None:
        self.columns.append(col)

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def __contains__(self, col: Column) -> bool:
        return any(c is col for c in self.columns)

    def __repr__(self) -> str:
        return f"<Constraint {self.name}({', '.join(self.column_names)})>"


@dataclass
class ForeignKey:
    """
    FOREIGN KEY (column) REFERENCES ref_table(ref_column).

    Rules are raw SQL actions: CASCADE, SET NULL, RESTRICT, NO ACTION...
    """

    name: str
    column: str
    ref_table: str
    ref_column: str
    update_rule: Optional[str] = None
    delete_rule: Optional[str] = None

    def __repr__(self) -> str:
        return f"<ForeignKey {self.name}: {self.column} -> {self.ref_table}.{self.ref_column}>"


__all__ = ["IndexKind", "ConstraintKind", "Constraint", "ForeignKey"]
