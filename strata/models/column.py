"""
Strata Models — Column definitions.

A Column describes one table column independently of any SQL engine:
its primitive type, nullability, default and declared lengths. The
dialect layer turns it into a column-definition fragment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from ..faults import SchemaFault


class PrimitiveType(str, Enum):
    """Engine-neutral column types."""

    BOOL = "bool"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    DECIMAL = "decimal"
    STRING = "string"
    BYTES = "bytes"
    TIME = "time"

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_TYPES

    @property
    def is_unsigned(self) -> bool:
        return self in _UNSIGNED_TYPES

    @property
    def is_float(self) -> bool:
        return self in (PrimitiveType.FLOAT32, PrimitiveType.FLOAT64)

    @property
    def is_numeric(self) -> bool:
        return self.is_integer or self.is_float or self is PrimitiveType.DECIMAL


_UNSIGNED_TYPES = frozenset({
    PrimitiveType.UINT,
    PrimitiveType.UINT8,
    PrimitiveType.UINT16,
    PrimitiveType.UINT32,
    PrimitiveType.UINT64,
})

_INTEGER_TYPES = frozenset({
    PrimitiveType.INT,
    PrimitiveType.INT8,
    PrimitiveType.INT16,
    PrimitiveType.INT32,
    PrimitiveType.INT64,
}) | _UNSIGNED_TYPES


@dataclass(eq=False)
class Column:
    """
    A single table column.

    Attributes:
        name: Column name as it appears in SQL
        primitive_type: Engine-neutral type
        ai: Auto-increment column
        nullable: Column accepts NULL
        has_default: Whether ``default`` is meaningful
        default: Default value (python value, rendered by the dialect)
        length: Zero, one or two declared lengths
            (string size, decimal precision/scale, time precision...)
        field_name: Attribute name of the mapped python field
    """

    name: str
    primitive_type: PrimitiveType
    ai: bool = False
    nullable: bool = False
    has_default: bool = False
    default: Any = None
    length: List[int] = field(default_factory=list)
    field_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.field_name is None:
            self.field_name = self.name

    def set_default(self, value: Any) -> None:
        self.has_default = True
        self.default = value

    def is_zero(self, value: Any) -> bool:
        """
        Whether ``value`` is the zero value of this column's type.

        Zero values are indistinguishable from "not set": an explicit 0 on
        an auto-increment or defaulted column is omitted on insert.
        """
        if value is None:
            return True
        t = self.primitive_type
        if t is PrimitiveType.TIME:
            return False
        if t is PrimitiveType.BOOL:
            return value is False
        if t.is_numeric:
            return value == 0
        if t is PrimitiveType.STRING:
            return value == ""
        if t is PrimitiveType.BYTES:
            return len(value) == 0
        return False

    def check(self, table: str = "") -> None:
        """
        Validate the column on its own.

        Raises:
            SchemaFault: On any violated rule
        """
        if not self.name:
            raise SchemaFault(table, "column name is empty")

        if self.ai:
            if self.has_default:
                raise SchemaFault(table, f"auto-increment column '{self.name}' cannot have a default value")
            if self.nullable:
                raise SchemaFault(table, f"auto-increment column '{self.name}' cannot be nullable")
            if not self.primitive_type.is_integer:
                raise SchemaFault(table, f"auto-increment column '{self.name}' must be an integer")

        if self.primitive_type is PrimitiveType.STRING:
            if self.length and self.length[0] != -1 and self.length[0] <= 0:
                raise SchemaFault(
                    table,
                    f"string column '{self.name}' length must be -1 or positive, got {self.length[0]}",
                )
        else:
            for n in self.length:
                if n < 0:
                    raise SchemaFault(table, f"column '{self.name}' has negative length {n}")

    def __repr__(self) -> str:
        return f"<Column {self.name} {self.primitive_type.value}>"


__all__ = ["PrimitiveType", "Column"]
