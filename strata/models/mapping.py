"""
Strata Models — dataclass to Model mapping.

Fields of a dataclass become columns. A field's ``metadata["orm"]`` tag
refines the column::

    @dataclass
    class User:
        id: int = field(default=0, metadata={"orm": "name(id);ai"})
        name: str = field(default="", metadata={"orm": "len(50);unique(u_user_name)"})
        version: int = field(default=0, metadata={"orm": "occ"})
        nickname: Optional[str] = None

        class Meta:
            table = "users"
            checks = {"c_version": "version >= 0"}
            options = {"mysql_engine": "innodb"}

Supported tag items: ``-``, ``name(col)``, ``len(a[,b])``,
``nullable[(bool)]``, ``ai``, ``pk``, ``unique(name)``, ``index(name)``,
``fk(name,table,col[,update[,delete]])``, ``default(value)``,
``occ[(bool)]``, ``type(primitive)``.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple, Union

from ..faults import SchemaFault
from . import tags
from .column import Column, PrimitiveType
from .constraint import ForeignKey, IndexKind
from .model import Model, ModelKind

ORM_KEY = "orm"

_PYTHON_TYPES: Dict[type, PrimitiveType] = {
    bool: PrimitiveType.BOOL,
    int: PrimitiveType.INT64,
    float: PrimitiveType.FLOAT64,
    Decimal: PrimitiveType.DECIMAL,
    str: PrimitiveType.STRING,
    bytes: PrimitiveType.BYTES,
    datetime: PrimitiveType.TIME,
    date: PrimitiveType.TIME,
}

# Tags describing the column itself; applied before the column is added.
_SHAPE_TAGS = frozenset({"name", "len", "nullable", "default", "type"})
# Tags attaching the column to the model; applied after it is added.
_RELATION_TAGS = frozenset({"ai", "pk", "unique", "index", "fk", "occ"})


def table_name_of(cls: type) -> str:
    meta = getattr(cls, "Meta", None)
    name = None
    if meta is not None:
        name = getattr(meta, "table", None) or getattr(meta, "table_name", None)
    return name or cls.__name__.lower()


def _resolve_type(hint: Any) -> Tuple[Optional[type], bool]:
    """Return (python type, nullable) for an annotation."""
    origin = typing.get_origin(hint)
    if origin is Union or (hasattr(types, "UnionType") and origin is types.UnionType):
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        nullable = len(args) != len(typing.get_args(hint))
        if len(args) == 1:
            inner, _ = _resolve_type(args[0])
            return inner, nullable
        return None, nullable
    if isinstance(hint, type):
        return hint, False
    return None, False


def _primitive_for(py_type: Optional[type]) -> Optional[PrimitiveType]:
    if py_type is None:
        return None
    for base, prim in _PYTHON_TYPES.items():
        if py_type is base:
            return prim
    # bool is a subclass of int, so exact matches are tried first.
    for base, prim in _PYTHON_TYPES.items():
        if issubclass(py_type, base):
            return prim
    return None


def parse_default(col: Column, raw: str, table: str = "") -> Any:
    """Convert a tag default into the column's python value."""
    t = col.primitive_type
    try:
        if t is PrimitiveType.BOOL:
            return tags.parse_bool(raw)
        if t.is_integer:
            return int(raw)
        if t.is_float:
            return float(raw)
        if t is PrimitiveType.DECIMAL:
            return Decimal(raw)
        if t is PrimitiveType.BYTES:
            return raw.encode()
        if t is PrimitiveType.TIME:
            return datetime.fromisoformat(raw)
    except (ValueError, ArithmeticError) as exc:
        raise SchemaFault(table, f"invalid default {raw!r} for column '{col.name}': {exc}") from exc
    return raw


def _optional_bool(table: str, col: Column, item: tags.Tag) -> bool:
    if not item.args:
        return True
    if len(item.args) > 1:
        raise SchemaFault(table, f"column '{col.name}': too many values for '{item.name}'")
    try:
        return tags.parse_bool(item.args[0])
    except ValueError as exc:
        raise SchemaFault(table, f"column '{col.name}': {exc}") from exc


def _single_arg(table: str, col: Column, item: tags.Tag) -> str:
    if len(item.args) != 1:
        raise SchemaFault(table, f"column '{col.name}': '{item.name}' takes exactly one value")
    return item.args[0]


def _apply_shape(table: str, col: Column, item: tags.Tag) -> None:
    if item.name == "name":
        col.name = _single_arg(table, col, item)
    elif item.name == "len":
        if len(item.args) not in (1, 2):
            raise SchemaFault(table, f"column '{col.name}': 'len' takes one or two values")
        try:
            col.length = [int(a) for a in item.args]
        except ValueError as exc:
            raise SchemaFault(table, f"column '{col.name}': invalid length {item.args}") from exc
    elif item.name == "nullable":
        col.nullable = _optional_bool(table, col, item)
    elif item.name == "type":
        raw = _single_arg(table, col, item).lower()
        try:
            col.primitive_type = PrimitiveType(raw)
        except ValueError as exc:
            raise SchemaFault(table, f"column '{col.name}': unknown type '{raw}'") from exc
    elif item.name == "default":
        # Resolved after every shape tag so type(...) is already applied.
        pass


def _apply_relation(model: Model, col: Column, item: tags.Tag) -> None:
    table = model.name
    if item.name == "ai":
        if item.args:
            raise SchemaFault(table, f"column '{col.name}': 'ai' takes no value")
        model.set_auto_increment(col)
    elif item.name == "pk":
        if item.args:
            raise SchemaFault(table, f"column '{col.name}': 'pk' takes no value")
        model.add_primary_key(col)
    elif item.name == "unique":
        model.add_index(IndexKind.UNIQUE, _single_arg(table, col, item).lower(), col)
    elif item.name == "index":
        model.add_index(IndexKind.DEFAULT, _single_arg(table, col, item).lower(), col)
    elif item.name == "fk":
        if len(item.args) < 3:
            raise SchemaFault(table, f"column '{col.name}': 'fk' needs name, table and column")
        args = item.args + [None, None]
        model.new_foreign_key(ForeignKey(
            name=args[0].lower(),
            column=col.name,
            ref_table=args[1],
            ref_column=args[2],
            update_rule=args[3] or None,
            delete_rule=args[4] or None,
        ))
    elif item.name == "occ":
        if _optional_bool(table, col, item):
            model.set_occ(col)


def _parse_meta(model: Model, meta: Optional[type]) -> None:
    if meta is None:
        return
    view = getattr(meta, "view", None)
    if view:
        model.kind = ModelKind.VIEW
        model.view_as = view
    for name, expr in (getattr(meta, "checks", None) or {}).items():
        model.new_check(name.lower(), expr)
    for key, value in (getattr(meta, "options", None) or {}).items():
        model.meta[key] = [value] if isinstance(value, str) else list(value)


def build_model(cls: type) -> Model:
    """
    Build and sanitize the Model describing dataclass ``cls``.

    Raises:
        SchemaFault: If the class is not a dataclass, a tag is invalid or
            the resulting model violates an invariant
    """
    table = table_name_of(cls)
    if not dataclasses.is_dataclass(cls):
        raise SchemaFault(table, f"{cls.__name__} is not a dataclass")

    model = Model(table)
    hints = typing.get_type_hints(cls)

    for f in dataclasses.fields(cls):
        if f.name.startswith("_"):
            continue
        tag = f.metadata.get(ORM_KEY, "")
        if tag.strip() == "-":
            continue

        py_type, nullable = _resolve_type(hints.get(f.name))
        items = tags.parse(tag)
        for item in items:
            if item.name not in _SHAPE_TAGS and item.name not in _RELATION_TAGS:
                raise SchemaFault(table, f"field '{f.name}': unknown tag '{item.name}'")

        prim = _primitive_for(py_type)
        explicit_type = any(item.name == "type" for item in items)
        if prim is None and not explicit_type:
            raise SchemaFault(table, f"field '{f.name}': cannot map type {hints.get(f.name)!r}")

        col = Column(f.name, prim or PrimitiveType.STRING, nullable=nullable, field_name=f.name)
        for item in items:
            if item.name in _SHAPE_TAGS:
                _apply_shape(table, col, item)
        for item in items:
            if item.name == "default":
                col.set_default(parse_default(col, _single_arg(table, col, item), table))

        model.add_column(col)
        for item in items:
            if item.name in _RELATION_TAGS:
                _apply_relation(model, col, item)

    _parse_meta(model, getattr(cls, "Meta", None))
    model.sanitize()
    return model


# ── Value access ────────────────────────────────────────────────────────

def get_value(obj: Any, col: Column) -> Any:
    return getattr(obj, col.field_name)


def to_python(col: Column, value: Any) -> Any:
    """Normalize a driver value to the column's python type."""
    if value is None:
        return None
    t = col.primitive_type
    if t is PrimitiveType.BOOL:
        return bool(value)
    if t is PrimitiveType.DECIMAL and not isinstance(value, Decimal):
        return Decimal(str(value))
    if t is PrimitiveType.TIME and isinstance(value, str):
        return datetime.fromisoformat(value)
    if t is PrimitiveType.BYTES and isinstance(value, (memoryview, bytearray)):
        return bytes(value)
    return value


def populate(model: Model, obj: Any, row: Dict[str, Any]) -> None:
    """Copy ``row`` (column name -> value) onto ``obj``."""
    for col in model.columns:
        if col.name in row:
            setattr(obj, col.field_name, to_python(col, row[col.name]))


def instantiate(cls: type, model: Model, row: Dict[str, Any]) -> Any:
    """Create an instance of ``cls`` from ``row``; unmapped init fields get None."""
    kwargs: Dict[str, Any] = {}
    for col in model.columns:
        if col.name in row:
            kwargs[col.field_name] = to_python(col, row[col.name])
    for f in dataclasses.fields(cls):
        if not f.init or f.name in kwargs:
            continue
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            kwargs[f.name] = None
    return cls(**kwargs)


__all__ = [
    "ORM_KEY",
    "build_model",
    "table_name_of",
    "parse_default",
    "get_value",
    "to_python",
    "populate",
    "instantiate",
]
