"""
Strata CRUD — single-object operations driven by the mapped Model.

Every operation that targets one existing row identifies it with the first
predicate that applies, in this order:

1. the auto-increment column, when its value is non-zero;
2. every primary key column, when all of them are non-zero;
3. the one unique constraint whose columns are all non-zero.

Two qualifying unique constraints raise AmbiguousPredicateFault; nothing
qualifying raises NoUniquePredicateFault.

Zero values are "unset": ``insert`` leaves out a zero column that is
auto-increment or has a default, even when the zero was set on purpose.

All functions take an engine (``Database`` or ``Transaction``) first.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence, Tuple

from .faults import (
    AmbiguousPredicateFault,
    NoUniquePredicateFault,
    SchemaFault,
    UnsupportedOperationFault,
)
from .models.column import Column
from .models.mapping import get_value, instantiate, populate
from .models.model import Model
from .sqlbuilder import (
    CreateTableStmt,
    CreateViewStmt,
    DeleteStmt,
    DropTableStmt,
    DropViewStmt,
    InsertStmt,
    SelectStmt,
    TruncateStmt,
    UpdateStmt,
)

logger = logging.getLogger("strata.crud")

__all__ = [
    "unique_predicate",
    "insert",
    "insert_many",
    "last_insert_id",
    "update",
    "delete",
    "select",
    "find_where",
    "count",
    "create",
    "drop",
    "truncate",
]


def _model(engine: Any, obj: Any) -> Model:
    cls = obj if isinstance(obj, type) else type(obj)
    return engine.models.get(cls)


def _table(model: Model) -> str:
    return "#" + model.name


def _require_table(model: Model, operation: str) -> None:
    if model.is_view:
        raise UnsupportedOperationFault(operation, f"'{model.name}' is a view")


def unique_predicate(model: Model, obj: Any) -> List[Tuple[Column, Any]]:
    """
    Columns and values identifying ``obj``'s row.

    Raises:
        AmbiguousPredicateFault: Several unique constraints qualify
        NoUniquePredicateFault: No predicate qualifies
    """
    ai = model.auto_increment
    if ai is not None:
        value = get_value(obj, ai)
        if not ai.is_zero(value):
            return [(ai, value)]

    def collect(cols: Sequence[Column]) -> List[Tuple[Column, Any]]:
        pairs = []
        for col in cols:
            value = get_value(obj, col)
            if col.is_zero(value):
                return []
            pairs.append((col, value))
        return pairs

    if model.primary_key is not None:
        pairs = collect(model.primary_key.columns)
        if pairs:
            return pairs

    found: List[Tuple[Column, Any]] = []
    found_name = ""
    for name, cons in model.unique_constraints.items():
        pairs = collect(cons.columns)
        if not pairs:
            continue
        if found:
            raise AmbiguousPredicateFault(model.name, [found_name, name])
        found, found_name = pairs, name

    if not found:
        raise NoUniquePredicateFault(model.name)
    return found


def _where_unique(stmt: Any, model: Model, obj: Any) -> None:
    for col, value in unique_predicate(model, obj):
        stmt.and_("{" + col.name + "}=?", value)


def _insert_columns(model: Model, obj: Any) -> List[Column]:
    cols = []
    for col in model.columns:
        if col.is_zero(get_value(obj, col)) and (col.ai or col.has_default):
            continue
        cols.append(col)
    return cols


def _insert_stmt(engine: Any, model: Model, obj: Any) -> InsertStmt:
    stmt = InsertStmt(engine).table(_table(model))
    for col in _insert_columns(model, obj):
        stmt.key_value(col.name, get_value(obj, col))
    return stmt


async def insert(engine: Any, obj: Any) -> Any:
    """Insert ``obj``; an object with nothing to write inserts an all-default row."""
    model = _model(engine, obj)
    _require_table(model, "insert")
    return await _insert_stmt(engine, model, obj).exec()


async def insert_many(engine: Any, *objs: Any) -> List[Any]:
    """
    One multi-row insert per mapped type, in order of first appearance.

    The column list of each insert is taken from the first object of that
    type. Several types are inserted inside one transaction.
    """
    groups: Dict[type, List[Any]] = {}
    for obj in objs:
        groups.setdefault(type(obj), []).append(obj)

    if len(groups) > 1 and not engine.in_transaction:
        async with engine.transaction() as tx:
            return await insert_many(tx, *objs)

    results = []
    for cls, items in groups.items():
        model = _model(engine, cls)
        _require_table(model, "insert_many")
        cols = _insert_columns(model, items[0])
        stmt = InsertStmt(engine).table(_table(model))
        stmt.columns(*(col.name for col in cols))
        for obj in items:
            stmt.values(*(get_value(obj, col) for col in cols))
        results.append(await stmt.exec())
        logger.debug("Inserted %d rows into '%s'", len(items), model.name)
    return results


async def last_insert_id(engine: Any, obj: Any) -> int:
    """Insert ``obj`` and return the generated auto-increment value."""
    model = _model(engine, obj)
    _require_table(model, "last_insert_id")
    if model.auto_increment is None:
        raise UnsupportedOperationFault(
            "last_insert_id", f"'{model.name}' has no auto-increment column"
        )
    stmt = _insert_stmt(engine, model, obj).key_name(model.auto_increment.name)
    return await stmt.last_insert_id()


async def update(engine: Any, obj: Any, *always: str) -> Any:
    """
    Update the row of ``obj`` with its non-zero columns.

    Columns named in ``always`` are written even when zero. With an OCC
    column the update only matches while the stored version equals the
    object's; check ``rowcount`` to detect a lost race.
    """
    model = _model(engine, obj)
    _require_table(model, "update")
    for name in always:
        if model.find_column(name) is None:
            raise SchemaFault(model.name, f"column '{name}' does not exist")

    stmt = UpdateStmt(engine).table(_table(model))
    for col in model.columns:
        if col.ai or col is model.occ:
            continue
        value = get_value(obj, col)
        if col.is_zero(value) and col.name not in always:
            continue
        stmt.set(col.name, value)

    if model.occ is not None:
        stmt.occ(model.occ.name, get_value(obj, model.occ))

    _where_unique(stmt, model, obj)
    return await stmt.exec()


async def delete(engine: Any, obj: Any) -> Any:
    model = _model(engine, obj)
    _require_table(model, "delete")
    stmt = DeleteStmt(engine).table(_table(model))
    _where_unique(stmt, model, obj)
    return await stmt.exec()


async def select(engine: Any, obj: Any) -> bool:
    """
    Load the row of ``obj`` into ``obj``.

    Returns:
        False when no row matched (``obj`` is left untouched)
    """
    model = _model(engine, obj)
    stmt = SelectStmt(engine).from_(_table(model))
    _where_unique(stmt, model, obj)
    row = await stmt.query_one()
    if row is None:
        return False
    populate(model, obj, row)
    return True


async def find_where(engine: Any, cls: type, cond: str = "", *args: Any) -> List[Any]:
    """Instances of ``cls`` for every row matching ``cond`` (all rows when empty)."""
    model = _model(engine, cls)
    stmt = SelectStmt(engine).from_(_table(model))
    if cond:
        stmt.where(cond, *args)
    rows = await stmt.query()
    return [instantiate(cls, model, row) for row in rows]


async def count(engine: Any, obj: Any) -> int:
    """Number of rows equal to ``obj`` on every non-zero column."""
    model = _model(engine, obj)
    stmt = SelectStmt(engine).from_(_table(model)).count()
    matched = False
    for col in model.columns:
        value = get_value(obj, col)
        if col.is_zero(value):
            continue
        stmt.and_("{" + col.name + "}=?", value)
        matched = True
    if not matched:
        raise UnsupportedOperationFault("count", f"'{model.name}' object has no non-zero column")
    return await stmt.query_int("count")


def _create_sql(engine: Any, model: Model) -> List[str]:
    if model.is_view:
        return CreateViewStmt(engine).name(_table(model)).select(model.view_as).ddl_sql()
    return CreateTableStmt(engine).from_model(model, _table(model)).ddl_sql()


async def create(engine: Any, *classes: type) -> None:
    """Create tables (and their indexes) or views for ``classes``."""
    stmts: List[str] = []
    for cls in classes:
        stmts.extend(_create_sql(engine, _model(engine, cls)))
    logger.debug("Creating %d models with %d statements", len(classes), len(stmts))
    await engine.exec_ddl(*stmts)


async def drop(engine: Any, *classes: type) -> None:
    stmts: List[str] = []
    for cls in classes:
        model = _model(engine, cls)
        if model.is_view:
            stmts.extend(DropViewStmt(engine).name(_table(model)).ddl_sql())
        else:
            stmts.extend(DropTableStmt(engine).table(_table(model)).ddl_sql())
    await engine.exec_ddl(*stmts)


async def truncate(engine: Any, *classes: type) -> None:
    """Delete every row and reset the auto-increment counter."""
    stmts: List[str] = []
    for cls in classes:
        model = _model(engine, cls)
        _require_table(model, "truncate")
        ai = model.auto_increment.name if model.auto_increment is not None else ""
        stmts.extend(TruncateStmt(engine).table(_table(model), ai).ddl_sql())
    await engine.exec_ddl(*stmts)
