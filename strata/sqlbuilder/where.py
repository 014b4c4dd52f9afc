"""
Strata SQLBuilder — WHERE clause builder.

Conditions are raw SQL fragments in the placeholder language, joined with
AND/OR in call order. ``and_group()``/``or_group()`` open a parenthesised
sub-clause that is closed with ``end_group()``::

    w = WhereStmt()
    w.and_("{age} > ?", 18).or_group().and_("{vip} = ?", True).and_is_not_null("email").end_group()
    w.sql()  # ("{age} > ? OR ({vip} = ? AND {email} IS NOT NULL)", [18, True])
"""

from __future__ import annotations

import re
from typing import Any, List, Optional, Tuple, Union

from ..dialect.placeholders import count_placeholders
from ..faults import ArgsNotMatchFault, Fault, SQLBuildFault

__all__ = ["WhereStmt"]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def column_ref(col: str) -> str:
    """Quote plain identifiers; leave expressions (``t.col``, ``{x}``) alone."""
    if _IDENTIFIER.match(col):
        return "{" + col + "}"
    return col


class WhereStmt:
    """
    Composable condition list.

    Errors are sticky: the first invalid call is recorded and raised by
    ``sql()``; later calls are ignored.
    """

    def __init__(self, parent: Optional["WhereStmt"] = None):
        self._parent = parent
        # (operator, fragment or child group, fragment arguments)
        self._parts: List[Tuple[str, Union[str, "WhereStmt"], Tuple[Any, ...]]] = []
        self._err: Optional[Fault] = None

    # ── Errors ──────────────────────────────────────────────────────────

    def _root(self) -> "WhereStmt":
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    def fail(self, err: Fault) -> "WhereStmt":
        root = self._root()
        if root._err is None:
            root._err = err
        return self

    @property
    def err(self) -> Optional[Fault]:
        return self._root()._err

    # ── Conditions ──────────────────────────────────────────────────────

    def _add(self, op: str, cond: str, args: Tuple[Any, ...]) -> "WhereStmt":
        if self.err is not None:
            return self
        if not cond:
            return self.fail(SQLBuildFault("empty where condition"))
        self._parts.append((op, cond, tuple(args)))
        return self

    def and_(self, cond: str, *args: Any) -> "WhereStmt":
        return self._add("AND", cond, args)

    def or_(self, cond: str, *args: Any) -> "WhereStmt":
        return self._add("OR", cond, args)

    where = and_

    def _in(self, op: str, col: str, values: Tuple[Any, ...], negate: bool) -> "WhereStmt":
        if not values:
            return self.fail(SQLBuildFault(f"IN on '{col}' needs at least one value"))
        keyword = " NOT IN(" if negate else " IN("
        return self._add(op, column_ref(col) + keyword + ",".join("?" * len(values)) + ")", values)

    def and_in(self, col: str, *values: Any) -> "WhereStmt":
        return self._in("AND", col, values, False)

    def or_in(self, col: str, *values: Any) -> "WhereStmt":
        return self._in("OR", col, values, False)

    def and_not_in(self, col: str, *values: Any) -> "WhereStmt":
        return self._in("AND", col, values, True)

    def or_not_in(self, col: str, *values: Any) -> "WhereStmt":
        return self._in("OR", col, values, True)

    def and_between(self, col: str, start: Any, end: Any) -> "WhereStmt":
        return self._add("AND", column_ref(col) + " BETWEEN ? AND ?", (start, end))

    def or_between(self, col: str, start: Any, end: Any) -> "WhereStmt":
        return self._add("OR", column_ref(col) + " BETWEEN ? AND ?", (start, end))

    def and_is_null(self, col: str) -> "WhereStmt":
        return self._add("AND", column_ref(col) + " IS NULL", ())

    def or_is_null(self, col: str) -> "WhereStmt":
        return self._add("OR", column_ref(col) + " IS NULL", ())

    def and_is_not_null(self, col: str) -> "WhereStmt":
        return self._add("AND", column_ref(col) + " IS NOT NULL", ())

    def or_is_not_null(self, col: str) -> "WhereStmt":
        return self._add("OR", column_ref(col) + " IS NOT NULL", ())

    def and_like(self, col: str, pattern: Any) -> "WhereStmt":
        return self._add("AND", column_ref(col) + " LIKE ?", (pattern,))

    def or_like(self, col: str, pattern: Any) -> "WhereStmt":
        return self._add("OR", column_ref(col) + " LIKE ?", (pattern,))

    def and_not_like(self, col: str, pattern: Any) -> "WhereStmt":
        return self._add("AND", column_ref(col) + " NOT LIKE ?", (pattern,))

    def or_not_like(self, col: str, pattern: Any) -> "WhereStmt":
        return self._add("OR", column_ref(col) + " NOT LIKE ?", (pattern,))

    # ── Groups ──────────────────────────────────────────────────────────

    def _group(self, op: str) -> "WhereStmt":
        child = WhereStmt(parent=self)
        if self.err is None:
            self._parts.append((op, child, ()))
        return child

    def and_group(self) -> "WhereStmt":
        """Open ``AND ( ... )``; close it with ``end_group()``."""
        return self._group("AND")

    def or_group(self) -> "WhereStmt":
        """Open ``OR ( ... )``; close it with ``end_group()``."""
        return self._group("OR")

    def end_group(self) -> "WhereStmt":
        if self._parent is None:
            return self.fail(SQLBuildFault("end_group() called on the top-level where clause"))
        return self._parent

    # ── Output ──────────────────────────────────────────────────────────

    def is_empty(self) -> bool:
        return not self._parts

    def reset(self) -> "WhereStmt":
        self._parts = []
        if self._parent is None:
            self._err = None
        return self

    def _render(self, out: List[str], args: List[Any]) -> None:
        for i, (op, part, part_args) in enumerate(self._parts):
            if i > 0:
                out.append(f" {op} ")
            if isinstance(part, WhereStmt):
                if part.is_empty():
                    raise SQLBuildFault("empty where group")
                out.append("(")
                part._render(out, args)
                out.append(")")
            else:
                out.append(part)
                args.extend(part_args)

    def sql(self) -> Tuple[str, List[Any]]:
        """
        Condition text (without ``WHERE``) and its arguments.

        Raises:
            SQLBuildFault: A recorded error or an empty group
            ArgsNotMatchFault: Placeholder count differs from argument count
        """
        if self.err is not None:
            raise self.err

        out: List[str] = []
        args: List[Any] = []
        self._render(out, args)
        text = "".join(out)

        expected = count_placeholders(text)
        if expected != len(args):
            raise ArgsNotMatchFault(expected, len(args))
        return text, args
