"""
Strata Dialect — placeholder mini-language.

Queries are written once, engine-neutral, and rewritten per dialect:

    ``{name}``  quoted identifier (``"name"`` / ```name```); a ``#`` inside
                is replaced by the table prefix as well
    ``#``       table prefix of the connection
    ``?``       positional argument
    ``@name``   named argument, bound with ``Named(name, value)``

Single-quoted string literals are copied verbatim (``''`` escapes
included). A query uses either ``?`` or ``@name``, never both.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence, Tuple

from ..faults import (
    ArgsNotMatchFault,
    MixedPlaceholderFault,
    SQLBuildFault,
    UnrecoverableFault,
)


@dataclass(frozen=True)
class Named:
    """A value bound to an ``@name`` placeholder."""

    name: str
    value: Any


def named(name: str, value: Any) -> Named:
    return Named(name, value)


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _skip_literal(query: str, i: int, out: List[str] | None) -> int:
    """Copy the literal starting at ``query[i] == "'"``; return index after it."""
    n = len(query)
    if out is not None:
        out.append("'")
    i += 1
    while i < n:
        ch = query[i]
        if ch == "'":
            if i + 1 < n and query[i + 1] == "'":
                if out is not None:
                    out.append("''")
                i += 2
                continue
            if out is not None:
                out.append("'")
            return i + 1
        if out is not None:
            out.append(ch)
        i += 1
    return i


def _read_name(query: str, i: int) -> int:
    n = len(query)
    while i < n and _is_name_char(query[i]):
        i += 1
    return i


def rewrite(
    query: str,
    quotes: Tuple[str, str] = ('"', '"'),
    table_prefix: str = "",
    positional: Callable[[int], str] = lambda i: "?",
    escape_percent: bool = False,
) -> Tuple[str, Dict[str, int], int]:
    """
    Rewrite the mini-language into native SQL.

    Args:
        query: Engine-neutral SQL
        quotes: Identifier quote pair used for ``{name}``
        table_prefix: Replaces every ``#``
        positional: Renders the n-th (1-based) native placeholder
        escape_percent: Double every literal ``%`` (format-style drivers)

    Returns:
        (native_sql, orders, count): ``orders`` maps each ``@name`` to its
        0-based position; ``count`` is the number of placeholders.

    Raises:
        MixedPlaceholderFault: ``?`` and ``@name`` used together
        SQLBuildFault: Unclosed ``{`` or repeated ``@name``
    """
    out: List[str] = []
    orders: Dict[str, int] = {}
    count = 0
    saw_positional = False
    n = len(query)
    i = 0

    while i < n:
        ch = query[i]
        if ch == "'":
            start = len(out)
            i = _skip_literal(query, i, out)
            if escape_percent:
                out[start:] = [s.replace("%", "%%") for s in out[start:]]
            continue

        if ch == "{":
            end = query.find("}", i + 1)
            if end < 0:
                raise SQLBuildFault(f"unclosed '{{' at offset {i}: {query[:80]!r}")
            out.append(quotes[0] + query[i + 1:end].replace("#", table_prefix) + quotes[1])
            i = end + 1
            continue

        if ch == "#":
            out.append(table_prefix)
        elif ch == "?":
            if orders:
                raise MixedPlaceholderFault()
            saw_positional = True
            count += 1
            out.append(positional(count))
        elif ch == "@" and i + 1 < n and _is_name_char(query[i + 1]):
            if saw_positional:
                raise MixedPlaceholderFault()
            end = _read_name(query, i + 1)
            name = query[i + 1:end]
            if name in orders:
                raise SQLBuildFault(f"named placeholder '@{name}' used more than once")
            orders[name] = count
            count += 1
            out.append(positional(count))
            i = end
            continue
        elif ch == "%" and escape_percent:
            out.append("%%")
        else:
            out.append(ch)
        i += 1

    return "".join(out), orders, count


def count_placeholders(query: str) -> int:
    """Number of ``?`` and ``@name`` tokens outside string literals."""
    count = 0
    n = len(query)
    i = 0
    while i < n:
        ch = query[i]
        if ch == "'":
            i = _skip_literal(query, i, None)
            continue
        if ch == "?":
            count += 1
        elif ch == "@" and i + 1 < n and _is_name_char(query[i + 1]):
            count += 1
            i = _read_name(query, i + 1)
            continue
        i += 1
    return count


def check_orders(orders: Dict[str, int]) -> None:
    """
    Positions must be exactly 0..n-1.

    Raises:
        UnrecoverableFault: The rewrite produced a broken position map
    """
    if sorted(orders.values()) != list(range(len(orders))):
        raise UnrecoverableFault(
            f"named placeholder positions are not contiguous: {orders}",
            metadata={"orders": dict(orders)},
        )


def reorder(args: Sequence[Any], orders: Dict[str, int]) -> List[Any]:
    """
    Place ``Named`` values at the positions recorded in ``orders``.

    With an empty ``orders`` the args are positional and returned as-is.

    Raises:
        ArgsNotMatchFault: Different number of values and placeholders
        MixedPlaceholderFault: Named values for a positional query, or the
            other way around
        UnrecoverableFault: A value names a placeholder the query lacks
    """
    if not orders:
        if any(isinstance(a, Named) for a in args):
            raise MixedPlaceholderFault()
        return list(args)

    if len(args) != len(orders):
        raise ArgsNotMatchFault(len(orders), len(args))

    result: List[Any] = [None] * len(orders)
    filled = [False] * len(orders)
    for arg in args:
        if not isinstance(arg, Named):
            raise MixedPlaceholderFault()
        if arg.name not in orders:
            raise UnrecoverableFault(
                f"named value '@{arg.name}' has no placeholder in the query",
                metadata={"name": arg.name, "orders": dict(orders)},
            )
        pos = orders[arg.name]
        if filled[pos]:
            raise SQLBuildFault(f"named value '@{arg.name}' bound more than once")
        result[pos] = arg.value
        filled[pos] = True

    return result


__all__ = [
    "Named",
    "named",
    "rewrite",
    "count_placeholders",
    "check_orders",
    "reorder",
]
