"""
Strata SQLBuilder — text assembler with sticky errors.

The first failed write is remembered; every later write is a no-op and
``string()`` raises the remembered fault. Callers chain freely and check
once at the end.
"""

from __future__ import annotations

from typing import Any, List, Optional

from ..faults import Fault, SQLBuildFault

__all__ = ["TextBuilder"]


class TextBuilder:
    """Append-only SQL text buffer."""

    __slots__ = ("_parts", "_err")

    def __init__(self, *parts: str):
        self._parts: List[str] = []
        self._err: Optional[Fault] = None
        self.w(*parts)

    @property
    def err(self) -> Optional[Fault]:
        return self._err

    def fail(self, err: Fault) -> "TextBuilder":
        if self._err is None:
            self._err = err
        return self

    def w(self, *parts: Any) -> "TextBuilder":
        if self._err is not None:
            return self
        for part in parts:
            if not isinstance(part, str):
                return self.fail(SQLBuildFault(f"cannot write {type(part).__name__} {part!r} as SQL text"))
            self._parts.append(part)
        return self

    def quote(self, name: str, left: str, right: str) -> "TextBuilder":
        return self.w(left, name, right)

    def quote_column(self, name: str) -> "TextBuilder":
        """Write ``name`` in the engine-neutral ``{name}`` form."""
        return self.quote(name, "{", "}")

    def truncate_last(self, n: int = 1) -> "TextBuilder":
        if self._err is not None or n <= 0:
            return self
        text = "".join(self._parts)
        self._parts = [text[:-n]]
        return self

    def reset(self) -> "TextBuilder":
        self._parts = []
        self._err = None
        return self

    def __len__(self) -> int:
        return sum(len(p) for p in self._parts)

    def string(self) -> str:
        """
        The assembled text.

        Raises:
            Fault: The first error recorded by a write
        """
        if self._err is not None:
            raise self._err
        return "".join(self._parts)
