"""
Strata SQLBuilder — statement base classes.

Every statement holds the engine it was created from and a sticky error
slot. Setter methods never raise; the first problem is recorded and
raised by the terminal call (``sql()``, ``ddl_sql()``, ``exec()``,
``query()``).

The engine is anything exposing ``dialect`` and ``table_prefix`` plus the
coroutines ``query``, ``query_one``, ``query_val``, ``exec``, ``prepare``
and ``exec_ddl`` (``Database`` and ``Transaction`` both do).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from ..faults import Fault
from .where import WhereStmt

__all__ = ["BaseStmt", "ExecStmt", "QueryStmt", "DDLStmt", "WhereMixin"]


class BaseStmt:
    """Engine binding and sticky error shared by all statements."""

    def __init__(self, engine: Any):
        self.engine = engine
        self._err: Optional[Fault] = None

    @property
    def dialect(self) -> Any:
        return self.engine.dialect

    @property
    def err(self) -> Optional[Fault]:
        return self._err

    def fail(self, err: Fault):
        if self._err is None:
            self._err = err
        return self

    def _check_err(self) -> None:
        if self._err is not None:
            raise self._err

    def reset(self):
        self._err = None
        return self


class WhereMixin:
    """Delegates condition methods to an embedded WhereStmt."""

    _where: WhereStmt

    def where_stmt(self) -> WhereStmt:
        return self._where

    def where(self, cond: str, *args: Any):
        self._where.and_(cond, *args)
        return self

    def and_(self, cond: str, *args: Any):
        self._where.and_(cond, *args)
        return self

    def or_(self, cond: str, *args: Any):
        self._where.or_(cond, *args)
        return self

    def and_in(self, col: str, *values: Any):
        self._where.and_in(col, *values)
        return self

    def or_in(self, col: str, *values: Any):
        self._where.or_in(col, *values)
        return self

    def and_between(self, col: str, start: Any, end: Any):
        self._where.and_between(col, start, end)
        return self

    def and_is_null(self, col: str):
        self._where.and_is_null(col)
        return self

    def and_is_not_null(self, col: str):
        self._where.and_is_not_null(col)
        return self

    def and_like(self, col: str, pattern: Any):
        self._where.and_like(col, pattern)
        return self

    def and_group(self) -> WhereStmt:
        return self._where.and_group()

    def or_group(self) -> WhereStmt:
        return self._where.or_group()

    def _where_sql(self) -> Tuple[str, List[Any]]:
        if self._where.err is not None:
            raise self._where.err
        if self._where.is_empty():
            return "", []
        text, args = self._where.sql()
        return " WHERE " + text, args


class ExecStmt(BaseStmt, ABC):
    """Statements run with ``exec`` (insert, update, delete)."""

    @abstractmethod
    def sql(self) -> Tuple[str, List[Any]]:
        """Statement text in placeholder language plus its arguments."""

    async def exec(self) -> Any:
        query, args = self.sql()
        return await self.engine.exec(query, args)

    async def prepare(self) -> Any:
        query, _ = self.sql()
        return await self.engine.prepare(query)

    def __str__(self) -> str:
        try:
            return self.sql()[0]
        except Fault as exc:
            return f"<invalid statement: {exc}>"


class QueryStmt(BaseStmt, ABC):
    """Statements returning rows."""

    @abstractmethod
    def sql(self) -> Tuple[str, List[Any]]:
        """Statement text in placeholder language plus its arguments."""

    async def query(self) -> List[Dict[str, Any]]:
        query, args = self.sql()
        return await self.engine.query(query, args)

    async def query_one(self) -> Optional[Dict[str, Any]]:
        query, args = self.sql()
        return await self.engine.query_one(query, args)

    async def prepare(self) -> Any:
        query, _ = self.sql()
        return await self.engine.prepare(query)


class DDLStmt(BaseStmt, ABC):
    """Schema statements; one builder may expand to several statements."""

    @abstractmethod
    def ddl_sql(self) -> List[str]:
        """Statements in placeholder language, in execution order."""

    async def build(self) -> List[str]:
        """
        Statements to execute.

        Builders that need the live schema (SQLite table rebuilds) override
        this; the default is ``ddl_sql()``.
        """
        return self.ddl_sql()

    async def exec(self) -> None:
        await self.engine.exec_ddl(*await self.build())
