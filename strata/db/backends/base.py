"""
Strata DB Backend — Base Adapter Interface.

An adapter owns the driver connection(s) and nothing else: statements
arrive already rewritten into the driver's native placeholder style by the
Dialect, with arguments in positional order.

While a transaction is open every statement runs on the transaction's
connection; otherwise the adapter picks any connection it owns.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger("strata.db.backends")

__all__ = ["DatabaseAdapter", "ExecResult"]


@dataclass
class ExecResult:
    """Outcome of a statement run with ``exec``."""

    rowcount: int = 0
    lastrowid: Optional[int] = None


class DatabaseAdapter(ABC):
    """
    Abstract database adapter interface.

    ``Database`` delegates connection handling, statement execution and
    transaction control to one adapter per URL scheme.
    """

    name: str = "base"

    @abstractmethod
    async def connect(self, url: str, **options) -> None:
        """Open the connection (or pool)."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection, rolling back an open transaction."""
        ...

    @abstractmethod
    async def execute(self, sql: str, params: Sequence[Any]) -> ExecResult:
        """Execute a statement that returns no rows."""
        ...

    @abstractmethod
    async def fetch_all(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        """Execute and return all rows as dicts."""
        ...

    @abstractmethod
    async def fetch_one(self, sql: str, params: Sequence[Any]) -> Optional[Dict[str, Any]]:
        """Execute and return the first row as a dict, or None."""
        ...

    @abstractmethod
    async def fetch_val(self, sql: str, params: Sequence[Any]) -> Any:
        """Execute and return the first column of the first row."""
        ...

    # ── Transaction management ───────────────────────────────────────

    @abstractmethod
    async def begin(self) -> None:
        ...

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...

    @property
    def in_transaction(self) -> bool:
        return False

    @property
    def is_connected(self) -> bool:
        return False


def mask_url(url: str) -> str:
    """Mask the password in ``url`` for logging."""
    if "@" in url:
        pre, post = url.split("@", 1)
        if ":" in pre.split("//", 1)[-1]:
            scheme_user = pre.rsplit(":", 1)[0]
            return f"{scheme_user}:***@{post}"
    return url
