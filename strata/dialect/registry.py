"""
Strata Dialect — dialect registry.

A registry maps driver names to dialect instances. It is an explicit
value handed to ``Database`` rather than process-wide state, so tests and
applications can hold differently populated registries side by side.

Registration is append-only: a driver name is bound once, and a concrete
dialect class can back only one driver.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List

from ..faults import DialectRegistrationFault
from .base import Dialect

logger = logging.getLogger("strata.dialect.registry")

__all__ = ["DialectRegistry"]


class DialectRegistry:
    """Thread-safe driver name -> Dialect map."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._dialects: Dict[str, Dialect] = {}

    @classmethod
    def with_defaults(cls) -> "DialectRegistry":
        """A fresh registry holding the bundled dialects."""
        from .mysql import MariaDBDialect, MySQLDialect
        from .postgres import PostgresDialect
        from .sqlite import SQLiteDialect

        registry = cls()
        for dialect in (SQLiteDialect(), PostgresDialect(), MySQLDialect(), MariaDBDialect()):
            registry.register(dialect.driver_name, dialect)
        return registry

    def register(self, driver: str, dialect: Dialect) -> None:
        """
        Bind ``driver`` to ``dialect``.

        Raises:
            DialectRegistrationFault: Driver already bound, or another
                instance of the same dialect class already registered
        """
        if not driver:
            raise DialectRegistrationFault(driver, "driver name is empty")
        if not isinstance(dialect, Dialect):
            raise DialectRegistrationFault(driver, f"{dialect!r} is not a Dialect")

        with self._lock:
            if driver in self._dialects:
                raise DialectRegistrationFault(driver, "driver already registered")
            for existing_driver, existing in self._dialects.items():
                if type(existing) is type(dialect):
                    raise DialectRegistrationFault(
                        driver,
                        f"{type(dialect).__name__} already registered for '{existing_driver}'",
                    )
            self._dialects[driver] = dialect

        logger.debug("Registered dialect %s for driver '%s'", type(dialect).__name__, driver)

    def get(self, driver: str) -> Dialect:
        """
        Dialect bound to ``driver``.

        Raises:
            KeyError: No dialect for the driver
        """
        with self._lock:
            try:
                return self._dialects[driver]
            except KeyError:
                raise KeyError(
                    f"No dialect registered for driver '{driver}'. "
                    f"Registered: {sorted(self._dialects)}"
                ) from None

    def drivers(self) -> List[str]:
        with self._lock:
            return list(self._dialects)

    def clear(self) -> None:
        """Remove every binding (test teardown)."""
        with self._lock:
            self._dialects.clear()

    def __contains__(self, driver: str) -> bool:
        with self._lock:
            return driver in self._dialects

    def __len__(self) -> int:
        with self._lock:
            return len(self._dialects)
