"""
Strata DB Backends Package — pluggable database adapters.

Provides a common adapter interface and implementations for:
- SQLite (default, via aiosqlite)
- PostgreSQL (via asyncpg)
- MySQL / MariaDB (via aiomysql)
"""

from .base import DatabaseAdapter, ExecResult
from .sqlite import SQLiteAdapter
from .postgres import PostgresAdapter
from .mysql import MySQLAdapter

__all__ = [
    "DatabaseAdapter",
    "ExecResult",
    "SQLiteAdapter",
    "PostgresAdapter",
    "MySQLAdapter",
]
