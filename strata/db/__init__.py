"""
Strata Database — async execution layer.

Provides:
- Database: connection manager with transactions and CRUD shortcuts
- Transaction, PreparedStmt, ExecResult
- Pluggable backend adapters (DatabaseAdapter): SQLite (default),
  PostgreSQL, MySQL/MariaDB
"""

from .engine import Database, Transaction, PreparedStmt, ExecResult

from .backends import (
    DatabaseAdapter,
    SQLiteAdapter,
    PostgresAdapter,
    MySQLAdapter,
)

from ..faults.domains import DatabaseConnectionFault, QueryFault

__all__ = [
    "Database",
    "Transaction",
    "PreparedStmt",
    "ExecResult",
    "DatabaseConnectionFault",
    "QueryFault",
    "DatabaseAdapter",
    "SQLiteAdapter",
    "PostgresAdapter",
    "MySQLAdapter",
]
