"""
Strata Dialect — SQL engine abstraction.

Exports:
    Dialect, SQLiteDialect, PostgresDialect, MySQLDialect, MariaDBDialect,
    DialectRegistry, Named, named
"""

from .base import Dialect, mysql_limit_sql, standard_limit_sql
from .mysql import MariaDBDialect, MySQLDialect
from .placeholders import Named, count_placeholders, named
from .postgres import PostgresDialect
from .registry import DialectRegistry
from .sqlite import SQLiteDialect
from .sqlite_table import SQLiteTable

__all__ = [
    "Dialect",
    "mysql_limit_sql",
    "standard_limit_sql",
    "SQLiteDialect",
    "PostgresDialect",
    "MySQLDialect",
    "MariaDBDialect",
    "DialectRegistry",
    "Named",
    "named",
    "count_placeholders",
    "SQLiteTable",
]
