"""
Strata - async schema and query toolkit for relational databases.

Complete integration of:
- Models: engine-neutral table/view description mapped from dataclasses
- Dialects: SQLite, PostgreSQL, MySQL/MariaDB SQL generation
- SQLBuilder: fluent statements with sticky errors
- CRUD: row operations keyed on AI / primary key / unique constraints
- Database: async execution over aiosqlite, asyncpg and aiomysql
- Faults: Structured error handling with fault domains
"""

__version__ = "0.1.0"

# ============================================================================
# Faults
# ============================================================================

from .faults import (
    Fault,
    FaultDomain,
    Severity,
    ConfigFault,
    UnrecoverableFault,
    SchemaFault,
    NoUniquePredicateFault,
    AmbiguousPredicateFault,
    QueryFault,
    DatabaseConnectionFault,
    SQLBuildFault,
    DialectFault,
    DialectRegistrationFault,
)

# ============================================================================
# Schema
# ============================================================================

from .models import (
    Column,
    Constraint,
    ConstraintKind,
    ForeignKey,
    IndexKind,
    Model,
    ModelCache,
    ModelKind,
    PrimitiveType,
    build_model,
)

# ============================================================================
# SQL generation and execution
# ============================================================================

from .dialect import (
    Dialect,
    DialectRegistry,
    MariaDBDialect,
    MySQLDialect,
    Named,
    PostgresDialect,
    SQLiteDialect,
    named,
)
from .sqlbuilder import SQLBuilder, WhereStmt
from .db import Database, ExecResult, PreparedStmt, Transaction
from .upgrade import Upgrader
from .config import ConfigLoader, ConfigError, DatabaseConfig

__all__ = [
    "__version__",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigFault",
    "UnrecoverableFault",
    "SchemaFault",
    "NoUniquePredicateFault",
    "AmbiguousPredicateFault",
    "QueryFault",
    "DatabaseConnectionFault",
    "SQLBuildFault",
    "DialectFault",
    "DialectRegistrationFault",
    # Schema
    "Column",
    "Constraint",
    "ConstraintKind",
    "ForeignKey",
    "IndexKind",
    "Model",
    "ModelCache",
    "ModelKind",
    "PrimitiveType",
    "build_model",
    # SQL
    "Dialect",
    "DialectRegistry",
    "SQLiteDialect",
    "PostgresDialect",
    "MySQLDialect",
    "MariaDBDialect",
    "Named",
    "named",
    "SQLBuilder",
    "WhereStmt",
    # Execution
    "Database",
    "Transaction",
    "PreparedStmt",
    "ExecResult",
    "Upgrader",
    # Config
    "ConfigLoader",
    "ConfigError",
    "DatabaseConfig",
]
