"""
Strata faults - domain-specific fault classes.

Three tiers:
- Usage faults (ModelFault / SQLBuildFault / DialectFault): the caller
  described something inconsistent. They are typed so callers can react.
- UnrecoverableFault: an internal contract was broken. Never expected to
  be caught by application code.
- Execution faults (QueryFault / DatabaseConnectionFault): the driver
  reported an error.
"""

from __future__ import annotations

from typing import Any, Optional

from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Configuration could not be loaded or is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Invalid configuration for '{key}': {reason}",
            domain=FaultDomain.CONFIG,
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# SYSTEM Faults
# ============================================================================

class UnrecoverableFault(Fault):
    """An internal invariant was violated (programmer error in strata)."""

    def __init__(self, reason: str, **kwargs):
        super().__init__(
            code="UNRECOVERABLE",
            message=reason,
            domain=FaultDomain.SYSTEM,
            severity=Severity.FATAL,
            metadata={"reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# MODEL Faults
# ============================================================================

class ModelFault(Fault):
    """Base class for schema model and database faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        retryable: bool = False,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.MODEL,
            severity=severity,
            retryable=retryable,
            public=public,
            metadata=metadata,
        )


class SchemaFault(ModelFault):
    """Schema description violates a model invariant."""

    def __init__(self, table: str, reason: str, **kwargs):
        self.table = table
        self.reason = reason
        super().__init__(
            code="SCHEMA_FAULT",
            message=f"Schema error for table '{table}': {reason}",
            metadata={"table": table, "reason": reason, **kwargs.get("metadata", {})},
        )


class NoUniquePredicateFault(ModelFault):
    """No AI, primary key or unique constraint identifies the row."""

    def __init__(self, table: str, **kwargs):
        super().__init__(
            code="NO_UNIQUE_PREDICATE",
            message=f"No non-zero auto-increment, primary key or unique constraint identifies the row in '{table}'",
            metadata={"table": table, **kwargs.get("metadata", {})},
        )


class AmbiguousPredicateFault(ModelFault):
    """More than one unique constraint could identify the row."""

    def __init__(self, table: str, constraints: list[str], **kwargs):
        self.constraints = constraints
        super().__init__(
            code="AMBIGUOUS_PREDICATE",
            message=f"Unique constraints {', '.join(constraints)} of '{table}' all qualify as row predicate",
            metadata={"table": table, "constraints": constraints, **kwargs.get("metadata", {})},
        )


class QueryFault(ModelFault):
    """Query execution failed."""

    def __init__(self, model: str, operation: str, reason: str, **kwargs):
        super().__init__(
            code="QUERY_FAILED",
            message=f"Query on '{model}' ({operation}) failed: {reason}",
            retryable=True,
            metadata={"model": model, "operation": operation, "reason": reason, **kwargs.get("metadata", {})},
        )


class DatabaseConnectionFault(ModelFault):
    """Database connection failed."""

    def __init__(self, url: str, reason: str, **kwargs):
        super().__init__(
            code="DB_CONNECTION_FAILED",
            message=f"Database connection failed ({url}): {reason}",
            severity=Severity.FATAL,
            retryable=True,
            metadata={"url": url, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# SQL Faults
# ============================================================================

class SQLBuildFault(Fault):
    """A statement builder was used incorrectly."""

    def __init__(self, reason: str, *, code: str = "SQL_BUILD_FAILED", **kwargs):
        self.reason = reason
        super().__init__(
            code=code,
            message=reason,
            domain=FaultDomain.SQL,
            metadata={"reason": reason, **kwargs.get("metadata", {})},
        )


class TableIsEmptyFault(SQLBuildFault):
    """Statement has no table name."""

    def __init__(self, **kwargs):
        super().__init__("table name is empty", code="TABLE_IS_EMPTY", **kwargs)


class ColumnsIsEmptyFault(SQLBuildFault):
    """Statement has no columns."""

    def __init__(self, **kwargs):
        super().__init__("columns is empty", code="COLUMNS_IS_EMPTY", **kwargs)


class ValuesIsEmptyFault(SQLBuildFault):
    """Insert has columns but no values."""

    def __init__(self, **kwargs):
        super().__init__("values is empty", code="VALUES_IS_EMPTY", **kwargs)


class ArgsNotMatchFault(SQLBuildFault):
    """Placeholder count differs from the number of bound arguments."""

    def __init__(self, placeholders: int, args: int, **kwargs):
        self.placeholders = placeholders
        # BaseException.args must stay a tuple
        self.arg_count = args
        super().__init__(
            f"placeholder count {placeholders} does not match argument count {args}",
            code="ARGS_NOT_MATCH",
            metadata={"placeholders": placeholders, "args": args},
        )


class DuplicateColumnFault(SQLBuildFault):
    """The same column is assigned more than once."""

    def __init__(self, column: str, **kwargs):
        self.column = column
        super().__init__(
            f"column '{column}' is set more than once",
            code="DUPLICATE_COLUMN",
            metadata={"column": column},
        )


class MixedPlaceholderFault(SQLBuildFault):
    """Positional and named placeholders are mixed in one query."""

    def __init__(self, **kwargs):
        super().__init__(
            "cannot mix positional '?' and named '@name' placeholders",
            code="MIXED_PLACEHOLDER",
            **kwargs,
        )


class UnsupportedOperationFault(SQLBuildFault):
    """The statement shape does not support the requested operation."""

    def __init__(self, operation: str, reason: str, **kwargs):
        super().__init__(
            f"{operation} is not supported: {reason}",
            code="UNSUPPORTED_OPERATION",
            metadata={"operation": operation},
        )


class ConstraintNotFoundFault(SQLBuildFault):
    """A named constraint could not be found."""

    def __init__(self, table: str, name: str, **kwargs):
        super().__init__(
            f"constraint '{name}' not found on '{table}'",
            code="CONSTRAINT_NOT_FOUND",
            metadata={"table": table, "constraint": name},
        )


# ============================================================================
# DIALECT Faults
# ============================================================================

class DialectFault(Fault):
    """The dialect cannot render the requested construct."""

    def __init__(self, dialect: str, reason: str, **kwargs):
        self.dialect = dialect
        super().__init__(
            code="DIALECT_FAULT",
            message=f"{dialect}: {reason}",
            domain=FaultDomain.DIALECT,
            metadata={"dialect": dialect, "reason": reason, **kwargs.get("metadata", {})},
        )


class DialectRegistrationFault(Fault):
    """Dialect registry misuse (duplicate driver or dialect type)."""

    def __init__(self, driver: str, reason: str, **kwargs):
        super().__init__(
            code="DIALECT_REGISTRATION_FAILED",
            message=f"Cannot register dialect for driver '{driver}': {reason}",
            domain=FaultDomain.DIALECT,
            metadata={"driver": driver, "reason": reason, **kwargs.get("metadata", {})},
        )
