"""
Strata faults - structured error taxonomy.
"""

from .core import Fault, FaultDomain, Severity, DOMAIN_DEFAULTS
from .domains import (
    ConfigFault,
    UnrecoverableFault,
    ModelFault,
    SchemaFault,
    NoUniquePredicateFault,
    AmbiguousPredicateFault,
    QueryFault,
    DatabaseConnectionFault,
    SQLBuildFault,
    TableIsEmptyFault,
    ColumnsIsEmptyFault,
    ValuesIsEmptyFault,
    ArgsNotMatchFault,
    DuplicateColumnFault,
    MixedPlaceholderFault,
    UnsupportedOperationFault,
    ConstraintNotFoundFault,
    DialectFault,
    DialectRegistrationFault,
)

__all__ = [
    "Fault",
    "FaultDomain",
    "Severity",
    "DOMAIN_DEFAULTS",
    "ConfigFault",
    "UnrecoverableFault",
    "ModelFault",
    "SchemaFault",
    "NoUniquePredicateFault",
    "AmbiguousPredicateFault",
    "QueryFault",
    "DatabaseConnectionFault",
    "SQLBuildFault",
    "TableIsEmptyFault",
    "ColumnsIsEmptyFault",
    "ValuesIsEmptyFault",
    "ArgsNotMatchFault",
    "DuplicateColumnFault",
    "MixedPlaceholderFault",
    "UnsupportedOperationFault",
    "ConstraintNotFoundFault",
    "DialectFault",
    "DialectRegistrationFault",
]
