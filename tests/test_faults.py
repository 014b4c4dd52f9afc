"""
Fault taxonomy tests — codes, domains and serialization.
"""

import pytest

from strata.faults import (
    AmbiguousPredicateFault,
    ArgsNotMatchFault,
    ColumnsIsEmptyFault,
    ConfigFault,
    DatabaseConnectionFault,
    DialectFault,
    Fault,
    FaultDomain,
    MixedPlaceholderFault,
    NoUniquePredicateFault,
    QueryFault,
    SchemaFault,
    Severity,
    SQLBuildFault,
    TableIsEmptyFault,
    UnrecoverableFault,
)


class TestFaultBase:
    """Fault construction and rendering."""

    def test_requires_code_message_domain(self):
        with pytest.raises(TypeError):
            Fault(code="X", message="missing domain")

    def test_str_contains_code(self):
        fault = Fault(code="BROKEN", message="it broke", domain=FaultDomain.SQL)
        assert str(fault) == "[BROKEN] it broke"

    def test_domain_defaults(self):
        fault = Fault(code="X", message="m", domain=FaultDomain.CONFIG)
        assert fault.severity is Severity.FATAL
        assert fault.retryable is False

    def test_to_dict(self):
        fault = SchemaFault("users", "column name is empty")
        data = fault.to_dict()
        assert data["code"] == "SCHEMA_FAULT"
        assert data["domain"] == "model"
        assert data["metadata"]["table"] == "users"

    def test_domain_equality(self):
        assert FaultDomain.SQL == "sql"
        assert FaultDomain("sql") == FaultDomain.SQL


class TestFaultHierarchy:
    """Typed faults callers can react to."""

    def test_sql_build_family(self):
        for fault in (
            TableIsEmptyFault(),
            ColumnsIsEmptyFault(),
            ArgsNotMatchFault(2, 1),
            MixedPlaceholderFault(),
        ):
            assert isinstance(fault, SQLBuildFault)
            assert fault.domain == FaultDomain.SQL

    def test_args_not_match_counts(self):
        fault = ArgsNotMatchFault(3, 1)
        assert fault.placeholders == 3
        assert fault.arg_count == 1
        assert fault.metadata["args"] == 1
        assert isinstance(fault.args, tuple)
        assert str(fault).startswith("[ARGS_NOT_MATCH] placeholder count 3")
        assert fault.code == "ARGS_NOT_MATCH"

    def test_predicate_faults(self):
        ambiguous = AmbiguousPredicateFault("users", ["u_a", "u_b"])
        assert ambiguous.constraints == ["u_a", "u_b"]
        assert "u_a" in ambiguous.message
        assert NoUniquePredicateFault("users").code == "NO_UNIQUE_PREDICATE"

    def test_execution_faults_are_retryable(self):
        assert QueryFault("users", "insert", "locked").retryable is True
        conn = DatabaseConnectionFault("sqlite:///x.db", "no such file")
        assert conn.retryable is True
        assert conn.severity is Severity.FATAL

    def test_unrecoverable_is_fatal(self):
        fault = UnrecoverableFault("positions are not contiguous")
        assert fault.severity is Severity.FATAL
        assert fault.domain == FaultDomain.SYSTEM

    def test_dialect_and_config(self):
        assert DialectFault("mysql", "no temporary views").dialect == "mysql"
        assert ConfigFault("database.url", "missing").domain == FaultDomain.CONFIG
