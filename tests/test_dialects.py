"""
Dialect tests — type mapping, pagination, DDL fragments and registry.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from strata.dialect import (
    DialectRegistry,
    MariaDBDialect,
    MySQLDialect,
    PostgresDialect,
    SQLiteDialect,
    named,
)
from strata.faults import DialectFault, DialectRegistrationFault
from strata.models import Column, PrimitiveType as T


def col(name, t, **kwargs):
    default = kwargs.pop("default", None)
    c = Column(name, t, **kwargs)
    if default is not None:
        c.set_default(default)
    return c


class TestSQLiteTypes:
    """SQLite storage classes."""

    dialect = SQLiteDialect()

    def test_auto_increment_inline_pk(self):
        assert self.dialect.sql_type(col("id", T.INT64, ai=True)) == "INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL"
        assert self.dialect.inline_ai_primary_key is True

    def test_affinities(self):
        assert self.dialect.sql_type(col("b", T.BOOL)) == "INTEGER NOT NULL"
        assert self.dialect.sql_type(col("f", T.FLOAT32, nullable=True)) == "REAL"
        assert self.dialect.sql_type(col("d", T.DECIMAL, length=[10, 2])) == "NUMERIC NOT NULL"
        assert self.dialect.sql_type(col("s", T.STRING, length=[20])) == "TEXT NOT NULL"
        assert self.dialect.sql_type(col("x", T.BYTES)) == "BLOB NOT NULL"
        assert self.dialect.sql_type(col("t", T.TIME)) == "TIMESTAMP NOT NULL"

    def test_defaults(self):
        assert self.dialect.sql_type(col("n", T.INT, default=18)) == "INTEGER NOT NULL DEFAULT 18"
        assert self.dialect.sql_type(col("b", T.BOOL, default=True)) == "INTEGER NOT NULL DEFAULT 1"
        assert self.dialect.sql_type(col("s", T.STRING, default="it's")) == "TEXT NOT NULL DEFAULT 'it''s'"
        assert self.dialect.sql_type(col("x", T.BYTES, default=b"\x01\xff")) == "BLOB NOT NULL DEFAULT X'01ff'"

    def test_adapt_value(self):
        assert self.dialect.adapt_value(Decimal("1.50")) == "1.50"
        assert self.dialect.adapt_value(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02 03:04:05"
        assert self.dialect.adapt_value(date(2024, 1, 2)) == "2024-01-02"
        assert self.dialect.adapt_value(7) == 7

    def test_without_rowid(self):
        assert self.dialect.create_table_options_sql({"sqlite_rowid": ["false"]}) == " WITHOUT ROWID"
        assert self.dialect.create_table_options_sql({}) == ""

    def test_truncate_resets_sequence(self):
        assert self.dialect.truncate_table_sql("users", "id") == [
            "DELETE FROM {users}",
            "DELETE FROM sqlite_sequence WHERE name='users'",
        ]
        assert self.dialect.truncate_table_sql("users") == ["DELETE FROM {users}"]

    def test_replace_view(self):
        assert self.dialect.create_view_sql(True, False, "v", "SELECT 1") == [
            "DROP VIEW IF EXISTS {v}",
            "CREATE VIEW {v} AS SELECT 1",
        ]

    def test_drop_constraint_unsupported(self):
        assert self.dialect.supports_alter_drop is False
        with pytest.raises(DialectFault):
            self.dialect.drop_constraint_sql("t", "c")


class TestPostgresTypes:
    """PostgreSQL types and statements."""

    dialect = PostgresDialect()

    def test_serial_family(self):
        assert self.dialect.sql_type(col("id", T.INT64, ai=True)) == "BIGSERIAL NOT NULL"
        assert self.dialect.sql_type(col("id", T.INT32, ai=True)) == "SERIAL NOT NULL"
        assert self.dialect.sql_type(col("id", T.INT16, ai=True)) == "SMALLSERIAL NOT NULL"
        assert self.dialect.sql_type(col("n", T.UINT32)) == "BIGINT NOT NULL"

    def test_strings(self):
        assert self.dialect.sql_type(col("s", T.STRING, length=[50])) == "VARCHAR(50) NOT NULL"
        assert self.dialect.sql_type(col("s", T.STRING, length=[-1])) == "TEXT NOT NULL"
        assert self.dialect.sql_type(col("s", T.STRING, nullable=True)) == "TEXT"

    def test_numeric_and_time(self):
        assert self.dialect.sql_type(col("d", T.DECIMAL, length=[10, 2])) == "NUMERIC(10,2) NOT NULL"
        assert self.dialect.sql_type(col("f", T.FLOAT64)) == "DOUBLE PRECISION NOT NULL"
        assert self.dialect.sql_type(col("t", T.TIME)) == "TIMESTAMP WITH TIME ZONE NOT NULL"
        assert self.dialect.sql_type(col("t", T.TIME, length=[3])) == "TIMESTAMP(3) WITH TIME ZONE NOT NULL"

    def test_bool_and_bytes_defaults(self):
        assert self.dialect.sql_type(col("b", T.BOOL, default=True)) == "BOOLEAN NOT NULL DEFAULT TRUE"
        assert self.dialect.sql_type(col("x", T.BYTES, default=b"\xab")) == "BYTEA NOT NULL DEFAULT '\\xab'"

    def test_invalid_lengths(self):
        with pytest.raises(DialectFault, match="precision and scale"):
            self.dialect.sql_type(col("d", T.DECIMAL))
        with pytest.raises(DialectFault):
            self.dialect.sql_type(col("d", T.DECIMAL, length=[2, 5]))
        with pytest.raises(DialectFault, match="between 0 and 6"):
            self.dialect.sql_type(col("t", T.TIME, length=[7]))
        with pytest.raises(DialectFault):
            self.dialect.sql_type(col("f", T.FLOAT32, length=[10]))

    def test_returning(self):
        assert self.dialect.last_insert_id_sql("users", "id") == (" RETURNING {id}", True)

    def test_truncate(self):
        assert self.dialect.truncate_table_sql("users", "id") == ["TRUNCATE TABLE {users} RESTART IDENTITY"]
        assert self.dialect.truncate_table_sql("users") == ["TRUNCATE TABLE {users}"]

    def test_view_with_columns(self):
        assert self.dialect.create_view_sql(True, True, "v", "SELECT 1,2", ["a", "b"]) == [
            "CREATE OR REPLACE TEMPORARY VIEW {v} ({a},{b}) AS SELECT 1,2",
        ]

    def test_drop_index_and_constraint(self):
        assert self.dialect.drop_index_sql("t", "i") == "DROP INDEX IF EXISTS {i}"
        assert self.dialect.drop_constraint_sql("t", "t_pk", pk=True) == "ALTER TABLE {t} DROP CONSTRAINT {t_pk}"
        assert self.dialect.insert_default_values_sql("t") == "INSERT INTO {t} DEFAULT VALUES"


class TestMySQLTypes:
    """MySQL / MariaDB types and statements."""

    dialect = MySQLDialect()

    def test_integers(self):
        assert self.dialect.sql_type(col("id", T.INT64, ai=True)) == "BIGINT AUTO_INCREMENT NOT NULL"
        assert self.dialect.sql_type(col("n", T.UINT32)) == "INT UNSIGNED NOT NULL"
        assert self.dialect.sql_type(col("n", T.INT8, length=[4])) == "TINYINT(4) NOT NULL"
        assert self.dialect.sql_type(col("b", T.BOOL, default=False)) == "BOOLEAN NOT NULL DEFAULT 0"

    def test_strings(self):
        assert self.dialect.sql_type(col("s", T.STRING, length=[255])) == "VARCHAR(255) NOT NULL"
        assert self.dialect.sql_type(col("s", T.STRING, length=[65533])) == "LONGTEXT NOT NULL"
        assert self.dialect.sql_type(col("s", T.STRING)) == "LONGTEXT NOT NULL"

    def test_float_and_time(self):
        assert self.dialect.sql_type(col("f", T.FLOAT64, length=[10, 2])) == "DOUBLE(10,2) NOT NULL"
        assert self.dialect.sql_type(col("f", T.FLOAT32)) == "FLOAT NOT NULL"
        assert self.dialect.sql_type(col("t", T.TIME, length=[6])) == "DATETIME(6) NOT NULL"

    def test_table_options(self):
        meta = {"mysql_engine": ["innodb"], "mysql_charset": ["utf8mb4"]}
        assert self.dialect.create_table_options_sql(meta) == " ENGINE=innodb CHARACTER SET=utf8mb4"

    def test_statements(self):
        assert self.dialect.transactional_ddl() is False
        assert self.dialect.last_insert_id_sql("t", "id") == ("", False)
        assert self.dialect.drop_index_sql("t", "i") == "ALTER TABLE {t} DROP INDEX {i}"
        assert self.dialect.drop_constraint_sql("t", "t_pk", pk=True) == "ALTER TABLE {t} DROP PRIMARY KEY"
        assert self.dialect.drop_constraint_sql("t", "u_a") == "ALTER TABLE {t} DROP CONSTRAINT {u_a}"
        assert self.dialect.insert_default_values_sql("t") == "INSERT INTO {t} () VALUES ()"
        assert self.dialect.truncate_table_sql("t", "id") == ["TRUNCATE TABLE {t}"]

    def test_no_temporary_views(self):
        with pytest.raises(DialectFault, match="temporary"):
            self.dialect.create_view_sql(False, True, "v", "SELECT 1")

    def test_mariadb_shares_syntax(self):
        maria = MariaDBDialect()
        assert maria.name == "mariadb"
        assert maria.quotes == ("`", "`")
        assert maria.sql_type(col("n", T.UINT8)) == "TINYINT UNSIGNED NOT NULL"


class TestPagination:
    """LIMIT forms."""

    def test_limit_offset(self):
        assert SQLiteDialect().limit_sql(10) == (" LIMIT ? ", [10])
        assert MySQLDialect().limit_sql(10, 20) == (" LIMIT ? OFFSET ? ", [10, 20])

    def test_offset_fetch(self):
        assert PostgresDialect().limit_sql(10) == (" FETCH NEXT ? ROWS ONLY ", [10])
        assert PostgresDialect().limit_sql(10, 20) == (" OFFSET ? ROWS FETCH NEXT ? ROWS ONLY ", [20, 10])

    def test_named_limit(self):
        sql, args = SQLiteDialect().limit_sql(named("n", 5), named("o", 0))
        assert sql == " LIMIT @n OFFSET @o "
        assert [a.value for a in args] == [5, 0]

    def test_transactional_ddl(self):
        assert SQLiteDialect().transactional_ddl() is True
        assert PostgresDialect().transactional_ddl() is True


class TestDialectRegistry:
    """Driver name to dialect bindings."""

    def test_defaults(self):
        registry = DialectRegistry.with_defaults()
        assert sorted(registry.drivers()) == ["mariadb", "mysql", "postgresql", "sqlite"]
        assert isinstance(registry.get("sqlite"), SQLiteDialect)
        assert len(registry) == 4

    def test_unknown_driver(self):
        with pytest.raises(KeyError, match="oracle"):
            DialectRegistry.with_defaults().get("oracle")

    def test_driver_registered_once(self):
        registry = DialectRegistry()
        registry.register("sqlite", SQLiteDialect())
        with pytest.raises(DialectRegistrationFault, match="already registered"):
            registry.register("sqlite", PostgresDialect())

    def test_dialect_type_registered_once(self):
        registry = DialectRegistry()
        registry.register("sqlite", SQLiteDialect())
        with pytest.raises(DialectRegistrationFault):
            registry.register("sqlite3", SQLiteDialect())

    def test_invalid_registration(self):
        registry = DialectRegistry()
        with pytest.raises(DialectRegistrationFault):
            registry.register("", SQLiteDialect())
        with pytest.raises(DialectRegistrationFault):
            registry.register("x", object())

    def test_registries_are_independent(self):
        first = DialectRegistry()
        first.register("sqlite", SQLiteDialect())
        second = DialectRegistry()
        assert "sqlite" in first
        assert "sqlite" not in second

    def test_clear(self):
        registry = DialectRegistry.with_defaults()
        registry.clear()
        assert len(registry) == 0
