"""
DDL builder tests — tables, columns, indexes, constraints and views.
"""

from dataclasses import dataclass, field

import pytest

from strata.faults import (
    ColumnsIsEmptyFault,
    SchemaFault,
    SQLBuildFault,
    TableIsEmptyFault,
    UnsupportedOperationFault,
)
from strata.models import IndexKind, PrimitiveType, build_model
from strata.sqlbuilder import (
    AddColumnStmt,
    AddConstraintStmt,
    CreateIndexStmt,
    CreateTableStmt,
    CreateViewStmt,
    DropColumnStmt,
    DropConstraintStmt,
    DropIndexStmt,
    DropTableStmt,
    DropViewStmt,
    SelectStmt,
    TruncateStmt,
)


@dataclass
class Tag:
    id: int = field(default=0, metadata={"orm": "ai"})
    name: str = field(default="", metadata={"orm": "len(30);unique(u_tag_name)"})
    weight: int = field(default=0, metadata={"orm": "index(i_tag_weight);default(1)"})

    class Meta:
        table = "tags"
        options = {"mysql_engine": "innodb"}


class TestCreateTableFromModel:
    """CREATE TABLE rendered from a mapped Model."""

    def test_sqlite(self, sqlite_engine):
        stmts = CreateTableStmt(sqlite_engine).from_model(build_model(Tag), "#tags").ddl_sql()
        assert stmts == [
            "CREATE TABLE IF NOT EXISTS {#tags} ("
            "{id} INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,"
            "{name} TEXT NOT NULL,"
            "{weight} INTEGER NOT NULL DEFAULT 1,"
            "CONSTRAINT {u_tag_name} UNIQUE({name}))",
            "CREATE INDEX {i_tag_weight} ON {#tags} ({weight})",
        ]

    def test_postgres(self, pg_engine):
        stmts = CreateTableStmt(pg_engine).from_model(build_model(Tag), "#tags").ddl_sql()
        assert stmts[0] == (
            "CREATE TABLE IF NOT EXISTS {#tags} ("
            "{id} BIGSERIAL NOT NULL,"
            "{name} VARCHAR(30) NOT NULL,"
            "{weight} BIGINT NOT NULL DEFAULT 1,"
            "CONSTRAINT {tags_ai} PRIMARY KEY({id}),"
            "CONSTRAINT {u_tag_name} UNIQUE({name}))"
        )

    def test_mysql_options(self, mysql_engine):
        stmts = CreateTableStmt(mysql_engine).from_model(build_model(Tag), "#tags").ddl_sql()
        assert stmts[0].startswith("CREATE TABLE IF NOT EXISTS {#tags} ({id} BIGINT AUTO_INCREMENT NOT NULL,")
        assert stmts[0].endswith(") ENGINE=innodb")

    def test_native_quoting(self, mysql_engine):
        stmts = CreateTableStmt(mysql_engine).from_model(build_model(Tag), "#tags").ddl_sql()
        native, _ = mysql_engine.dialect.fix(stmts[1], [], "app_")
        assert native == "CREATE INDEX `i_tag_weight` ON `app_tags` (`weight`)"


class TestCreateTableFluent:
    """CREATE TABLE assembled through builder calls."""

    def test_columns_and_check(self, pg_engine):
        stmts = (
            CreateTableStmt(pg_engine)
            .table("#orders")
            .auto_increment("id")
            .column("total", PrimitiveType.DECIMAL, length=(10, 2))
            .column("note", PrimitiveType.STRING, nullable=True)
            .check("c_total", "total >= 0")
            .ddl_sql()
        )
        assert stmts == [
            "CREATE TABLE IF NOT EXISTS {#orders} ("
            "{id} BIGSERIAL NOT NULL,"
            "{total} NUMERIC(10,2) NOT NULL,"
            "{note} TEXT,"
            "CONSTRAINT {orders_ai} PRIMARY KEY({id}),"
            "CONSTRAINT {c_total} CHECK(total >= 0))",
        ]

    def test_composite_pk_and_fk(self, sqlite_engine):
        stmts = (
            CreateTableStmt(sqlite_engine)
            .table("member")
            .column("group_id", PrimitiveType.INT64)
            .column("user_id", PrimitiveType.INT64)
            .column("since", PrimitiveType.TIME, default="2024-01-01")
            .pk("group_id", "user_id")
            .foreign_key("fk_m_user", "user_id", "users", "id", delete_rule="CASCADE")
            .index(IndexKind.DEFAULT, "i_m_since", "since")
            .ddl_sql()
        )
        assert stmts == [
            "CREATE TABLE IF NOT EXISTS {member} ("
            "{group_id} INTEGER NOT NULL,"
            "{user_id} INTEGER NOT NULL,"
            "{since} TIMESTAMP NOT NULL DEFAULT '2024-01-01',"
            "CONSTRAINT {member_pk} PRIMARY KEY({group_id},{user_id}),"
            "CONSTRAINT {fk_m_user} FOREIGN KEY({user_id}) REFERENCES {users}({id}) ON DELETE CASCADE)",
            "CREATE INDEX {i_m_since} ON {member} ({since})",
        ]

    def test_options(self, sqlite_engine):
        stmts = (
            CreateTableStmt(sqlite_engine)
            .table("kv")
            .column("k", PrimitiveType.STRING)
            .pk("k")
            .options("sqlite_rowid", "false")
            .ddl_sql()
        )
        assert stmts[0].endswith(") WITHOUT ROWID")

    def test_model_errors_stick(self, sqlite_engine):
        stmt = CreateTableStmt(sqlite_engine).table("t").auto_increment("id").pk("id")
        assert stmt.err is not None
        with pytest.raises(SchemaFault, match="mutually exclusive"):
            stmt.ddl_sql()

    def test_unknown_column(self, sqlite_engine):
        stmt = CreateTableStmt(sqlite_engine).table("t").column("a", PrimitiveType.INT).unique("u_b", "b")
        with pytest.raises(SQLBuildFault, match="not defined"):
            stmt.ddl_sql()

    def test_foreign_key_unknown_column(self, sqlite_engine):
        stmt = (
            CreateTableStmt(sqlite_engine)
            .table("t")
            .column("a", PrimitiveType.INT)
            .foreign_key("fk_t_owner", "owner_id", "users", "id")
        )
        assert isinstance(stmt.err, SchemaFault)
        with pytest.raises(SchemaFault, match="owner_id"):
            stmt.ddl_sql()

    def test_empty(self, sqlite_engine):
        with pytest.raises(TableIsEmptyFault):
            CreateTableStmt(sqlite_engine).ddl_sql()
        with pytest.raises(ColumnsIsEmptyFault):
            CreateTableStmt(sqlite_engine).table("t").ddl_sql()


class TestTableStatements:
    """DROP, TRUNCATE, ADD/DROP COLUMN."""

    def test_drop_tables(self, sqlite_engine):
        assert DropTableStmt(sqlite_engine).table("#a", "#b").ddl_sql() == [
            "DROP TABLE IF EXISTS {#a}",
            "DROP TABLE IF EXISTS {#b}",
        ]
        with pytest.raises(TableIsEmptyFault):
            DropTableStmt(sqlite_engine).ddl_sql()

    def test_truncate_resolves_prefix(self, sqlite_engine):
        sqlite_engine.table_prefix = "app_"
        assert TruncateStmt(sqlite_engine).table("#users", "id").ddl_sql() == [
            "DELETE FROM {app_users}",
            "DELETE FROM sqlite_sequence WHERE name='app_users'",
        ]

    def test_add_column(self, pg_engine):
        stmt = AddColumnStmt(pg_engine).table("#users").column(
            "email", PrimitiveType.STRING, nullable=True, length=(100,)
        )
        assert stmt.ddl_sql() == ["ALTER TABLE {#users} ADD {email} VARCHAR(100)"]

    def test_add_column_with_default(self, sqlite_engine):
        stmt = AddColumnStmt(sqlite_engine).table("#users").column("score", PrimitiveType.INT, default=0)
        assert stmt.ddl_sql() == ["ALTER TABLE {#users} ADD {score} INTEGER NOT NULL DEFAULT 0"]

    def test_add_ai_column_rejected(self, pg_engine):
        col = build_model(Tag).find_column("id")
        with pytest.raises(UnsupportedOperationFault):
            AddColumnStmt(pg_engine).table("#tags").from_column(col).ddl_sql()

    def test_drop_column(self, pg_engine, sqlite_engine):
        assert DropColumnStmt(pg_engine).table("#users").column("email").ddl_sql() == [
            "ALTER TABLE {#users} DROP COLUMN {email}",
        ]
        with pytest.raises(SQLBuildFault, match="rebuilding"):
            DropColumnStmt(sqlite_engine).table("#users").column("email").ddl_sql()

    @pytest.mark.asyncio
    async def test_exec_runs_ddl(self, pg_engine):
        await DropColumnStmt(pg_engine).table("#users").column("email").exec()
        assert pg_engine.statements == ["ALTER TABLE {#users} DROP COLUMN {email}"]


class TestIndexStatements:
    """CREATE/DROP INDEX."""

    def test_create_unique(self, sqlite_engine):
        stmt = CreateIndexStmt(sqlite_engine).table("#users").name("u_email", IndexKind.UNIQUE).columns("email")
        assert stmt.ddl_sql() == ["CREATE UNIQUE INDEX {u_email} ON {#users} ({email})"]

    def test_create_composite(self, sqlite_engine):
        stmt = CreateIndexStmt(sqlite_engine).table("#users").name("i_name").columns("last", "first")
        assert stmt.ddl_sql() == ["CREATE INDEX {i_name} ON {#users} ({last},{first})"]

    def test_create_needs_columns(self, sqlite_engine):
        with pytest.raises(ColumnsIsEmptyFault):
            CreateIndexStmt(sqlite_engine).table("#users").name("i").ddl_sql()
        with pytest.raises(SQLBuildFault, match="index name"):
            CreateIndexStmt(sqlite_engine).table("#users").columns("a").ddl_sql()

    def test_drop(self, mysql_engine, pg_engine):
        assert DropIndexStmt(mysql_engine).table("#users").name("i").ddl_sql() == [
            "ALTER TABLE {#users} DROP INDEX {i}",
        ]
        assert DropIndexStmt(pg_engine).table("#users").name("i").ddl_sql() == ["DROP INDEX IF EXISTS {i}"]


class TestConstraintStatements:
    """ALTER TABLE ADD/DROP CONSTRAINT."""

    def test_add_fk(self, pg_engine):
        stmt = AddConstraintStmt(pg_engine).table("#users").fk("fk_group", "group_id", "#groups", "id", "", "CASCADE")
        assert stmt.ddl_sql() == [
            "ALTER TABLE {#users} ADD CONSTRAINT {fk_group} FOREIGN KEY({group_id}) "
            "REFERENCES {#groups}({id}) ON DELETE CASCADE",
        ]

    def test_add_unique_and_check(self, pg_engine):
        assert AddConstraintStmt(pg_engine).table("t").unique("u_ab", "a", "b").ddl_sql() == [
            "ALTER TABLE {t} ADD CONSTRAINT {u_ab} UNIQUE({a},{b})",
        ]
        assert AddConstraintStmt(pg_engine).table("t").check("c_a", "a > 0").ddl_sql() == [
            "ALTER TABLE {t} ADD CONSTRAINT {c_a} CHECK(a > 0)",
        ]

    def test_one_constraint_per_statement(self, pg_engine):
        stmt = AddConstraintStmt(pg_engine).table("t").unique("u_a", "a").check("c_a", "a > 0")
        with pytest.raises(SQLBuildFault, match="already described"):
            stmt.ddl_sql()

    def test_requires_description(self, pg_engine):
        with pytest.raises(SQLBuildFault, match="no constraint"):
            AddConstraintStmt(pg_engine).table("t").ddl_sql()
        with pytest.raises(SQLBuildFault):
            AddConstraintStmt(pg_engine).table("t").pk("t_pk").ddl_sql()

    def test_drop(self, mysql_engine, pg_engine):
        assert DropConstraintStmt(mysql_engine).table("#users").constraint("users_pk", pk=True).ddl_sql() == [
            "ALTER TABLE {#users} DROP PRIMARY KEY",
        ]
        assert DropConstraintStmt(pg_engine).table("#users").constraint("u_name").ddl_sql() == [
            "ALTER TABLE {#users} DROP CONSTRAINT {u_name}",
        ]

    def test_sqlite_requires_rebuild(self, sqlite_engine):
        with pytest.raises(SQLBuildFault, match="rebuilding"):
            DropConstraintStmt(sqlite_engine).table("t").constraint("c").ddl_sql()


class TestViewStatements:
    """CREATE/DROP VIEW."""

    def test_from_select(self, pg_engine):
        select = SelectStmt(pg_engine).from_("#users").where("{age} >= 18")
        assert CreateViewStmt(pg_engine).name("#adults").select(select).ddl_sql() == [
            "CREATE VIEW {#adults} AS SELECT * FROM {#users} WHERE {age} >= 18",
        ]

    def test_select_with_arguments_rejected(self, pg_engine):
        select = SelectStmt(pg_engine).from_("#users").where("{age} >= ?", 18)
        with pytest.raises(SQLBuildFault, match="cannot take arguments"):
            CreateViewStmt(pg_engine).name("#adults").select(select).ddl_sql()

    def test_raw_select_with_options(self, sqlite_engine):
        stmt = CreateViewStmt(sqlite_engine).name("v").select("SELECT 1 AS a").columns("a").replace().temporary()
        assert stmt.ddl_sql() == [
            "DROP VIEW IF EXISTS {v}",
            "CREATE TEMPORARY VIEW {v} ({a}) AS SELECT 1 AS a",
        ]

    def test_missing_parts(self, sqlite_engine):
        with pytest.raises(TableIsEmptyFault):
            CreateViewStmt(sqlite_engine).select("SELECT 1").ddl_sql()
        with pytest.raises(SQLBuildFault, match="no select"):
            CreateViewStmt(sqlite_engine).name("v").ddl_sql()

    def test_drop(self, sqlite_engine):
        assert DropViewStmt(sqlite_engine).name("#adults").ddl_sql() == ["DROP VIEW IF EXISTS {#adults}"]


class TestSQLBuilderFactory:
    """Statements created from ``engine.sql``."""

    def test_factories(self, sqlite_engine):
        sql = sqlite_engine.sql
        assert sql.select("{id}").from_("#users").sql() == ("SELECT {id} FROM {#users}", [])
        assert sql.insert("#users").key_value("a", 1).sql() == ("INSERT INTO {#users} ({a}) VALUES (?)", [1])
        assert sql.update("#users").set("a", 1).sql() == ("UPDATE {#users} SET {a}=?", [1])
        assert sql.delete("#users").sql() == ("DELETE FROM {#users}", [])
        assert sql.drop_table("#users").ddl_sql() == ["DROP TABLE IF EXISTS {#users}"]
        assert sql.drop_view("#v").ddl_sql() == ["DROP VIEW IF EXISTS {#v}"]
        assert sql.where().and_("{a}=?", 1).sql() == ("{a}=?", [1])
        assert sql.create_table("#t").column("a", PrimitiveType.INT).ddl_sql()[0].startswith(
            "CREATE TABLE IF NOT EXISTS {#t} ("
        )
