"""
DML statement builder tests — SELECT, INSERT, UPDATE, DELETE.
"""

import pytest

from strata.dialect import named
from strata.faults import (
    ArgsNotMatchFault,
    ColumnsIsEmptyFault,
    DuplicateColumnFault,
    MixedPlaceholderFault,
    SQLBuildFault,
    TableIsEmptyFault,
    UnsupportedOperationFault,
    ValuesIsEmptyFault,
)
from strata.sqlbuilder import DeleteStmt, InsertStmt, SelectStmt, UpdateStmt


class TestSelect:
    """SELECT rendering."""

    def test_full_statement(self, sqlite_engine):
        stmt = (
            SelectStmt(sqlite_engine)
            .columns("{id}", "{name}")
            .from_("#users")
            .where("{age} > ?", 18)
            .desc("id")
            .limit(10, 20)
        )
        assert stmt.sql() == (
            "SELECT {id},{name} FROM {#users} WHERE {age} > ? ORDER BY {id} DESC LIMIT ? OFFSET ?",
            [18, 10, 20],
        )

    def test_postgres_pagination(self, pg_engine):
        stmt = SelectStmt(pg_engine).from_("#users").where("{age} > ?", 18).asc("name").limit(10, 20)
        assert stmt.sql() == (
            "SELECT * FROM {#users} WHERE {age} > ? ORDER BY {name} ASC OFFSET ? ROWS FETCH NEXT ? ROWS ONLY",
            [18, 20, 10],
        )

    def test_native_sql(self, pg_engine):
        query, args = SelectStmt(pg_engine).from_("#users").where("{id}=?", 1).sql()
        assert pg_engine.dialect.fix(query, args, "app_") == ('SELECT * FROM "app_users" WHERE "id"=$1', [1])

    def test_count_drops_order_and_limit(self, sqlite_engine):
        stmt = SelectStmt(sqlite_engine).from_("#users").count().desc("id").limit(5)
        assert stmt.sql() == ("SELECT COUNT(*) AS count FROM {#users}", [])

    def test_distinct_alias_join(self, sqlite_engine):
        stmt = (
            SelectStmt(sqlite_engine)
            .distinct()
            .column("u.name", alias="user_name")
            .from_("#users", "u")
            .left_join("#groups", "g", "g.id = u.group_id")
        )
        assert stmt.sql() == (
            "SELECT DISTINCT u.name AS {user_name} FROM {#users} AS u LEFT JOIN {#groups} AS g ON g.id = u.group_id",
            [],
        )

    def test_group_by_having(self, sqlite_engine):
        stmt = (
            SelectStmt(sqlite_engine)
            .columns("{age}", "COUNT(*) AS n")
            .from_("#users")
            .where("{active}=?", True)
            .group_by("age")
            .having("COUNT(*) > ?", 1)
        )
        assert stmt.sql() == (
            "SELECT {age},COUNT(*) AS n FROM {#users} WHERE {active}=? GROUP BY {age} HAVING COUNT(*) > ?",
            [True, 1],
        )

    def test_for_update(self, pg_engine):
        query, _ = SelectStmt(pg_engine).from_("#users").for_update().sql()
        assert query == "SELECT * FROM {#users} FOR UPDATE"

    def test_missing_table(self, sqlite_engine):
        with pytest.raises(TableIsEmptyFault):
            SelectStmt(sqlite_engine).sql()

    def test_bad_join_sticks(self, sqlite_engine):
        stmt = SelectStmt(sqlite_engine).from_("#a").join("OUTER", "#b", "", "")
        with pytest.raises(SQLBuildFault, match="unknown join type"):
            stmt.sql()

    def test_where_error_surfaces(self, sqlite_engine):
        with pytest.raises(ArgsNotMatchFault):
            SelectStmt(sqlite_engine).from_("#users").where("{a}=?").sql()

    @pytest.mark.asyncio
    async def test_query_int(self, sqlite_engine):
        sqlite_engine.rows = [{"count": 4}]
        assert await SelectStmt(sqlite_engine).from_("#users").count().query_int() == 4
        sqlite_engine.rows = []
        assert await SelectStmt(sqlite_engine).from_("#users").count().query_int() == 0


class TestInsert:
    """INSERT rendering."""

    def test_multi_row(self, sqlite_engine):
        stmt = InsertStmt(sqlite_engine).table("#users").columns("name", "age").values("a", 1).values("b", 2)
        assert stmt.is_multi_row
        assert stmt.sql() == ("INSERT INTO {#users} ({name},{age}) VALUES (?,?),(?,?)", ["a", 1, "b", 2])

    def test_key_value(self, sqlite_engine):
        stmt = InsertStmt(sqlite_engine).table("#users").key_value("name", "a").key_value("age", 3)
        assert stmt.sql() == ("INSERT INTO {#users} ({name},{age}) VALUES (?,?)", ["a", 3])

    def test_key_value_on_multi_row(self, sqlite_engine):
        stmt = InsertStmt(sqlite_engine).table("#users").columns("a").values(1).values(2).key_value("b", 3)
        with pytest.raises(UnsupportedOperationFault):
            stmt.sql()

    def test_default_values(self, sqlite_engine, mysql_engine):
        assert InsertStmt(sqlite_engine).table("#users").sql() == ("INSERT INTO {#users} DEFAULT VALUES", [])
        assert InsertStmt(mysql_engine).table("#users").sql() == ("INSERT INTO {#users} () VALUES ()", [])

    def test_default_values_multi_row(self, sqlite_engine):
        with pytest.raises(UnsupportedOperationFault):
            InsertStmt(sqlite_engine).table("#users").values().values().sql()

    def test_values_without_columns(self, sqlite_engine):
        with pytest.raises(SQLBuildFault, match="without columns"):
            InsertStmt(sqlite_engine).table("#users").values(1).sql()

    def test_columns_without_values(self, sqlite_engine):
        with pytest.raises(ValuesIsEmptyFault):
            InsertStmt(sqlite_engine).table("#users").columns("name").sql()

    def test_row_length_mismatch(self, sqlite_engine):
        with pytest.raises(ArgsNotMatchFault):
            InsertStmt(sqlite_engine).table("#users").columns("a", "b").values(1).sql()

    def test_missing_table(self, sqlite_engine):
        with pytest.raises(TableIsEmptyFault):
            InsertStmt(sqlite_engine).columns("a").values(1).sql()

    def test_insert_select(self, sqlite_engine):
        select = SelectStmt(sqlite_engine).columns("{id}").from_("#users").where("{age} > ?", 3)
        stmt = InsertStmt(sqlite_engine).table("#archive").columns("id").select(select)
        assert stmt.sql() == ("INSERT INTO {#archive} ({id}) SELECT {id} FROM {#users} WHERE {age} > ?", [3])

    @pytest.mark.asyncio
    async def test_last_insert_id_returning(self, pg_engine):
        pg_engine.value = 7
        stmt = InsertStmt(pg_engine).table("#users").key_value("name", "a").key_name("id")
        assert await stmt.last_insert_id() == 7
        assert pg_engine.calls == [
            ("query_val", "INSERT INTO {#users} ({name}) VALUES (?) RETURNING {id}", ["a"]),
        ]

    @pytest.mark.asyncio
    async def test_last_insert_id_from_driver(self, mysql_engine):
        mysql_engine.result.lastrowid = 12
        stmt = InsertStmt(mysql_engine).table("#users").key_value("name", "a").key_name("id")
        assert await stmt.last_insert_id() == 12
        assert mysql_engine.calls[0][0] == "exec"

    @pytest.mark.asyncio
    async def test_last_insert_id_rejects_multi_row(self, sqlite_engine):
        stmt = InsertStmt(sqlite_engine).table("#users").columns("a").values(1).values(2).key_name("id")
        with pytest.raises(UnsupportedOperationFault):
            await stmt.last_insert_id()

    @pytest.mark.asyncio
    async def test_last_insert_id_needs_key(self, sqlite_engine):
        with pytest.raises(SQLBuildFault, match="key_name"):
            await InsertStmt(sqlite_engine).table("#users").key_value("a", 1).last_insert_id()


class TestUpdate:
    """UPDATE rendering and optimistic concurrency."""

    def test_set_and_increase(self, sqlite_engine):
        stmt = (
            UpdateStmt(sqlite_engine)
            .table("#users")
            .set("name", "bob")
            .increase("age", 1)
            .decrease("credit", 5)
            .where("{id}=?", 3)
        )
        assert stmt.sql() == (
            "UPDATE {#users} SET {name}=?,{age}={age}+?,{credit}={credit}-? WHERE {id}=?",
            ["bob", 1, 5, 3],
        )

    def test_occ(self, sqlite_engine):
        stmt = UpdateStmt(sqlite_engine).table("#users").set("name", "bob").occ("version", 4).where("{id}=?", 3)
        assert stmt.sql() == (
            "UPDATE {#users} SET {name}=?,{version}={version}+1 WHERE ({id}=?) AND {version}=?",
            ["bob", 3, 4],
        )

    def test_occ_only(self, sqlite_engine):
        stmt = UpdateStmt(sqlite_engine).table("#users").occ("version", 0)
        assert stmt.sql() == ("UPDATE {#users} SET {version}={version}+1 WHERE {version}=?", [0])

    def test_duplicate_column(self, sqlite_engine):
        with pytest.raises(DuplicateColumnFault):
            UpdateStmt(sqlite_engine).table("#users").set("a", 1).increase("a", 2).sql()
        with pytest.raises(DuplicateColumnFault):
            UpdateStmt(sqlite_engine).table("#users").set("version", 1).occ("version", 1).sql()

    def test_no_columns(self, sqlite_engine):
        with pytest.raises(ColumnsIsEmptyFault):
            UpdateStmt(sqlite_engine).table("#users").where("{id}=?", 1).sql()

    def test_occ_with_named_where(self, sqlite_engine):
        stmt = UpdateStmt(sqlite_engine).table("t").set("a", 1).occ("v", 2).where("{id}=@id", named("id", 5))
        query, args = stmt.sql()
        with pytest.raises(MixedPlaceholderFault):
            sqlite_engine.dialect.fix(query, args)

    @pytest.mark.asyncio
    async def test_exec(self, sqlite_engine):
        result = await UpdateStmt(sqlite_engine).table("#users").set("a", 1).exec()
        assert result.rowcount == 1
        assert sqlite_engine.calls == [("exec", "UPDATE {#users} SET {a}=?", [1])]


class TestDelete:
    """DELETE rendering."""

    def test_with_where(self, sqlite_engine):
        stmt = DeleteStmt(sqlite_engine).table("#users").and_in("id", 1, 2)
        assert stmt.sql() == ("DELETE FROM {#users} WHERE {id} IN(?,?)", [1, 2])

    def test_all_rows(self, sqlite_engine):
        assert DeleteStmt(sqlite_engine).table("#users").sql() == ("DELETE FROM {#users}", [])

    def test_str(self, sqlite_engine):
        assert str(DeleteStmt(sqlite_engine).table("#users")) == "DELETE FROM {#users}"
        assert "invalid statement" in str(DeleteStmt(sqlite_engine))

    def test_reset(self, sqlite_engine):
        stmt = DeleteStmt(sqlite_engine).table("#users").where("{a}=?", 1)
        stmt.reset().table("#groups")
        assert stmt.sql() == ("DELETE FROM {#groups}", [])
