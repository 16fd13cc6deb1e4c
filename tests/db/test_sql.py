"""Tests for dialect SQL rendering."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from sqlbridge.config.models import DatabaseType
from sqlbridge.db.models import ColumnChange, FilterCondition, SortColumn, SortDirection
from sqlbridge.db.sql import (
    MySQLDialect,
    PostgresDialect,
    SQLiteDialect,
    get_dialect,
    is_numeric_literal,
)
from sqlbridge.exceptions import InvalidOperationError, QueryError

postgres = PostgresDialect()
mysql = MySQLDialect()
sqlite = SQLiteDialect()


class TestQuoting:
    """Identifier and literal quoting."""

    def test_identifier_quote_characters(self) -> None:
        assert postgres.quote_identifier("users") == '"users"'
        assert sqlite.quote_identifier("users") == '"users"'
        assert mysql.quote_identifier("users") == "`users`"

    def test_embedded_quotes_are_doubled(self) -> None:
        assert postgres.quote_identifier('we"ird') == '"we""ird"'
        assert mysql.quote_identifier("we`ird") == "`we``ird`"

    def test_empty_identifier_rejected(self) -> None:
        with pytest.raises(InvalidOperationError):
            sqlite.quote_identifier("")

    def test_qualified_names(self) -> None:
        assert postgres.qualified_name("public", "users") == '"public"."users"'
        assert mysql.qualified_name("shop", "users") == "`shop`.`users`"
        assert sqlite.qualified_name("main", "users") == '"users"'

    def test_literal_quote_escaping(self) -> None:
        assert sqlite.quote_literal("a'b") == "'a''b'"
        assert mysql.quote_literal("a'b") == "'a''b'"

    def test_mysql_escapes_backslashes(self) -> None:
        assert mysql.quote_literal("a\\'b") == "'a\\\\''b'"

    @pytest.mark.parametrize("text", ["42", "-3", "+1.5", ".5", "1e10", "2.5E-3", "7."])
    def test_numeric_literals(self, text: str) -> None:
        assert is_numeric_literal(text)

    @pytest.mark.parametrize("text", ["abc", "", "1 OR 1=1", "0x1F", "nan", "1,000"])
    def test_non_numeric_literals(self, text: str) -> None:
        assert not is_numeric_literal(text)


class TestLiteralFilters:
    """MySQL/SQLite embed escaped operands in the WHERE clause."""

    def test_equals_numeric_inference(self) -> None:
        clause, params = sqlite.build_where_clause([FilterCondition("id", "equals", "42")])
        assert clause == 'WHERE "id" = 42'
        assert params == []

        clause, _ = sqlite.build_where_clause([FilterCondition("name", "equals", "abc")])
        assert clause == "WHERE \"name\" = 'abc'"

    def test_contains_escapes_quote(self) -> None:
        clause, _ = mysql.build_where_clause([FilterCondition("name", "contains", "a'b")])
        assert clause == "WHERE `name` LIKE '%a''b%'"

        clause, _ = sqlite.build_where_clause([FilterCondition("name", "contains", "a'b")])
        assert clause == "WHERE \"name\" LIKE '%a''b%'"

    def test_operator_fragments(self) -> None:
        filters = [
            FilterCondition("a", "notequals", "x"),
            FilterCondition("b", "startswith", "pre"),
            FilterCondition("c", "endswith", "suf"),
            FilterCondition("d", "greaterthan", "5"),
            FilterCondition("e", "lessthan", "9"),
            FilterCondition("f", "isnull"),
            FilterCondition("g", "isnotnull"),
        ]
        clause, _ = sqlite.build_where_clause(filters)
        assert clause == (
            "WHERE \"a\" != 'x' AND \"b\" LIKE 'pre%' AND \"c\" LIKE '%suf' "
            "AND \"d\" > '5' AND \"e\" < '9' AND \"f\" IS NULL AND \"g\" IS NOT NULL"
        )

    def test_raw_operand_is_verbatim(self) -> None:
        clause, _ = mysql.build_where_clause([FilterCondition("age", "raw", "BETWEEN 1 AND 5")])
        assert clause == "WHERE `age` BETWEEN 1 AND 5"

    def test_operator_spellings(self) -> None:
        clause, _ = sqlite.build_where_clause([FilterCondition("x", "is_not_null")])
        assert clause == 'WHERE "x" IS NOT NULL'

    def test_no_filters(self) -> None:
        assert sqlite.build_where_clause(None) == ("", [])
        assert postgres.build_where_clause([]) == ("", [])


class TestPostgresFilters:
    """Postgres binds every operand as a positional parameter."""

    def test_placeholders_and_ilike(self) -> None:
        filters = [
            FilterCondition("name", "contains", "a'b"),
            FilterCondition("id", "equals", "42"),
            FilterCondition("deleted_at", "isnull"),
            FilterCondition("email", "endswith", "@x.io"),
        ]
        clause, params = postgres.build_where_clause(filters, {"id": "integer", "name": "text"})
        assert clause == (
            'WHERE CAST("name" AS TEXT) ILIKE $1 AND "id" = $2 '
            'AND "deleted_at" IS NULL AND CAST("email" AS TEXT) ILIKE $3'
        )
        assert params == ["%a'b%", 42, "%@x.io"]

    def test_operands_typed_by_column(self) -> None:
        types = {
            "price": "numeric",
            "active": "boolean",
            "born": "date",
            "seen": "timestamp with time zone",
            "code": "text",
        }
        filters = [
            FilterCondition("price", "greaterthan", "9.99"),
            FilterCondition("active", "equals", "true"),
            FilterCondition("born", "lessthan", "2000-01-01"),
            FilterCondition("seen", "greaterthan", "2024-01-01T00:00:00Z"),
            FilterCondition("code", "equals", "007"),
        ]
        _, params = postgres.build_where_clause(filters, types)
        assert params[0] == Decimal("9.99")
        assert params[1] is True
        assert params[2] == date(2000, 1, 1)
        assert params[3] == datetime.fromisoformat("2024-01-01T00:00:00+00:00")
        assert params[4] == "007"

    def test_unknown_column_type_infers_numbers(self) -> None:
        _, params = postgres.build_where_clause(
            [FilterCondition("a", "equals", "42"), FilterCondition("b", "equals", "abc")]
        )
        assert params == [42, "abc"]

    def test_unconvertible_operand_raises_query_error(self) -> None:
        with pytest.raises(QueryError):
            postgres.build_where_clause([FilterCondition("id", "equals", "abc")], {"id": "integer"})

    def test_raw_operand_is_verbatim(self) -> None:
        clause, params = postgres.build_where_clause([FilterCondition("n", "raw", "% 2 = 0")])
        assert clause == 'WHERE "n" % 2 = 0'
        assert params == []


class TestReadQueries:
    """Count, page and distinct statements."""

    def test_count_and_page_share_where_clause(self) -> None:
        filters = [FilterCondition("name", "equals", "Ann")]
        count_sql, count_params = postgres.build_count_query("public", "users", filters, {"name": "text"})
        page_sql, page_params = postgres.build_page_query(
            "public", "users", 10, 20, [SortColumn("id", SortDirection.DESC)], filters, {"name": "text"}
        )
        assert count_sql == 'SELECT COUNT(*) AS count FROM "public"."users" WHERE "name" = $1'
        assert page_sql == (
            'SELECT * FROM "public"."users" WHERE "name" = $1 ORDER BY "id" DESC LIMIT 10 OFFSET 20'
        )
        assert count_params == page_params == ["Ann"]

    def test_page_without_filters(self) -> None:
        sql, params = mysql.build_page_query("shop", "orders", 0, 0)
        assert sql == "SELECT * FROM `shop`.`orders` LIMIT 0 OFFSET 0"
        assert params == []

    def test_order_clause(self) -> None:
        sort = [SortColumn("a"), SortColumn("b", "desc")]
        assert sqlite.build_order_clause(sort) == 'ORDER BY "a" ASC, "b" DESC'

    def test_distinct_query(self) -> None:
        assert sqlite.build_distinct_query("main", "users", "name", 200) == (
            'SELECT DISTINCT "name" FROM "users" WHERE "name" IS NOT NULL ORDER BY "name" LIMIT 200'
        )


class TestMutations:
    """Row mutations are always parameter-bound."""

    def test_update_placeholders_per_dialect(self) -> None:
        sql, params = postgres.build_update(
            "public", "users", "id", "7", {"name": "Bo", "age": "31"}, {"id": "integer", "age": "integer"}
        )
        assert sql == 'UPDATE "public"."users" SET "name" = $1, "age" = $2 WHERE "id" = $3'
        assert params == ["Bo", 31, 7]

        sql, params = mysql.build_update("shop", "users", "id", 7, {"name": "Bo"})
        assert sql == "UPDATE `shop`.`users` SET `name` = %s WHERE `id` = %s"
        assert params == ["Bo", 7]

        sql, _ = sqlite.build_update("main", "users", "id", 7, {"name": "O'Brien"})
        assert sql == 'UPDATE "users" SET "name" = ? WHERE "id" = ?'

    def test_update_without_columns_rejected(self) -> None:
        with pytest.raises(InvalidOperationError):
            sqlite.build_update("main", "users", "id", 1, {})

    def test_insert(self) -> None:
        sql, params = postgres.build_insert("public", "users", {"name": "Ann"})
        assert sql == 'INSERT INTO "public"."users" ("name") VALUES ($1) RETURNING *'
        assert params == ["Ann"]

        sql, params = sqlite.build_insert("main", "users", {"name": "Ann", "tags": ["a"]})
        assert sql == 'INSERT INTO "users" ("name", "tags") VALUES (?, ?)'
        assert params == ["Ann", '["a"]']

    def test_insert_defaults(self) -> None:
        assert postgres.build_insert("public", "t", {})[0] == 'INSERT INTO "public"."t" DEFAULT VALUES RETURNING *'
        assert mysql.build_insert("db", "t", {})[0] == "INSERT INTO `db`.`t` () VALUES ()"
        assert sqlite.build_insert("main", "t", {})[0] == 'INSERT INTO "t" DEFAULT VALUES'

    def test_delete(self) -> None:
        sql, params = mysql.build_delete("shop", "users", "id", 3)
        assert sql == "DELETE FROM `shop`.`users` WHERE `id` = %s"
        assert params == [3]

    def test_mysql_percent_in_bound_identifiers(self) -> None:
        sql, params = mysql.build_update("shop", "t%", "id", 1, {"discount%": "x"})
        assert sql == "UPDATE `shop`.`t%%` SET `discount%%` = %s WHERE `id` = %s"
        # pymysql interpolates parameters with the % operator
        assert sql % ("'x'", "1") == "UPDATE `shop`.`t%` SET `discount%` = 'x' WHERE `id` = 1"

        sql, _ = mysql.build_insert("shop", "t", {"rate%": 1})
        assert sql == "INSERT INTO `shop`.`t` (`rate%%`) VALUES (%s)"
        sql, _ = mysql.build_delete("shop", "t", "key%", 1)
        assert sql == "DELETE FROM `shop`.`t` WHERE `key%%` = %s"

    def test_percent_untouched_without_parameters(self) -> None:
        assert mysql.build_insert("shop", "t%", {})[0] == "INSERT INTO `shop`.`t%` () VALUES ()"
        assert mysql.build_drop_table("shop", "t%") == "DROP TABLE `shop`.`t%`"
        sql, _ = postgres.build_update("public", "t", "id", 1, {"discount%": "x"})
        assert sql == 'UPDATE "public"."t" SET "discount%" = $1 WHERE "id" = $2'


class TestDDL:
    """Schema and column DDL."""

    def test_schema_statements(self) -> None:
        assert postgres.build_create_schema("s") == 'CREATE SCHEMA "s"'
        assert postgres.build_drop_schema("s", cascade=True) == 'DROP SCHEMA "s" CASCADE'
        assert mysql.build_create_schema("s") == "CREATE DATABASE `s`"
        assert mysql.build_drop_schema("s", cascade=True) == "DROP DATABASE `s`"

    def test_sqlite_rejects_schema_statements(self) -> None:
        with pytest.raises(InvalidOperationError):
            sqlite.build_create_schema("s")
        with pytest.raises(InvalidOperationError):
            sqlite.build_drop_schema("s")

    def test_drop_table(self) -> None:
        assert postgres.build_drop_table("public", "t", cascade=True) == 'DROP TABLE "public"."t" CASCADE'
        assert mysql.build_drop_table("db", "t", cascade=True) == "DROP TABLE `db`.`t`"
        assert sqlite.build_drop_table("main", "t") == 'DROP TABLE "t"'

    def test_add_column(self) -> None:
        change = ColumnChange("add", "age", data_type="INTEGER", is_nullable=False, default_value="0")
        assert sqlite.build_alter_column("main", "users", change) == (
            'ALTER TABLE "users" ADD COLUMN "age" INTEGER NOT NULL DEFAULT 0'
        )

    def test_rename_column(self) -> None:
        change = ColumnChange("rename", "name", new_name="full_name")
        assert mysql.build_alter_column("db", "users", change) == (
            "ALTER TABLE `db`.`users` RENAME COLUMN `name` TO `full_name`"
        )

    def test_rename_requires_new_name(self) -> None:
        with pytest.raises(InvalidOperationError):
            postgres.build_alter_column("public", "users", ColumnChange("rename", "name"))

    def test_modify_column(self) -> None:
        change = ColumnChange("modify", "age", data_type="BIGINT", is_nullable=True, default_value="1")
        assert postgres.build_alter_column("public", "users", change) == (
            'ALTER TABLE "public"."users" ALTER COLUMN "age" TYPE BIGINT, '
            'ALTER COLUMN "age" DROP NOT NULL, ALTER COLUMN "age" SET DEFAULT 1'
        )
        assert mysql.build_alter_column("db", "users", ColumnChange("modify", "age", data_type="BIGINT")) == (
            "ALTER TABLE `db`.`users` MODIFY COLUMN `age` BIGINT"
        )

    @pytest.mark.parametrize("action", ["drop", "modify"])
    def test_sqlite_rejects_drop_and_modify(self, action: str) -> None:
        with pytest.raises(InvalidOperationError):
            sqlite.build_alter_column("main", "users", ColumnChange(action, "name", data_type="TEXT"))


class TestWrapQuery:
    """Optional subquery wrapping of caller SQL."""

    def test_filters_and_sort_wrap_statement(self) -> None:
        sql, params = sqlite.wrap_query(
            "SELECT * FROM users;",
            filters=[FilterCondition("name", "equals", "Ann")],
            sort=[SortColumn("id")],
            limit=5,
        )
        assert sql == (
            "SELECT * FROM (SELECT * FROM users) AS _subq WHERE \"name\" = 'Ann' "
            'ORDER BY "id" ASC LIMIT 5 OFFSET 0'
        )
        assert params == []

    def test_limit_only_appends(self) -> None:
        assert mysql.wrap_query("SELECT 1", limit=3) == ("SELECT 1 LIMIT 3 OFFSET 0", [])

    def test_nothing_to_apply_returns_original(self) -> None:
        assert postgres.wrap_query("SELECT 1;") == ("SELECT 1;", [])


def test_get_dialect() -> None:
    assert isinstance(get_dialect(DatabaseType.POSTGRESQL), PostgresDialect)
    assert isinstance(get_dialect("mysql"), MySQLDialect)
    assert isinstance(get_dialect(DatabaseType.SQLITE), SQLiteDialect)
