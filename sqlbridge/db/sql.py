"""Dialect-specific SQL rendering.

Each dialect turns portable descriptors (filters, sort columns, row
mutations, column changes) into SQL text plus a list of bound parameters.
Nothing in this module performs I/O.

Identifiers are always quoted with the dialect's quote character, doubling
any embedded quote. Values are bound as parameters wherever the driver
allows it. The only literal-embedding path is the MySQL/SQLite filter
builder, which escapes quotes (and, for MySQL, backslashes); the ``raw``
filter operator is appended verbatim and is the caller's
responsibility.
"""

import re
import uuid
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlbridge.config.models import DatabaseType
from sqlbridge.db.models import (
    ColumnChange,
    ColumnChangeAction,
    FilterCondition,
    FilterOperator,
    SortColumn,
    SortDirection,
)
from sqlbridge.db.values import to_parameter
from sqlbridge.exceptions import InvalidOperationError, QueryError

NUMERIC_LITERAL = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
INTEGER_LITERAL = re.compile(r"^[+-]?\d+$")

Statement = Tuple[str, List[Any]]


def is_numeric_literal(value: str) -> bool:
    """True when ``value`` can be embedded unquoted as a numeric literal."""
    return bool(NUMERIC_LITERAL.match(value))


def infer_operand(value: str) -> Any:
    """Best-effort typing of a filter operand when the column type is unknown."""
    if INTEGER_LITERAL.match(value):
        return int(value)
    if NUMERIC_LITERAL.match(value):
        return float(value)
    return value


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


class SQLDialect:
    """Base SQL dialect: double-quoted identifiers, literal-embedded filters."""

    database_type: DatabaseType
    identifier_quote = '"'
    like_operator = "LIKE"
    supports_schemas = True

    # Identifiers, literals, placeholders

    def quote_identifier(self, name: str) -> str:
        if not name:
            raise InvalidOperationError("Identifier cannot be empty")
        q = self.identifier_quote
        return f"{q}{name.replace(q, q * 2)}{q}"

    def qualified_name(self, schema: Optional[str], table: str) -> str:
        if schema and self.supports_schemas:
            return f"{self.quote_identifier(schema)}.{self.quote_identifier(table)}"
        return self.quote_identifier(table)

    def bound_identifier(self, name: str) -> str:
        """Identifier for a statement that is sent with bound parameters."""
        return self.quote_identifier(name)

    def bound_qualified_name(self, schema: Optional[str], table: str) -> str:
        if schema and self.supports_schemas:
            return f"{self.bound_identifier(schema)}.{self.bound_identifier(table)}"
        return self.bound_identifier(table)

    def quote_literal(self, value: str) -> str:
        return "'" + value.replace("'", "''") + "'"

    def format_operand(self, value: str) -> str:
        """Numeric-looking operands are embedded unquoted, everything else as text."""
        if is_numeric_literal(value):
            return value
        return self.quote_literal(value)

    def placeholder(self, index: int) -> str:
        raise NotImplementedError

    def bind_value(self, value: Any, data_type: Optional[str] = None) -> Any:
        """Convert a caller value into a driver parameter."""
        return to_parameter(value)

    # Filtering and ordering

    def build_where_clause(
        self,
        filters: Optional[Sequence[FilterCondition]],
        column_types: Optional[Mapping[str, str]] = None,
        start_index: int = 1,
    ) -> Statement:
        """Render filters as a WHERE clause.

        Returns:
            Tuple of the clause (empty when there are no filters) and the
            parameters it binds.
        """
        if not filters:
            return "", []
        conditions = [self._render_literal_filter(f) for f in filters]
        return "WHERE " + " AND ".join(conditions), []

    def _render_literal_filter(self, f: FilterCondition) -> str:
        column = self.quote_identifier(f.column)
        op = f.operator
        if op is FilterOperator.EQUALS:
            return f"{column} = {self.format_operand(f.value)}"
        if op is FilterOperator.NOT_EQUALS:
            return f"{column} != {self.quote_literal(f.value)}"
        if op is FilterOperator.CONTAINS:
            return f"{column} {self.like_operator} {self.quote_literal('%' + f.value + '%')}"
        if op is FilterOperator.STARTS_WITH:
            return f"{column} {self.like_operator} {self.quote_literal(f.value + '%')}"
        if op is FilterOperator.ENDS_WITH:
            return f"{column} {self.like_operator} {self.quote_literal('%' + f.value)}"
        if op is FilterOperator.GREATER_THAN:
            return f"{column} > {self.quote_literal(f.value)}"
        if op is FilterOperator.LESS_THAN:
            return f"{column} < {self.quote_literal(f.value)}"
        if op is FilterOperator.IS_NULL:
            return f"{column} IS NULL"
        if op is FilterOperator.IS_NOT_NULL:
            return f"{column} IS NOT NULL"
        # raw: appended verbatim, unescaped
        return f"{column} {f.value}"

    def build_order_clause(self, sort: Optional[Sequence[SortColumn]]) -> str:
        if not sort:
            return ""
        parts = []
        for s in sort:
            direction = "DESC" if SortDirection(s.direction) is SortDirection.DESC else "ASC"
            parts.append(f"{self.quote_identifier(s.column)} {direction}")
        return "ORDER BY " + ", ".join(parts)

    @staticmethod
    def build_limit_clause(limit: Optional[int], offset: Optional[int] = None) -> str:
        if limit is None:
            return ""
        limit, offset = int(limit), int(offset or 0)
        if limit < 0 or offset < 0:
            raise InvalidOperationError("limit and offset must be non-negative")
        return f"LIMIT {limit} OFFSET {offset}"

    # Reads

    def build_count_query(
        self,
        schema: str,
        table: str,
        filters: Optional[Sequence[FilterCondition]] = None,
        column_types: Optional[Mapping[str, str]] = None,
    ) -> Statement:
        where, params = self.build_where_clause(filters, column_types)
        sql = _join(f"SELECT COUNT(*) AS count FROM {self.qualified_name(schema, table)}", where)
        return sql, params

    def build_page_query(
        self,
        schema: str,
        table: str,
        limit: int,
        offset: int,
        sort: Optional[Sequence[SortColumn]] = None,
        filters: Optional[Sequence[FilterCondition]] = None,
        column_types: Optional[Mapping[str, str]] = None,
    ) -> Statement:
        where, params = self.build_where_clause(filters, column_types)
        sql = _join(
            f"SELECT * FROM {self.qualified_name(schema, table)}",
            where,
            self.build_order_clause(sort),
            self.build_limit_clause(limit, offset),
        )
        return sql, params

    def build_distinct_query(self, schema: str, table: str, column: str, limit: Optional[int]) -> str:
        col = self.quote_identifier(column)
        return _join(
            f"SELECT DISTINCT {col} FROM {self.qualified_name(schema, table)}",
            f"WHERE {col} IS NOT NULL ORDER BY {col}",
            f"LIMIT {int(limit)}" if limit is not None else "",
        )

    def wrap_query(
        self,
        sql: str,
        filters: Optional[Sequence[FilterCondition]] = None,
        sort: Optional[Sequence[SortColumn]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Statement:
        """Splice filters, ordering and paging around an arbitrary SELECT.

        The statement becomes a derived table, which changes the meaning of
        statements that carry their own trailing clauses or CTEs. Only used
        when a caller asks for it explicitly.
        """
        base_sql = sql.strip().rstrip(";").strip()
        limit_clause = self.build_limit_clause(limit, offset)
        if filters or sort:
            where, params = self.build_where_clause(filters)
            wrapped = _join(
                f"SELECT * FROM ({base_sql}) AS _subq",
                where,
                self.build_order_clause(sort),
                limit_clause,
            )
            return wrapped, params
        if limit_clause:
            return _join(base_sql, limit_clause), []
        return sql, []

    # Row mutations, always parameter-bound

    def build_update(
        self,
        schema: str,
        table: str,
        primary_key_column: str,
        primary_key_value: Any,
        updates: Mapping[str, Any],
        column_types: Optional[Mapping[str, str]] = None,
    ) -> Statement:
        if not updates:
            raise InvalidOperationError("No columns to update")
        types = column_types or {}
        assignments, params = [], []
        for index, (column, value) in enumerate(updates.items(), start=1):
            assignments.append(f"{self.bound_identifier(column)} = {self.placeholder(index)}")
            params.append(self.bind_value(value, types.get(column)))
        params.append(self.bind_value(primary_key_value, types.get(primary_key_column)))
        sql = (
            f"UPDATE {self.bound_qualified_name(schema, table)} SET {', '.join(assignments)} "
            f"WHERE {self.bound_identifier(primary_key_column)} = {self.placeholder(len(params))}"
        )
        return sql, params

    def build_insert(
        self,
        schema: str,
        table: str,
        values: Mapping[str, Any],
        column_types: Optional[Mapping[str, str]] = None,
    ) -> Statement:
        if not values:
            return f"INSERT INTO {self.qualified_name(schema, table)} {self.empty_insert_clause}", []
        target = self.bound_qualified_name(schema, table)
        types = column_types or {}
        columns = ", ".join(self.bound_identifier(c) for c in values)
        placeholders = ", ".join(self.placeholder(i) for i in range(1, len(values) + 1))
        params = [self.bind_value(v, types.get(c)) for c, v in values.items()]
        return f"INSERT INTO {target} ({columns}) VALUES ({placeholders})", params

    empty_insert_clause = "DEFAULT VALUES"

    def build_delete(
        self,
        schema: str,
        table: str,
        primary_key_column: str,
        primary_key_value: Any,
        column_types: Optional[Mapping[str, str]] = None,
    ) -> Statement:
        data_type = (column_types or {}).get(primary_key_column)
        sql = (
            f"DELETE FROM {self.bound_qualified_name(schema, table)} "
            f"WHERE {self.bound_identifier(primary_key_column)} = {self.placeholder(1)}"
        )
        return sql, [self.bind_value(primary_key_value, data_type)]

    # DDL

    def build_create_schema(self, name: str) -> str:
        return f"CREATE SCHEMA {self.quote_identifier(name)}"

    def build_drop_schema(self, name: str, cascade: bool = False) -> str:
        return _join(f"DROP SCHEMA {self.quote_identifier(name)}", "CASCADE" if cascade else "")

    def build_drop_table(self, schema: str, table: str, cascade: bool = False) -> str:
        return _join(f"DROP TABLE {self.qualified_name(schema, table)}", "CASCADE" if cascade else "")

    def validate_column_change(self, change: ColumnChange) -> None:
        if change.action is ColumnChangeAction.RENAME and not change.new_name:
            raise InvalidOperationError(f"Renaming column '{change.column}' requires a new name")

    def build_alter_column(self, schema: str, table: str, change: ColumnChange) -> str:
        """Render one ALTER TABLE statement for a single column change."""
        self.validate_column_change(change)
        target = self.qualified_name(schema, table)
        column = self.quote_identifier(change.column)
        if change.action is ColumnChangeAction.ADD:
            return f"ALTER TABLE {target} ADD COLUMN {column} {self._column_definition(change)}"
        if change.action is ColumnChangeAction.DROP:
            return f"ALTER TABLE {target} DROP COLUMN {column}"
        if change.action is ColumnChangeAction.RENAME:
            return f"ALTER TABLE {target} RENAME COLUMN {column} TO {self.quote_identifier(change.new_name)}"
        return self._build_modify_column(target, column, change)

    @staticmethod
    def _column_definition(change: ColumnChange) -> str:
        # Default expressions are DDL passthrough
        return _join(
            change.data_type or "TEXT",
            "NOT NULL" if change.is_nullable is False else "",
            f"DEFAULT {change.default_value}" if change.default_value is not None else "",
        )

    def _build_modify_column(self, target: str, column: str, change: ColumnChange) -> str:
        raise NotImplementedError


class PostgresDialect(SQLDialect):
    """PostgreSQL: positional ``$n`` parameters everywhere, ILIKE matching."""

    database_type = DatabaseType.POSTGRESQL
    like_operator = "ILIKE"

    INTEGER_TYPES = {"smallint", "integer", "bigint", "int2", "int4", "int8", "smallserial", "serial", "bigserial"}
    FLOAT_TYPES = {"real", "double precision", "float4", "float8"}
    NUMERIC_TYPES = {"numeric", "decimal", "money"}
    BOOLEAN_TYPES = {"boolean", "bool"}
    TIMESTAMP_TYPES = {"timestamp", "timestamp without time zone", "timestamp with time zone", "timestamptz"}
    TIME_TYPES = {"time", "time without time zone", "time with time zone", "timetz"}
    TEXT_TYPES = {"text", "character varying", "varchar", "character", "char", "bpchar", "name", "citext"}
    TRUE_WORDS = {"true", "t", "yes", "y", "on", "1"}
    FALSE_WORDS = {"false", "f", "no", "n", "off", "0"}

    def placeholder(self, index: int) -> str:
        return f"${index}"

    def bind_value(self, value: Any, data_type: Optional[str] = None) -> Any:
        value = to_parameter(value)
        try:
            return self.coerce_parameter(value, data_type)
        except (ValueError, ArithmeticError, InvalidOperation) as e:
            raise QueryError(f"Invalid input for column of type {data_type}: {value!r}") from e

    @classmethod
    def coerce_parameter(cls, value: Any, data_type: Optional[str]) -> Any:
        """Convert a parameter to the Python type asyncpg expects for ``data_type``.

        asyncpg encodes parameters with the server-inferred type and rejects
        mismatches, so text coming from a shell has to be typed here. Unknown
        types are passed through unchanged.
        """
        if value is None:
            return None
        if not data_type:
            return infer_operand(value) if isinstance(value, str) else value
        t = data_type.strip().lower()

        if isinstance(value, str):
            text = value.strip()
            if t in cls.INTEGER_TYPES:
                return int(text)
            if t in cls.FLOAT_TYPES:
                return float(text)
            if t in cls.NUMERIC_TYPES:
                return Decimal(text)
            if t in cls.BOOLEAN_TYPES:
                lowered = text.lower()
                if lowered in cls.TRUE_WORDS:
                    return True
                if lowered in cls.FALSE_WORDS:
                    return False
                raise ValueError(f"not a boolean: {value!r}")
            if t == "date":
                return date.fromisoformat(text)
            if t in cls.TIMESTAMP_TYPES:
                return datetime.fromisoformat(text.replace("Z", "+00:00"))
            if t in cls.TIME_TYPES:
                return time.fromisoformat(text)
            if t == "uuid":
                return uuid.UUID(text)
            return value

        if isinstance(value, bool):
            return int(value) if t in cls.INTEGER_TYPES else value
        if isinstance(value, int):
            if t in cls.FLOAT_TYPES:
                return float(value)
            if t in cls.NUMERIC_TYPES:
                return Decimal(value)
            if t in cls.TEXT_TYPES:
                return str(value)
            return value
        if isinstance(value, float):
            if t in cls.NUMERIC_TYPES:
                return Decimal(repr(value))
            if t in cls.INTEGER_TYPES and value.is_integer():
                return int(value)
            if t in cls.TEXT_TYPES:
                return repr(value)
        return value

    def build_where_clause(
        self,
        filters: Optional[Sequence[FilterCondition]],
        column_types: Optional[Mapping[str, str]] = None,
        start_index: int = 1,
    ) -> Statement:
        if not filters:
            return "", []
        types = column_types or {}
        conditions: List[str] = []
        params: List[Any] = []
        comparisons = {
            FilterOperator.EQUALS: "=",
            FilterOperator.NOT_EQUALS: "!=",
            FilterOperator.GREATER_THAN: ">",
            FilterOperator.LESS_THAN: "<",
        }
        patterns = {
            FilterOperator.CONTAINS: "%{}%",
            FilterOperator.STARTS_WITH: "{}%",
            FilterOperator.ENDS_WITH: "%{}",
        }

        for f in filters:
            column = self.quote_identifier(f.column)
            op = f.operator
            if op in comparisons:
                params.append(self.bind_value(f.value, types.get(f.column)))
                conditions.append(f"{column} {comparisons[op]} {self.placeholder(start_index + len(params) - 1)}")
            elif op in patterns:
                params.append(patterns[op].format(f.value))
                conditions.append(
                    f"CAST({column} AS TEXT) ILIKE {self.placeholder(start_index + len(params) - 1)}"
                )
            elif op is FilterOperator.IS_NULL:
                conditions.append(f"{column} IS NULL")
            elif op is FilterOperator.IS_NOT_NULL:
                conditions.append(f"{column} IS NOT NULL")
            else:
                conditions.append(f"{column} {f.value}")

        return "WHERE " + " AND ".join(conditions), params

    def build_insert(
        self,
        schema: str,
        table: str,
        values: Mapping[str, Any],
        column_types: Optional[Mapping[str, str]] = None,
    ) -> Statement:
        sql, params = super().build_insert(schema, table, values, column_types)
        return f"{sql} RETURNING *", params

    def _build_modify_column(self, target: str, column: str, change: ColumnChange) -> str:
        actions = []
        if change.data_type:
            actions.append(f"ALTER COLUMN {column} TYPE {change.data_type}")
        if change.is_nullable is not None:
            actions.append(f"ALTER COLUMN {column} {'DROP' if change.is_nullable else 'SET'} NOT NULL")
        if change.default_value is not None:
            actions.append(f"ALTER COLUMN {column} SET DEFAULT {change.default_value}")
        if not actions:
            raise InvalidOperationError(f"Nothing to modify for column '{change.column}'")
        return f"ALTER TABLE {target} " + ", ".join(actions)


class MySQLDialect(SQLDialect):
    """MySQL: backtick identifiers, ``%s`` parameters, databases as schemas."""

    database_type = DatabaseType.MYSQL
    identifier_quote = "`"
    empty_insert_clause = "() VALUES ()"

    def placeholder(self, index: int) -> str:
        return "%s"

    def bound_identifier(self, name: str) -> str:
        # The driver %-formats statements that carry parameters
        return self.quote_identifier(name).replace("%", "%%")

    def quote_literal(self, value: str) -> str:
        # Backslash is an escape character in MySQL string literals
        return "'" + value.replace("\\", "\\\\").replace("'", "''") + "'"

    def build_create_schema(self, name: str) -> str:
        return f"CREATE DATABASE {self.quote_identifier(name)}"

    def build_drop_schema(self, name: str, cascade: bool = False) -> str:
        return f"DROP DATABASE {self.quote_identifier(name)}"

    def build_drop_table(self, schema: str, table: str, cascade: bool = False) -> str:
        return f"DROP TABLE {self.qualified_name(schema, table)}"

    def _build_modify_column(self, target: str, column: str, change: ColumnChange) -> str:
        return f"ALTER TABLE {target} MODIFY COLUMN {column} {self._column_definition(change)}"


class SQLiteDialect(SQLDialect):
    """SQLite: single implicit schema, limited ALTER TABLE support."""

    database_type = DatabaseType.SQLITE
    supports_schemas = False

    def placeholder(self, index: int) -> str:
        return "?"

    def build_create_schema(self, name: str) -> str:
        raise InvalidOperationError("SQLite does not support multiple schemas")

    def build_drop_schema(self, name: str, cascade: bool = False) -> str:
        raise InvalidOperationError("SQLite does not support multiple schemas")

    def build_drop_table(self, schema: str, table: str, cascade: bool = False) -> str:
        return f"DROP TABLE {self.qualified_name(schema, table)}"

    def validate_column_change(self, change: ColumnChange) -> None:
        if change.action in (ColumnChangeAction.DROP, ColumnChangeAction.MODIFY):
            raise InvalidOperationError(
                "SQLite does not support DROP COLUMN or MODIFY COLUMN. "
                "You need to recreate the table."
            )
        super().validate_column_change(change)


_DIALECTS: Dict[DatabaseType, SQLDialect] = {
    DatabaseType.POSTGRESQL: PostgresDialect(),
    DatabaseType.MYSQL: MySQLDialect(),
    DatabaseType.SQLITE: SQLiteDialect(),
}


def get_dialect(database_type: DatabaseType) -> SQLDialect:
    """Return the SQL dialect for a database type."""
    return _DIALECTS[DatabaseType(database_type)]
