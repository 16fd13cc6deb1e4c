"""Database connectivity, introspection and query execution."""

from sqlbridge.db.values import Value, ValueKind, coerce_value
from sqlbridge.db.models import (
    AlterTableParams,
    ColumnChange,
    ColumnChangeAction,
    ColumnInfo,
    FetchDataParams,
    FilterCondition,
    FilterOperator,
    IndexInfo,
    QueryResult,
    RowDelete,
    RowInsert,
    RowUpdate,
    SchemaInfo,
    SortColumn,
    SortDirection,
    TableData,
    TableInfo,
)
from sqlbridge.db.sql import SQLDialect, get_dialect
from sqlbridge.db.base import BaseAdapter
from sqlbridge.db.connection import AdapterFactory, ConnectionRegistry
from sqlbridge.db.adapters import (
    PostgreSQLAdapter,
    MySQLAdapter,
    SQLiteAdapter,
)

__all__ = [
    # Values
    "Value",
    "ValueKind",
    "coerce_value",
    # Descriptors
    "AlterTableParams",
    "ColumnChange",
    "ColumnChangeAction",
    "ColumnInfo",
    "FetchDataParams",
    "FilterCondition",
    "FilterOperator",
    "IndexInfo",
    "QueryResult",
    "RowDelete",
    "RowInsert",
    "RowUpdate",
    "SchemaInfo",
    "SortColumn",
    "SortDirection",
    "TableData",
    "TableInfo",
    # SQL rendering
    "SQLDialect",
    "get_dialect",
    # Connection management
    "BaseAdapter",
    "AdapterFactory",
    "ConnectionRegistry",
    # Database adapters
    "PostgreSQLAdapter",
    "MySQLAdapter",
    "SQLiteAdapter",
]
