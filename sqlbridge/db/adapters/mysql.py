"""MySQL database adapter."""

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.engine import URL, CursorResult, make_url
from sqlalchemy.exc import ArgumentError

from sqlbridge.config.models import DatabaseType
from sqlbridge.db.base import BaseAdapter
from sqlbridge.db.models import ColumnInfo, IndexInfo, SchemaInfo, TableInfo
from sqlbridge.db.values import Value
from sqlbridge.exceptions import DatabaseConnectionError

SYSTEM_SCHEMAS = ("information_schema", "mysql", "performance_schema", "sys")


def _text(value: Any) -> Optional[str]:
    """Catalog columns can come back as bytes depending on server collation."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return value


class MySQLAdapter(BaseAdapter):
    """MySQL adapter on aiomysql. Databases play the role of schemas."""

    database_type = DatabaseType.MYSQL

    def build_url(self) -> URL:
        """Build the ``mysql+aiomysql`` URL from a ``mysql://`` string.

        Raises:
            DatabaseConnectionError: If the connection string cannot be parsed.
        """
        try:
            url = make_url(self.connection_string)
        except ArgumentError as e:
            raise DatabaseConnectionError(
                f"Invalid MySQL connection string: {e}", database_type=self.database_type.value
            ) from e
        if url.get_backend_name() not in ("mysql", "mariadb"):
            raise DatabaseConnectionError(
                f"Not a MySQL connection string: {url.drivername}",
                database_type=self.database_type.value,
            )
        return url.set(drivername="mysql+aiomysql")

    def _get_engine_options(self) -> Dict[str, Any]:
        """Get MySQL-specific engine options."""
        return {
            'connect_args': {
                'connect_timeout': self.CONNECT_TIMEOUT,
                'charset': 'utf8mb4',
            }
        }

    def _execution_options(self, params: Optional[Sequence[Any]]) -> Optional[Dict[str, Any]]:
        # Without parameters the driver must not %-format the statement,
        # otherwise LIKE patterns in caller SQL break.
        if not params:
            return {'no_parameters': True}
        return None

    async def list_schemas(self) -> List[SchemaInfo]:
        _, rows = await self._fetch(
            """
            SELECT SCHEMA_NAME
            FROM information_schema.SCHEMATA
            WHERE SCHEMA_NAME NOT IN (%s, %s, %s, %s)
            ORDER BY SCHEMA_NAME
            """,
            SYSTEM_SCHEMAS,
        )
        return [SchemaInfo(name=_text(row[0])) for row in rows]

    async def list_tables(self, schema: str) -> List[TableInfo]:
        _, rows = await self._fetch(
            """
            SELECT TABLE_SCHEMA, TABLE_NAME, TABLE_TYPE
            FROM information_schema.TABLES
            WHERE TABLE_SCHEMA = %s
            ORDER BY TABLE_TYPE, TABLE_NAME
            """,
            [schema],
        )
        return [
            TableInfo(schema=_text(row[0]), name=_text(row[1]), table_type=_text(row[2]))
            for row in rows
        ]

    async def list_columns(self, schema: str, table: str) -> List[ColumnInfo]:
        # COLUMN_TYPE keeps display width, so tinyint(1) reads as boolean
        _, rows = await self._fetch(
            """
            SELECT COLUMN_NAME, COLUMN_TYPE, IS_NULLABLE, COLUMN_DEFAULT, COLUMN_KEY
            FROM information_schema.COLUMNS
            WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s
            ORDER BY ORDINAL_POSITION
            """,
            [schema, table],
        )
        return [
            ColumnInfo(
                name=_text(row[0]),
                data_type=_text(row[1]),
                is_nullable=_text(row[2]) == 'YES',
                is_primary_key=_text(row[4]) == 'PRI',
                default_value=_text(row[3]),
            )
            for row in rows
        ]

    async def list_indexes(self, schema: str, table: str) -> List[IndexInfo]:
        _, rows = await self._fetch(
            """
            SELECT INDEX_NAME, COLUMN_NAME, NON_UNIQUE
            FROM information_schema.STATISTICS
            WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s
            ORDER BY INDEX_NAME, SEQ_IN_INDEX
            """,
            [schema, table],
        )
        return self._group_indexes([
            (_text(name), _text(column), not int(non_unique), _text(name) == 'PRIMARY')
            for name, column, non_unique in rows
        ])

    def _inserted_key(self, result: CursorResult) -> Value:
        last_id = result.lastrowid
        if not last_id:
            return Value.null()
        return Value.integer(last_id)
