"""PostgreSQL database adapter."""

from typing import Any, Dict, List

from sqlalchemy.engine import URL, CursorResult, make_url
from sqlalchemy.exc import ArgumentError

from sqlbridge.config.models import DatabaseType
from sqlbridge.db.base import BaseAdapter
from sqlbridge.db.models import ColumnInfo, IndexInfo, SchemaInfo, TableInfo
from sqlbridge.db.values import Value, coerce_value
from sqlbridge.exceptions import DatabaseConnectionError

SYSTEM_SCHEMAS = ("pg_catalog", "information_schema", "pg_toast")


class PostgreSQLAdapter(BaseAdapter):
    """PostgreSQL adapter on asyncpg."""

    database_type = DatabaseType.POSTGRESQL

    def build_url(self) -> URL:
        """Build the ``postgresql+asyncpg`` URL from a ``postgres://`` string.

        Raises:
            DatabaseConnectionError: If the connection string cannot be parsed.
        """
        try:
            url = make_url(self.connection_string)
        except ArgumentError as e:
            raise DatabaseConnectionError(
                f"Invalid PostgreSQL connection string: {e}", database_type=self.database_type.value
            ) from e
        if url.get_backend_name() not in ("postgres", "postgresql"):
            raise DatabaseConnectionError(
                f"Not a PostgreSQL connection string: {url.drivername}",
                database_type=self.database_type.value,
            )
        # asyncpg takes ssl through connect_args, not the query string
        return url.set(drivername="postgresql+asyncpg").difference_update_query(["sslmode"])

    def _get_engine_options(self) -> Dict[str, Any]:
        """Get PostgreSQL-specific engine options."""
        connect_args: Dict[str, Any] = {
            'timeout': self.CONNECT_TIMEOUT,
            'server_settings': {'application_name': 'sqlbridge'},
        }
        sslmode = make_url(self.connection_string).query.get("sslmode")
        if sslmode:
            connect_args['ssl'] = sslmode
        return {'connect_args': connect_args}

    async def list_schemas(self) -> List[SchemaInfo]:
        placeholders = ", ".join(f"${i}" for i in range(1, len(SYSTEM_SCHEMAS) + 1))
        _, rows = await self._fetch(
            f"""
            SELECT schema_name
            FROM information_schema.schemata
            WHERE schema_name NOT IN ({placeholders})
            ORDER BY schema_name
            """,
            SYSTEM_SCHEMAS,
        )
        return [SchemaInfo(name=row[0]) for row in rows]

    async def list_tables(self, schema: str) -> List[TableInfo]:
        _, rows = await self._fetch(
            """
            SELECT table_schema, table_name, table_type
            FROM information_schema.tables
            WHERE table_schema = $1
            ORDER BY table_type, table_name
            """,
            [schema],
        )
        return [TableInfo(schema=row[0], name=row[1], table_type=row[2]) for row in rows]

    async def list_columns(self, schema: str, table: str) -> List[ColumnInfo]:
        _, rows = await self._fetch(
            """
            SELECT
                c.column_name,
                c.data_type,
                c.is_nullable,
                c.column_default,
                pk.column_name IS NOT NULL AS is_primary_key
            FROM information_schema.columns c
            LEFT JOIN (
                SELECT kcu.column_name
                FROM information_schema.table_constraints tc
                JOIN information_schema.key_column_usage kcu
                  ON tc.constraint_name = kcu.constraint_name
                 AND tc.table_schema = kcu.table_schema
                 AND tc.table_name = kcu.table_name
                WHERE tc.constraint_type = 'PRIMARY KEY'
                  AND tc.table_schema = $1
                  AND tc.table_name = $2
            ) pk ON c.column_name = pk.column_name
            WHERE c.table_schema = $1 AND c.table_name = $2
            ORDER BY c.ordinal_position
            """,
            [schema, table],
        )
        return [
            ColumnInfo(
                name=row[0],
                data_type=row[1],
                is_nullable=row[2] == 'YES',
                is_primary_key=bool(row[4]),
                default_value=row[3],
            )
            for row in rows
        ]

    async def list_indexes(self, schema: str, table: str) -> List[IndexInfo]:
        _, rows = await self._fetch(
            """
            SELECT i.relname, a.attname, ix.indisunique, ix.indisprimary
            FROM pg_class t
            JOIN pg_namespace n ON n.oid = t.relnamespace
            JOIN pg_index ix ON ix.indrelid = t.oid
            JOIN pg_class i ON i.oid = ix.indexrelid
            JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS k(attnum, ord) ON true
            JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = k.attnum
            WHERE n.nspname = $1 AND t.relname = $2
            ORDER BY i.relname, k.ord
            """,
            [schema, table],
        )
        return self._group_indexes(rows)

    def _inserted_key(self, result: CursorResult) -> Value:
        # First column of RETURNING *
        row = result.first()
        if row is None:
            return Value.null()
        return coerce_value(row[0])
