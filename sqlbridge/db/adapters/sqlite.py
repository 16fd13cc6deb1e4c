"""SQLite database adapter."""

from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import CursorResult
from sqlalchemy.pool import StaticPool

from sqlbridge.config.models import DatabaseType
from sqlbridge.db.base import BaseAdapter
from sqlbridge.db.models import ColumnInfo, IndexInfo, SchemaInfo, TableInfo
from sqlbridge.db.values import Value
from sqlbridge.exceptions import DatabaseConnectionError

MAIN_SCHEMA = "main"
MEMORY_PATHS = ("", ":memory:")


class SQLiteAdapter(BaseAdapter):
    """SQLite adapter on aiosqlite.

    SQLite has one implicit schema, ``main``; schema arguments are accepted
    for interface compatibility and ignored when qualifying tables.
    """

    database_type = DatabaseType.SQLITE
    POOL_SIZE = 5

    @property
    def database_path(self) -> str:
        """File path from ``sqlite:<path>``, ``sqlite://<path>`` or ``sqlite:///<path>``."""
        if not self.connection_string.startswith("sqlite:"):
            raise DatabaseConnectionError(
                f"Not a SQLite connection string: {self.connection_string}",
                database_type=self.database_type.value,
            )
        path = self.connection_string[len("sqlite:"):]
        if path.startswith("//"):
            path = path[2:]
        return path.split("?", 1)[0]

    @property
    def is_memory(self) -> bool:
        return self.database_path in MEMORY_PATHS

    def build_url(self) -> str:
        """Build SQLite connection string.

        Returns:
            ``sqlite+aiosqlite`` URL with an absolute file path.
        """
        if self.is_memory:
            return "sqlite+aiosqlite:///:memory:"

        # Convert relative paths to absolute paths
        db_path = Path(self.database_path)
        if not db_path.is_absolute():
            db_path = Path.cwd() / db_path

        # Create directory if it doesn't exist
        db_path.parent.mkdir(parents=True, exist_ok=True)

        return f"sqlite+aiosqlite:///{db_path}"

    def _get_pool_options(self) -> Dict[str, Any]:
        if self.is_memory:
            # Every pooled connection would otherwise see its own empty database
            return {'poolclass': StaticPool}
        options = super()._get_pool_options()
        options['pool_recycle'] = -1  # No recycling for SQLite
        return options

    def _get_engine_options(self) -> Dict[str, Any]:
        """Get SQLite-specific engine options."""
        return {'connect_args': {'timeout': 30}}

    async def list_schemas(self) -> List[SchemaInfo]:
        return [SchemaInfo(name=MAIN_SCHEMA)]

    async def list_tables(self, schema: str) -> List[TableInfo]:
        _, rows = await self._fetch(
            """
            SELECT name, type
            FROM sqlite_master
            WHERE type IN ('table', 'view') AND name NOT LIKE 'sqlite_%'
            ORDER BY type, name
            """
        )
        return [
            TableInfo(
                schema=MAIN_SCHEMA,
                name=name,
                table_type="VIEW" if kind == "view" else "BASE TABLE",
            )
            for name, kind in rows
        ]

    async def list_columns(self, schema: str, table: str) -> List[ColumnInfo]:
        # PRAGMA table_info: cid, name, type, notnull, dflt_value, pk
        _, rows = await self._fetch(f"PRAGMA table_info({self.dialect.quote_identifier(table)})")
        return [
            ColumnInfo(
                name=row[1],
                data_type=row[2],
                is_nullable=row[3] == 0,
                is_primary_key=row[5] > 0,
                default_value=row[4],
            )
            for row in rows
        ]

    async def list_indexes(self, schema: str, table: str) -> List[IndexInfo]:
        # PRAGMA index_list: seq, name, unique, origin, partial
        _, index_rows = await self._fetch(f"PRAGMA index_list({self.dialect.quote_identifier(table)})")

        indexes = []
        for row in index_rows:
            name, is_unique, origin = row[1], row[2], row[3]
            _, info_rows = await self._fetch(f"PRAGMA index_info({self.dialect.quote_identifier(name)})")
            indexes.append(IndexInfo(
                name=name,
                columns=[info[2] for info in sorted(info_rows, key=lambda r: r[0])],
                is_unique=bool(is_unique),
                is_primary=origin == "pk",
            ))
        return sorted(indexes, key=lambda index: index.name)

    def _inserted_key(self, result: CursorResult) -> Value:
        last_id: Optional[int] = result.lastrowid
        if not last_id:
            return Value.null()
        return Value.integer(last_id)
