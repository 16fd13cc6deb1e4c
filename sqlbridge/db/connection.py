"""Database connection registry and adapter factory."""

import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Type
from urllib.parse import quote_plus

from sqlbridge.config.models import DEFAULT_PORTS, DatabaseConfig, DatabaseType
from sqlbridge.db.base import BaseAdapter
from sqlbridge.db.adapters.postgresql import PostgreSQLAdapter
from sqlbridge.db.adapters.mysql import MySQLAdapter
from sqlbridge.db.adapters.sqlite import SQLiteAdapter
from sqlbridge.db.models import (
    AlterTableParams,
    ColumnInfo,
    FetchDataParams,
    FilterCondition,
    IndexInfo,
    QueryResult,
    RowDelete,
    RowInsert,
    RowUpdate,
    SchemaInfo,
    SortColumn,
    TableData,
    TableInfo,
)
from sqlbridge.db.values import Value
from sqlbridge.exceptions import (
    DatabaseError,
    InvalidOperationError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


class AdapterFactory:
    """Factory for creating database adapters."""

    _adapters: Dict[DatabaseType, Type[BaseAdapter]] = {
        DatabaseType.POSTGRESQL: PostgreSQLAdapter,
        DatabaseType.MYSQL: MySQLAdapter,
        DatabaseType.SQLITE: SQLiteAdapter,
    }

    _schemes: Dict[DatabaseType, str] = {
        DatabaseType.POSTGRESQL: "postgres",
        DatabaseType.MYSQL: "mysql",
    }

    @classmethod
    def create_adapter(cls, db_type: DatabaseType, connection_string: str) -> BaseAdapter:
        """Create a database adapter for a connection string.

        Raises:
            InvalidOperationError: If the database type is not supported.
        """
        try:
            adapter_class = cls._adapters.get(DatabaseType(db_type))
        except ValueError:
            adapter_class = None
        if not adapter_class:
            supported_types = [t.value for t in cls._adapters]
            raise InvalidOperationError(
                f"Unsupported database type: {db_type}. "
                f"Supported types: {supported_types}"
            )
        return adapter_class(connection_string)

    @classmethod
    def build_connection_string(
        cls,
        db_type: DatabaseType,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> str:
        """Build the connection string for discrete parameters.

        SQLite uses ``database`` as the file path and ignores the rest.
        """
        db_type = DatabaseType(db_type)
        if db_type == DatabaseType.SQLITE:
            return f"sqlite:{database or ''}"

        user = quote_plus(username or "")
        secret = quote_plus(password or "")
        port = port or DEFAULT_PORTS[db_type]
        return f"{cls._schemes[db_type]}://{user}:{secret}@{host}:{port}/{database or ''}"

    @classmethod
    def connection_string_for(cls, config: DatabaseConfig) -> str:
        """Connection string for a validated profile."""
        return cls.build_connection_string(
            config.type,
            host=config.host,
            port=config.port,
            database=config.path if config.type == DatabaseType.SQLITE else config.database,
            username=config.username,
            password=config.password,
        )

    @classmethod
    def register_adapter(cls, db_type: DatabaseType, adapter_class: Type[BaseAdapter]) -> None:
        """Register a custom database adapter."""
        cls._adapters[db_type] = adapter_class

    @classmethod
    def get_supported_types(cls) -> List[DatabaseType]:
        """Get list of supported database types."""
        return list(cls._adapters.keys())


class ReadWriteLock:
    """Asyncio lock allowing many readers or one writer."""

    def __init__(self) -> None:
        self._condition = asyncio.Condition()
        self._readers = 0
        self._writer = False

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._condition:
            await self._condition.wait_for(lambda: not self._writer)
            self._readers += 1
        try:
            yield
        finally:
            async with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._condition:
            await self._condition.wait_for(lambda: not self._writer and self._readers == 0)
            self._writer = True
        try:
            yield
        finally:
            async with self._condition:
                self._writer = False
                self._condition.notify_all()


class ConnectionRegistry:
    """Maps opaque connection handles to live adapters.

    Handles are random UUID strings and are never reused. Lookups share a
    read lock; connect and disconnect take it exclusively.
    """

    def __init__(self) -> None:
        self._adapters: Dict[str, BaseAdapter] = {}
        self._lock = ReadWriteLock()
        self._factory = AdapterFactory()

    async def connect(self, config: DatabaseConfig) -> str:
        """Open a connection from discrete parameters and return its handle."""
        return await self.connect_with_string(config.type, self._factory.connection_string_for(config))

    async def connect_with_string(self, db_type: DatabaseType, connection_string: str) -> str:
        """Open a connection from a connection string and return its handle.

        Raises:
            DatabaseConnectionError: If the database cannot be reached.
        """
        adapter = self._factory.create_adapter(db_type, connection_string)
        await adapter.connect()

        handle = str(uuid.uuid4())
        async with self._lock.write():
            self._adapters[handle] = adapter
        logger.info(f"Registered {adapter.database_type.display_name} connection {handle}")
        return handle

    async def disconnect(self, handle: str) -> None:
        """Remove and close a connection. Unknown handles are ignored."""
        async with self._lock.write():
            adapter = self._adapters.pop(handle, None)
        if adapter is None:
            return
        try:
            await adapter.close()
        except DatabaseError as e:
            logger.warning(f"Error closing connection {handle}: {e}")
        logger.info(f"Disconnected {handle}")

    async def resolve(self, handle: str) -> BaseAdapter:
        """Return the adapter behind a handle.

        Raises:
            NotFoundError: If the handle is unknown.
        """
        async with self._lock.read():
            adapter = self._adapters.get(handle)
        if adapter is None:
            raise NotFoundError(f"Connection '{handle}' not found")
        return adapter

    async def handles(self) -> List[str]:
        async with self._lock.read():
            return list(self._adapters)

    async def close_all(self) -> None:
        """Close all database connections and cleanup resources."""
        for handle in await self.handles():
            await self.disconnect(handle)

    async def test_connection(self, config: DatabaseConfig) -> Dict[str, Any]:
        """Try a profile without registering it.

        Returns:
            Connection test result with timing and status information.
        """
        start_time = time.perf_counter()
        adapter = self._factory.create_adapter(config.type, self._factory.connection_string_for(config))

        try:
            await adapter.connect()
            return {
                'status': 'success',
                'message': 'Connection successful',
                'response_time': round((time.perf_counter() - start_time) * 1000, 2),
                'database_type': config.type.value,
            }
        except DatabaseError as e:
            return {
                'status': 'failed',
                'message': str(e),
                'response_time': round((time.perf_counter() - start_time) * 1000, 2),
                'database_type': config.type.value,
                'error': type(e).__name__,
            }
        finally:
            await adapter.close()

    # Dispatch by handle

    async def list_schemas(self, handle: str) -> List[SchemaInfo]:
        return await (await self.resolve(handle)).list_schemas()

    async def list_tables(self, handle: str, schema: str) -> List[TableInfo]:
        return await (await self.resolve(handle)).list_tables(schema)

    async def list_columns(self, handle: str, schema: str, table: str) -> List[ColumnInfo]:
        return await (await self.resolve(handle)).list_columns(schema, table)

    async def list_indexes(self, handle: str, schema: str, table: str) -> List[IndexInfo]:
        return await (await self.resolve(handle)).list_indexes(schema, table)

    async def fetch_table_data(self, handle: str, params: FetchDataParams) -> TableData:
        return await (await self.resolve(handle)).fetch_table_data(params)

    async def execute_query(self, handle: str, sql: str) -> QueryResult:
        return await (await self.resolve(handle)).execute_query(sql)

    async def execute_wrapped_query(
        self,
        handle: str,
        sql: str,
        filters: Optional[List[FilterCondition]] = None,
        sort: Optional[List[SortColumn]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> QueryResult:
        adapter = await self.resolve(handle)
        return await adapter.execute_wrapped_query(sql, filters, sort, limit, offset)

    async def list_distinct_values(
        self,
        handle: str,
        schema: str,
        table: str,
        column: str,
        limit: Optional[int] = None,
    ) -> List[Value]:
        return await (await self.resolve(handle)).list_distinct_values(schema, table, column, limit)

    async def update_row(self, handle: str, update: RowUpdate) -> int:
        return await (await self.resolve(handle)).update_row(update)

    async def insert_row(self, handle: str, insert: RowInsert) -> Value:
        return await (await self.resolve(handle)).insert_row(insert)

    async def delete_row(self, handle: str, delete: RowDelete) -> int:
        return await (await self.resolve(handle)).delete_row(delete)

    async def create_schema(self, handle: str, name: str) -> None:
        await (await self.resolve(handle)).create_schema(name)

    async def drop_schema(self, handle: str, name: str, cascade: bool = False) -> None:
        await (await self.resolve(handle)).drop_schema(name, cascade)

    async def drop_table(self, handle: str, schema: str, table: str, cascade: bool = False) -> None:
        await (await self.resolve(handle)).drop_table(schema, table, cascade)

    async def alter_table(self, handle: str, params: AlterTableParams) -> None:
        await (await self.resolve(handle)).alter_table(params)

    async def begin_transaction(self, handle: str) -> None:
        await (await self.resolve(handle)).begin_transaction()

    async def commit(self, handle: str) -> None:
        await (await self.resolve(handle)).commit()

    async def rollback(self, handle: str) -> None:
        await (await self.resolve(handle)).rollback()

    async def in_transaction(self, handle: str) -> bool:
        return (await self.resolve(handle)).in_transaction
