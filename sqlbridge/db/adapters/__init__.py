"""Database adapters for different database types."""

from sqlbridge.db.adapters.postgresql import PostgreSQLAdapter
from sqlbridge.db.adapters.mysql import MySQLAdapter
from sqlbridge.db.adapters.sqlite import SQLiteAdapter

__all__ = [
    "PostgreSQLAdapter",
    "MySQLAdapter",
    "SQLiteAdapter",
]
