"""SQLBridge: async data-access core for PostgreSQL, MySQL and SQLite.

SQLBridge provides:
- A portable value model for database cells
- Catalog introspection (schemas, tables, columns, indexes)
- Paged, filtered and sorted table browsing
- Single-row mutations and schema DDL
- Per-connection transactions on a pinned session
- A handle-based connection registry and a small CLI
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Core exports
from sqlbridge.exceptions import (
    SQLBridgeError,
    ConfigurationError,
    DatabaseError,
    DatabaseConnectionError,
    QueryError,
    NotFoundError,
    InvalidOperationError,
)

__all__ = [
    "__version__",
    "SQLBridgeError",
    "ConfigurationError",
    "DatabaseError",
    "DatabaseConnectionError",
    "QueryError",
    "NotFoundError",
    "InvalidOperationError",
]
