"""Core exceptions for SQLBridge."""

from typing import Any, Dict, Optional


class SQLBridgeError(Exception):
    """Base exception for all SQLBridge errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(SQLBridgeError):
    """Raised when there's an error in configuration parsing or validation."""
    pass


class DatabaseError(SQLBridgeError):
    """Raised when there's an error connecting to or querying a database."""

    def __init__(
        self,
        message: str,
        database_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.database_type = database_type


class DatabaseConnectionError(DatabaseError):
    """Raised when a connection cannot be established or acquired from the pool."""
    pass


class QueryError(DatabaseError):
    """Raised when a statement fails; the driver's message is kept verbatim."""

    def __init__(
        self,
        message: str,
        sql: Optional[str] = None,
        database_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, database_type, details)
        self.sql = sql


class NotFoundError(DatabaseError):
    """Raised for unknown connection handles or connection profiles."""
    pass


class InvalidOperationError(DatabaseError):
    """Raised when an operation is not supported by the target engine or state."""
    pass
