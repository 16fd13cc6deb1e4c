"""Application context owning the connection registry."""

from typing import Optional

from sqlbridge.config.models import BridgeConfig, DatabaseConfig, EnvironmentSettings
from sqlbridge.db.connection import ConnectionRegistry
from sqlbridge.exceptions import ConfigurationError, NotFoundError


class AppContext:
    """Long-lived application object passed to whoever needs connections.

    Usage::

        async with AppContext() as app:
            handle = await app.registry.connect(config)
            tables = await app.registry.list_tables(handle, "public")

    Leaving the context closes every open connection.
    """

    def __init__(
        self,
        settings: Optional[EnvironmentSettings] = None,
        config: Optional[BridgeConfig] = None,
    ) -> None:
        self.settings = settings or EnvironmentSettings()
        self.config = config
        self.registry = ConnectionRegistry()

    def get_profile(self, name: Optional[str] = None) -> DatabaseConfig:
        """Resolve a named connection profile, or the default one.

        Raises:
            ConfigurationError: If no profiles are loaded.
            NotFoundError: If the profile does not exist.
        """
        if self.config is None:
            raise ConfigurationError("No configuration loaded")

        name = name or self.config.default_database
        if not name or name not in self.config.databases:
            available = list(self.config.databases.keys())
            raise NotFoundError(f"Database '{name}' not found in configuration. Available databases: {available}")
        return self.config.databases[name]

    async def connect_profile(self, name: Optional[str] = None) -> str:
        """Open a connection for a named profile and return its handle."""
        return await self.registry.connect(self.get_profile(name))

    async def close(self) -> None:
        await self.registry.close_all()

    async def __aenter__(self) -> "AppContext":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
