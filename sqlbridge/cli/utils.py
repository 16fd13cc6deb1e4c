"""Shared CLI utilities for SQLBridge."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sqlbridge.config import DatabaseType, EnvironmentSettings, load_config
from sqlbridge.config.models import DatabaseConfig
from sqlbridge.context import AppContext
from sqlbridge.db.connection import ConnectionRegistry
from sqlbridge.db.models import QueryResult
from sqlbridge.db.values import Value, ValueKind

# Single console instance reused across CLI modules
console = Console()

T = TypeVar("T")

Operation = Callable[[ConnectionRegistry, str, DatabaseConfig], Awaitable[T]]


def setup_logging(verbose: bool = False, settings: Optional[EnvironmentSettings] = None) -> None:
    """Configure the root logger from --verbose or SQLBRIDGE_LOG_LEVEL."""
    settings = settings or EnvironmentSettings()
    level = logging.DEBUG if verbose or settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


def print_exception(message: str, error: Exception, verbose: bool = False) -> None:
    """Render a formatted exception message.

    Args:
        message: Friendly context message to display before the exception.
        error: Original exception instance.
        verbose: When True, render the full traceback for debugging.
    """
    console.print(f"[red]{message}: {escape(str(error))}[/red]")
    if verbose:
        import traceback

        console.print(f"[dim]{traceback.format_exc()}[/dim]")


def default_schema(profile: DatabaseConfig) -> str:
    """Schema used when the user does not pass --schema."""
    if profile.type == DatabaseType.POSTGRESQL:
        return "public"
    if profile.type == DatabaseType.MYSQL:
        return profile.database
    return "main"


def run_with_connection(ctx: click.Context, operation: Operation[T]) -> T:
    """Open the selected profile, run one operation and disconnect."""

    async def runner() -> T:
        config = load_config(ctx.obj.get('config'))
        async with AppContext(config=config) as app:
            profile = app.get_profile(ctx.obj.get('db'))
            handle = await app.registry.connect(profile)
            return await operation(app.registry, handle, profile)

    return asyncio.run(runner())


def format_value(value: Value) -> str:
    if value.kind is ValueKind.NULL:
        return "[dim]NULL[/dim]"
    if value.kind is ValueKind.JSON:
        return escape(json.dumps(value.data))
    return escape(str(value.to_json()))


def build_table(columns: Iterable[str], rows: Iterable[List[Value]]) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    for column in columns:
        table.add_column(str(column), style="cyan")
    for row in rows:
        table.add_row(*[format_value(value) for value in row])
    return table


def print_query_result(result: QueryResult) -> None:
    if result.columns:
        console.print(build_table(result.columns, result.rows))
        console.print(f"\n[dim]{result.row_count} row(s) in {result.execution_time_ms:.2f} ms[/dim]")
    else:
        console.print(
            f"[green]{result.rows_affected} row(s) affected[/green] "
            f"[dim]({result.execution_time_ms:.2f} ms)[/dim]"
        )
