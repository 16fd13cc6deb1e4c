"""Database browsing CLI commands."""

from __future__ import annotations

import asyncio
from typing import Optional, Tuple

import click
from rich.table import Table

from sqlbridge.cli.utils import (
    build_table,
    console,
    default_schema,
    print_exception,
    run_with_connection,
)
from sqlbridge.config import load_config
from sqlbridge.context import AppContext
from sqlbridge.db.models import FetchDataParams, FilterCondition, SortColumn, SortDirection
from sqlbridge.exceptions import ConfigurationError, DatabaseError


@click.group(name="db")
@click.pass_context
def db_group(ctx: click.Context) -> None:
    """🗄️  Database connections and browsing."""
    pass


@db_group.command(name="test")
@click.option("--database", "-d", help="Specific profile to test (default: all)")
@click.pass_context
def test_connection_command(ctx: click.Context, database: Optional[str]) -> None:
    """Test database connections."""
    try:
        config = load_config(ctx.obj.get('config'))
        app = AppContext(config=config)
        names = [database] if database else list(config.databases)

        console.print("[bold blue]Testing Database Connections[/bold blue]\n")
        for name in names:
            result = asyncio.run(app.registry.test_connection(app.get_profile(name)))
            result['database'] = name
            _show_connection_result(result)
            console.print()
    except (ConfigurationError, DatabaseError) as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise SystemExit(1) from exc


@db_group.command(name="schemas")
@click.pass_context
def schemas_command(ctx: click.Context) -> None:
    """List schemas (databases on MySQL)."""

    async def operation(registry, handle, profile):
        return await registry.list_schemas(handle)

    try:
        schemas = run_with_connection(ctx, operation)
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("#", style="dim", width=4)
        table.add_column("Schema", style="cyan")
        for i, schema in enumerate(schemas, start=1):
            table.add_row(str(i), schema.name)
        console.print(table)
    except (ConfigurationError, DatabaseError) as exc:
        print_exception("Error", exc, ctx.obj.get('verbose'))
        raise SystemExit(1) from exc


@db_group.command(name="tables")
@click.option("--schema", "-s", help="Schema to list tables from")
@click.pass_context
def tables_command(ctx: click.Context, schema: Optional[str]) -> None:
    """List tables and views."""

    async def operation(registry, handle, profile):
        return await registry.list_tables(handle, schema or default_schema(profile))

    try:
        tables = run_with_connection(ctx, operation)
        if not tables:
            console.print("[yellow]No tables found[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("#", style="dim", width=4)
        table.add_column("Schema", style="blue")
        table.add_column("Table Name", style="cyan")
        table.add_column("Type", style="green")
        for i, info in enumerate(tables, start=1):
            table.add_row(str(i), info.schema, info.name, info.table_type)
        console.print(table)
        console.print(f"\n[dim]Total: {len(tables)} table(s)[/dim]")
    except (ConfigurationError, DatabaseError) as exc:
        print_exception("Error", exc, ctx.obj.get('verbose'))
        raise SystemExit(1) from exc


@db_group.command(name="describe")
@click.argument('table_name')
@click.option("--schema", "-s", help="Schema name")
@click.pass_context
def describe_command(ctx: click.Context, table_name: str, schema: Optional[str]) -> None:
    """Describe table structure and column metadata."""

    async def operation(registry, handle, profile):
        return await registry.list_columns(handle, schema or default_schema(profile), table_name)

    try:
        columns = run_with_connection(ctx, operation)
        if not columns:
            console.print(f"[yellow]Table '{table_name}' has no columns or does not exist[/yellow]")
            return

        console.print(f"[bold blue]Table Structure: {table_name}[/bold blue]")
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Name", style="cyan")
        table.add_column("Type", style="green")
        table.add_column("Nullable", style="yellow")
        table.add_column("Default", style="white")
        table.add_column("Primary Key", style="blue")
        for column in columns:
            table.add_row(
                column.name,
                column.data_type,
                "Yes" if column.is_nullable else "No",
                column.default_value or "",
                "✓" if column.is_primary_key else "",
            )
        console.print(table)
    except (ConfigurationError, DatabaseError) as exc:
        print_exception("Database Error", exc, ctx.obj.get('verbose'))
        raise SystemExit(1) from exc


@db_group.command(name="indexes")
@click.argument('table_name')
@click.option("--schema", "-s", help="Schema name")
@click.pass_context
def indexes_command(ctx: click.Context, table_name: str, schema: Optional[str]) -> None:
    """List indexes of a table."""

    async def operation(registry, handle, profile):
        return await registry.list_indexes(handle, schema or default_schema(profile), table_name)

    try:
        indexes = run_with_connection(ctx, operation)
        if not indexes:
            console.print("[yellow]No indexes found[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Index", style="cyan")
        table.add_column("Columns", style="green")
        table.add_column("Unique", style="yellow")
        table.add_column("Primary", style="blue")
        for index in indexes:
            table.add_row(
                index.name,
                ", ".join(index.columns),
                "✓" if index.is_unique else "",
                "✓" if index.is_primary else "",
            )
        console.print(table)
    except (ConfigurationError, DatabaseError) as exc:
        print_exception("Database Error", exc, ctx.obj.get('verbose'))
        raise SystemExit(1) from exc


@db_group.command(name="browse")
@click.argument('table_name')
@click.option("--schema", "-s", help="Schema name")
@click.option("--limit", "-n", type=click.IntRange(min=0), default=20, show_default=True, help="Rows per page")
@click.option("--offset", type=click.IntRange(min=0), default=0, show_default=True, help="Rows to skip")
@click.option("--sort", "sort_specs", multiple=True, help="Sort column, as COLUMN or COLUMN:desc")
@click.option(
    "--filter", "filter_specs", multiple=True,
    help="Filter as COLUMN:OPERATOR[:VALUE], e.g. name:contains:ann or email:isnull",
)
@click.pass_context
def browse_command(
    ctx: click.Context,
    table_name: str,
    schema: Optional[str],
    limit: int,
    offset: int,
    sort_specs: Tuple[str, ...],
    filter_specs: Tuple[str, ...],
) -> None:
    """Show one page of a table."""
    try:
        sort = [parse_sort(spec) for spec in sort_specs] or None
        filters = [parse_filter(spec) for spec in filter_specs] or None
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    async def operation(registry, handle, profile):
        params = FetchDataParams(
            schema=schema or default_schema(profile),
            table=table_name,
            limit=limit,
            offset=offset,
            sort=sort,
            filters=filters,
        )
        return await registry.fetch_table_data(handle, params)

    try:
        data = run_with_connection(ctx, operation)
        console.print(build_table([c.name for c in data.columns], data.rows))
        shown_to = offset + len(data.rows)
        console.print(
            f"\n[dim]Rows {offset + 1 if data.rows else 0}-{shown_to} of {data.total_count}[/dim]"
        )
    except (ConfigurationError, DatabaseError) as exc:
        print_exception("Database Error", exc, ctx.obj.get('verbose'))
        raise SystemExit(1) from exc


def parse_sort(spec: str) -> SortColumn:
    """Parse ``column`` or ``column:asc|desc``."""
    column, _, direction = spec.partition(":")
    if not column:
        raise ValueError(f"Invalid sort '{spec}'")
    return SortColumn(column=column, direction=SortDirection(direction or "asc"))


def parse_filter(spec: str) -> FilterCondition:
    """Parse ``column:operator[:value]``; the value may itself contain colons."""
    parts = spec.split(":", 2)
    if len(parts) < 2 or not parts[0]:
        raise ValueError(f"Invalid filter '{spec}', expected COLUMN:OPERATOR[:VALUE]")
    condition = FilterCondition(column=parts[0], operator=parts[1], value=parts[2] if len(parts) == 3 else "")
    if condition.operator.takes_operand and len(parts) < 3:
        raise ValueError(f"Filter '{spec}' needs a value: {parts[0]}:{parts[1]}:VALUE")
    return condition


def _show_connection_result(result: dict) -> None:
    status_color = "green" if result['status'] == 'success' else "red"
    console.print(f"Database: [cyan]{result['database']}[/cyan]")
    console.print(f"Status: [{status_color}]{result['status'].upper()}[/{status_color}]")
    console.print(f"Message: {result.get('message', 'No message provided')}")
    console.print(f"Response Time: {result.get('response_time', 0)} ms")
