"""Ad hoc SQL execution command."""

from __future__ import annotations

from typing import Optional

import click

from sqlbridge.cli.utils import console, print_exception, print_query_result, run_with_connection
from sqlbridge.cli.commands.database import parse_filter, parse_sort
from sqlbridge.exceptions import ConfigurationError, DatabaseError


@click.command(name="query")
@click.argument("sql")
@click.option("--wrap", is_flag=True, help="Run the statement as a subquery so filters/sort/limit apply")
@click.option("--limit", "-n", type=click.IntRange(min=0), help="Row limit (with --wrap)")
@click.option("--offset", type=click.IntRange(min=0), help="Rows to skip (with --wrap)")
@click.option("--sort", "sort_specs", multiple=True, help="Sort column (with --wrap)")
@click.option("--filter", "filter_specs", multiple=True, help="COLUMN:OPERATOR[:VALUE] (with --wrap)")
@click.pass_context
def query_command(
    ctx: click.Context,
    sql: str,
    wrap: bool,
    limit: Optional[int],
    offset: Optional[int],
    sort_specs: tuple,
    filter_specs: tuple,
) -> None:
    """🔎 Execute a SQL statement against the selected database."""
    try:
        sort = [parse_sort(spec) for spec in sort_specs] or None
        filters = [parse_filter(spec) for spec in filter_specs] or None
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    async def operation(registry, handle, profile):
        if wrap:
            return await registry.execute_wrapped_query(handle, sql, filters, sort, limit, offset)
        return await registry.execute_query(handle, sql)

    try:
        if wrap:
            console.print("[yellow]Statement is wrapped in a subquery; trailing clauses and CTEs may behave differently[/yellow]")
        print_query_result(run_with_connection(ctx, operation))
    except (ConfigurationError, DatabaseError) as exc:
        print_exception("Query failed", exc, ctx.obj.get('verbose'))
        raise SystemExit(1) from exc
