"""Main CLI entry point for SQLBridge."""

from __future__ import annotations

import click

from sqlbridge import __version__
from sqlbridge.cli.commands import register_commands
from sqlbridge.cli.utils import console, setup_logging


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version information")
@click.option("--config", type=click.Path(exists=True), help="Path to configuration file")
@click.option("--db", help="Database profile name")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(
    ctx: click.Context,
    version: bool,
    config: str,
    db: str,
    verbose: bool,
) -> None:
    """SQLBridge - browse and edit PostgreSQL, MySQL and SQLite databases."""
    ctx.ensure_object(dict)
    ctx.obj.update(
        {
            "config": config,
            "db": db,
            "verbose": verbose,
        }
    )
    setup_logging(verbose)

    if version:
        console.print(f"SQLBridge v{__version__}")
        return

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)


if __name__ == "__main__":
    cli()
