"""Connection profile CLI commands."""

from __future__ import annotations

from pathlib import Path

import click
from rich.table import Table

from sqlbridge.cli.utils import console
from sqlbridge.config import BridgeConfig, DatabaseConfig, DatabaseType, create_sample_config, load_config
from sqlbridge.exceptions import ConfigurationError


@click.group(name="config")
def config_group() -> None:
    """⚙️  Configuration management for connection profiles."""
    pass


def describe_target(profile: DatabaseConfig) -> str:
    """Where a profile points, without credentials."""
    if profile.type == DatabaseType.SQLITE:
        return profile.path or ""
    return f"{profile.username}@{profile.host}:{profile.port}/{profile.database}"


def print_profiles(config: BridgeConfig) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Profile", style="cyan")
    table.add_column("Engine", style="green")
    table.add_column("Target", style="white")
    table.add_column("Default", style="yellow")
    for name, profile in config.databases.items():
        table.add_row(
            name,
            profile.type.display_name,
            describe_target(profile),
            "✓" if name == config.default_database else "",
        )
    console.print(table)


@config_group.command(name="validate")
@click.argument("config_file", type=click.Path(exists=True))
def validate_command(config_file: str) -> None:
    """Validate a profile file and list its connections."""
    try:
        config = load_config(config_file)
    except ConfigurationError as exc:
        console.print(f"[red]❌ Configuration validation failed: {exc}[/red]")
        raise SystemExit(1) from exc

    console.print(f"[green]✅ Configuration file '{config_file}' is valid[/green]")
    print_profiles(config)


@config_group.command(name="sample")
@click.argument("output_file", type=click.Path(dir_okay=False))
def sample_command(output_file: str) -> None:
    """Write a sample profile file with one connection per engine."""
    output_path = Path(output_file)
    if output_path.exists():
        click.confirm(f"File '{output_file}' exists. Overwrite?", abort=True)

    try:
        create_sample_config(output_path)
    except OSError as exc:
        console.print(f"[red]Error creating sample configuration: {exc}[/red]")
        raise SystemExit(1) from exc

    console.print(f"[green]✅ Sample configuration created: {output_file}[/green]")
    console.print("\n[yellow]Next steps:[/yellow]")
    console.print("1. Point each profile at your own databases")
    console.print("2. Export passwords referenced as ${VAR} (e.g. DEV_DB_PASSWORD)")
    console.print(f"3. Validate: [cyan]sqlbridge config validate {output_file}[/cyan]")
    console.print(f"4. Browse: [cyan]sqlbridge --config {output_file} db tables[/cyan]")
