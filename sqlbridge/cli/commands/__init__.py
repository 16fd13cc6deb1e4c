"""Click commands exposed by the ``sqlbridge`` entry point."""

from __future__ import annotations

from typing import Iterable, Optional

import click

from sqlbridge.cli.commands.configuration import config_group
from sqlbridge.cli.commands.database import db_group
from sqlbridge.cli.commands.query import query_command

COMMANDS = (db_group, query_command, config_group)


def register_commands(cli: click.Group, commands: Optional[Iterable[click.Command]] = None) -> None:
    """Attach the browsing, query and configuration commands to ``cli``."""
    for command in commands if commands is not None else COMMANDS:
        cli.add_command(command)
