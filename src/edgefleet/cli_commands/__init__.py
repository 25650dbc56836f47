"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from edgefleet.cli_commands.plan import plan
    from edgefleet.cli_commands.propagate import propagate
    from edgefleet.cli_commands.report import report

    cli.add_command(plan)
    cli.add_command(propagate)
    cli.add_command(report)
