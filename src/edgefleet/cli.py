"""edgefleet CLI entrypoint."""

from __future__ import annotations

import logging

import click

from edgefleet import __version__


@click.group()
@click.version_option(version=__version__, prog_name="edgefleet")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--telemetry", is_flag=True, help="Export trace spans to the console.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, telemetry: bool) -> None:
    """edgefleet — plan and propagate application desires across a fleet."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = {"telemetry": telemetry}


# Register subcommands
from edgefleet.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
