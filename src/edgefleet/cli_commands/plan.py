"""``edgefleet plan`` — compose every node's desire from a manifest."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

import click

from edgefleet.cli_commands._common import open_manifest
from edgefleet.cli_commands._output import console, print_nodes
from edgefleet.errors import FleetError
from edgefleet.sdk.manifest import build_fleet

if TYPE_CHECKING:
    from edgefleet.core.models import Node
    from edgefleet.sdk.models import FleetManifest


@click.command()
@click.argument("manifest", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def plan(ctx: click.Context, manifest: str, as_json: bool) -> None:
    """Show the desired applications of every node in MANIFEST."""
    spec = open_manifest(ctx, manifest)

    try:
        nodes = asyncio.run(_plan(spec))
    except FleetError as exc:
        console.print(f"[red]Planning error:[/red] {exc}")
        sys.exit(1)

    print_nodes(nodes, as_json=as_json)


async def _plan(spec: FleetManifest) -> list[Node]:
    fleet = await build_fleet(spec)
    listed = await fleet.nodes.list(spec.namespace)
    return listed.items
