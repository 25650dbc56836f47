"""``edgefleet report`` — merge a node report into its shadow."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from edgefleet.cli_commands._common import open_manifest
from edgefleet.cli_commands._output import console, print_report
from edgefleet.errors import FleetError
from edgefleet.sdk.manifest import build_fleet, load_report

if TYPE_CHECKING:
    from edgefleet.core.models import Report
    from edgefleet.sdk.models import FleetManifest


@click.command()
@click.argument("manifest", type=click.Path(exists=True))
@click.argument("node")
@click.argument("report_file", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def report(ctx: click.Context, manifest: str, node: str, report_file: str, as_json: bool) -> None:
    """Merge REPORT_FILE (YAML or JSON) into NODE's shadow and show the result."""
    spec = open_manifest(ctx, manifest)

    try:
        incoming = load_report(Path(report_file))
        merged = asyncio.run(_report(spec, node, incoming))
    except FleetError as exc:
        console.print(f"[red]Report error:[/red] {exc}")
        sys.exit(1)

    print_report(merged, as_json=as_json)


async def _report(spec: FleetManifest, node: str, incoming: Report) -> Report:
    fleet = await build_fleet(spec)
    shadow = await fleet.nodes.update_report(spec.namespace, node, incoming)
    return shadow.report
