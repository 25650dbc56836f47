"""``edgefleet propagate`` — roll one application's version across the fleet."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

import click

from edgefleet.cli_commands._common import open_manifest
from edgefleet.cli_commands._output import console, print_nodes, print_patched
from edgefleet.errors import FleetError, PropagationError
from edgefleet.sdk.manifest import build_fleet

if TYPE_CHECKING:
    from edgefleet.core.models import Application, Node
    from edgefleet.sdk.models import FleetManifest


@click.command()
@click.argument("manifest", type=click.Path(exists=True))
@click.option("--app", "app_name", required=True, help="Application to propagate.")
@click.option("--version", "version", default=None, help="New application version.")
@click.option("--remove", is_flag=True, help="Remove the application from every desire.")
@click.option("--json", "as_json", is_flag=True, help="Output resulting nodes as JSON.")
@click.pass_context
def propagate(
    ctx: click.Context,
    manifest: str,
    app_name: str,
    version: str | None,
    remove: bool,
    as_json: bool,
) -> None:
    """Propagate a new version of APP (or its removal) to the nodes in MANIFEST."""
    if remove == (version is not None):
        raise click.UsageError("Pass exactly one of --version or --remove.")

    spec = open_manifest(ctx, manifest)
    app = next((a for a in spec.applications if a.name == app_name), None)
    if app is None:
        console.print(f"[red]Unknown application:[/red] {app_name}")
        sys.exit(1)

    try:
        patched, nodes = asyncio.run(_propagate(spec, app, version))
    except PropagationError as exc:
        console.print(f"[red]Propagation error:[/red] {exc}")
        if exc.patched:
            console.print(f"  Already patched: {', '.join(exc.patched)}")
        sys.exit(1)
    except FleetError as exc:
        console.print(f"[red]Propagation error:[/red] {exc}")
        sys.exit(1)

    print_patched(app.name, patched, removed=remove)
    print_nodes(nodes, as_json=as_json)


async def _propagate(
    spec: FleetManifest, app: Application, version: str | None
) -> tuple[list[str], list[Node]]:
    fleet = await build_fleet(spec)

    if version is None:
        await fleet.node_store.delete_application(spec.namespace, app.name)
        patched = await fleet.propagator.delete_node_app_version(spec.namespace, app)
    else:
        bumped = await fleet.node_store.put_application(
            app.model_copy(update={"version": version})
        )
        patched = await fleet.propagator.update_node_app_version(spec.namespace, bumped)

    listed = await fleet.nodes.list(spec.namespace)
    return patched, listed.items
