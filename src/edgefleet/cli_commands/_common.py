"""Helpers shared by the manifest-driven subcommands."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from edgefleet.cli_commands._output import console
from edgefleet.sdk.errors import ManifestValidationError
from edgefleet.sdk.manifest import ManifestLoader
from edgefleet.sdk.models import FleetManifest, TelemetrySettings  # noqa: TC001
from edgefleet.utils.telemetry import configure_telemetry


def open_manifest(ctx: click.Context, manifest: str) -> FleetManifest:
    """Load *manifest* and configure telemetry; exit with status 1 on failure."""
    try:
        spec = ManifestLoader(Path(manifest)).load()
    except ManifestValidationError as exc:
        console.print(f"[red]Validation error:[/red] {exc}")
        sys.exit(1)

    if ctx.obj and ctx.obj.get("telemetry"):
        if spec.telemetry is None:
            spec.telemetry = TelemetrySettings(enabled=True)
        else:
            spec.telemetry.enabled = True

    if spec.telemetry and spec.telemetry.enabled:
        configure_telemetry(otlp_endpoint=spec.telemetry.otlp_endpoint)
    return spec
