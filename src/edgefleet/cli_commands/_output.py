"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter
from rich.console import Console
from rich.table import Table

from edgefleet.core.models import (  # noqa: TC001
    DESIRED_APPLICATIONS,
    DESIRED_SYS_APPLICATIONS,
    AppInfo,
    Node,
    Report,
)

console = Console()

_ANY: TypeAdapter[Any] = TypeAdapter(Any)


def print_nodes(nodes: list[Node], *, as_json: bool = False) -> None:
    """Pretty-print each node's labels and desired applications."""
    if as_json:
        console.print_json(json.dumps([n.model_dump(mode="json") for n in nodes]))
        return

    table = Table(title="Node Desires")
    table.add_column("Node", style="cyan")
    table.add_column("Labels")
    table.add_column("Applications")
    table.add_column("System Applications")

    for node in nodes:
        labels = ", ".join(f"{k}={v}" for k, v in node.labels.items()) or "-"
        table.add_row(
            node.name,
            _truncate(labels),
            _format_infos(node.desire.app_infos(DESIRED_APPLICATIONS)),
            _format_infos(node.desire.app_infos(DESIRED_SYS_APPLICATIONS)),
        )

    console.print(table)


def print_patched(app_name: str, patched: list[str], *, removed: bool = False) -> None:
    """Print the nodes touched by a propagation run."""
    verb = "Removed" if removed else "Patched"
    if not patched:
        console.print(f"[yellow]No nodes desire {app_name}.[/yellow]")
        return
    console.print(f"[green]{verb} {app_name} on {len(patched)} node(s):[/green]")
    for name in patched:
        console.print(f"  {name}")


def print_report(report: Report, *, as_json: bool = False) -> None:
    """Pretty-print a node report, one row per kind-key."""
    if as_json:
        console.print_json(report.model_dump_json())
        return

    table = Table(title="Node Report")
    table.add_column("Kind", style="cyan")
    table.add_column("Value")
    for key, value in report.items():
        table.add_row(key, _truncate(_summarise(value)))
    console.print(table)


def _summarise(value: Any) -> str:
    if isinstance(value, list) and value and all(isinstance(v, AppInfo) for v in value):
        return _format_infos(value)
    return _ANY.dump_json(value).decode()


def _format_infos(infos: list[AppInfo]) -> str:
    return ", ".join(f"{i.name}@{i.version}" for i in infos) or "-"


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
