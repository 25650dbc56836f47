"""Fleet manifest loading and in-memory fleet bootstrap."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from edgefleet.backends.memory import InMemoryIndexService, InMemoryNodeStore, InMemoryShadowStore
from edgefleet.backends.selector import LabelSelectorMatcher
from edgefleet.core.models import Report
from edgefleet.sdk.errors import ManifestValidationError
from edgefleet.sdk.models import FleetManifest
from edgefleet.service.node import NodeService
from edgefleet.service.propagation import AppVersionPropagator

if TYPE_CHECKING:
    from pathlib import Path


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestValidationError(f"Cannot read {path}: {exc}") from exc

    expanded = os.path.expandvars(raw)

    try:
        data: Any = yaml.safe_load(expanded)
    except yaml.YAMLError as exc:
        raise ManifestValidationError(f"YAML parse error: {exc}") from exc

    if not isinstance(data, dict):
        raise ManifestValidationError(f"{path.name} must be a mapping")
    return data


class ManifestLoader:
    """Load and validate a fleet manifest YAML file into a :class:`FleetManifest`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> FleetManifest:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.

        Raises:
            ManifestValidationError: On read, YAML parse or schema validation failures.
        """
        data = _read_mapping(self._path)
        try:
            return FleetManifest.model_validate(data)
        except ValidationError as exc:
            raise ManifestValidationError(str(exc)) from exc


def load_report(path: Path) -> Report:
    """Load a node report from a YAML or JSON file."""
    data = _read_mapping(path)
    try:
        return Report.model_validate(data)
    except ValidationError as exc:
        raise ManifestValidationError(str(exc)) from exc


@dataclass
class Fleet:
    """An in-memory fleet wired from a manifest."""

    namespace: str
    node_store: InMemoryNodeStore
    shadow_store: InMemoryShadowStore
    index: InMemoryIndexService
    nodes: NodeService
    propagator: AppVersionPropagator


async def build_fleet(manifest: FleetManifest) -> Fleet:
    """Wire in-memory stores and services, then register the manifest's fleet.

    Applications are written to the catalog first so that every node's
    desire is composed against the full catalog on creation.
    """
    matcher = LabelSelectorMatcher()
    node_store = InMemoryNodeStore(matcher)
    shadow_store = InMemoryShadowStore()
    index = InMemoryIndexService()

    fleet = Fleet(
        namespace=manifest.namespace,
        node_store=node_store,
        shadow_store=shadow_store,
        index=index,
        nodes=NodeService(node_store, shadow_store, index, matcher),
        propagator=AppVersionPropagator(node_store, shadow_store, matcher),
    )

    for app in manifest.applications:
        await node_store.put_application(app)
    for node in manifest.nodes:
        await fleet.nodes.create(manifest.namespace, node)
    return fleet
