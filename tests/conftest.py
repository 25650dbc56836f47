"""Shared fixtures: mock collaborators for the service layer."""

from __future__ import annotations

from dataclasses import dataclass
from unittest.mock import AsyncMock, MagicMock

import pytest

from edgefleet.core.models import (
    DESIRED_SYS_APPLICATIONS,
    AppInfo,
    ApplicationList,
    Desire,
    Node,
    NodeList,
    Shadow,
    ShadowList,
)


@dataclass
class Collaborators:
    nodes: AsyncMock
    shadows: AsyncMock
    index: AsyncMock
    matcher: MagicMock


def make_node(name: str = "abc", namespace: str = "default", **labels: str) -> Node:
    return Node(
        namespace=namespace,
        name=name,
        labels=labels or {"test": "example"},
        desire=Desire(
            {DESIRED_SYS_APPLICATIONS: [AppInfo(name=f"baetyl-core-{name}", version="123")]}
        ),
    )


def make_shadow(name: str = "node01", namespace: str = "default") -> Shadow:
    return Shadow(
        namespace=namespace,
        name=name,
        desire=Desire(
            {DESIRED_SYS_APPLICATIONS: [AppInfo(name=f"baetyl-core-{name}", version="123")]}
        ),
        resource_version="1",
    )


@pytest.fixture
def collaborators() -> Collaborators:
    """Store, index and matcher doubles with benign defaults.

    Write operations echo their argument back, reads find nothing.
    """
    nodes = AsyncMock()
    nodes.get_node.return_value = None
    nodes.list_node.return_value = NodeList()
    nodes.create_node.side_effect = lambda ns, node: node
    nodes.update_node.side_effect = lambda ns, node: node
    nodes.delete_node.return_value = None
    nodes.list_application.return_value = ApplicationList()

    shadows = AsyncMock()
    shadows.get.return_value = None
    shadows.list.return_value = ShadowList()
    shadows.create.side_effect = lambda shadow: shadow
    shadows.delete.return_value = None
    shadows.update_desire.side_effect = lambda shadow: shadow
    shadows.update_report.side_effect = lambda shadow: shadow

    index = AsyncMock()
    index.refresh_apps_index_by_node.return_value = None

    matcher = MagicMock()
    matcher.is_label_match.return_value = True

    return Collaborators(nodes=nodes, shadows=shadows, index=index, matcher=matcher)


@pytest.fixture
def node() -> Node:
    return make_node()


@pytest.fixture
def shadow() -> Shadow:
    return make_shadow()
