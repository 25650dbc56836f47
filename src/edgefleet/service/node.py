"""NodeService — node lifecycle, desire reconciliation and report merging.

Each node is backed by two independently fallible resources: its metadata
in the :class:`~edgefleet.backends.protocols.NodeStore` and its live twin
in the :class:`~edgefleet.backends.protocols.ShadowStore`.  Nodes handed
back to callers always carry the shadow's desire and report once a shadow
exists.

Create and Update recompute the node's full desire from the application
catalog and push it with the shadow store's atomic ``update_desire``.
Neither operation rolls back the metadata write when a later step fails.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from pydantic import ValidationError

from edgefleet.core.composer import compose
from edgefleet.core.models import ListOptions, Node, NodeList, Report, Shadow
from edgefleet.errors import (
    FleetError,
    IndexRefreshError,
    InvalidReportError,
    NodeNotFoundError,
)
from edgefleet.service.guards import index_errors, storage_errors
from edgefleet.utils.telemetry import (
    ATTR_MATCHED_APPS,
    ATTR_NAMESPACE,
    ATTR_NODE,
    get_tracer,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from edgefleet.backends.protocols import IndexService, NodeStore, ShadowStore
    from edgefleet.core.matcher import SelectorMatcher
    from edgefleet.core.models import Desire

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class NodeService:
    """Orchestrates node metadata, shadows and the application index.

    Usage::

        service = NodeService(node_store, shadow_store, index, matcher)
        node = await service.create("default", Node(name="gw-01", labels={"env": "dev"}))
    """

    def __init__(
        self,
        nodes: NodeStore,
        shadows: ShadowStore,
        index: IndexService,
        matcher: SelectorMatcher,
    ) -> None:
        self._nodes = nodes
        self._shadows = shadows
        self._index = index
        self._matcher = matcher

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, namespace: str, name: str) -> Node:
        """Return the node with its shadow's desire/report overlaid.

        A missing shadow is treated as an empty twin, so the node comes back
        with an empty desire and report.  A missing node raises
        :class:`NodeNotFoundError`.
        """
        with storage_errors("shadow.get"):
            shadow = await self._shadows.get(namespace, name)
        node = await self._get_node(namespace, name)
        return node.with_shadow(shadow or Shadow(namespace=namespace, name=name))

    async def list(self, namespace: str, options: ListOptions | None = None) -> NodeList:
        """List nodes, overlaying each with the shadow of the same name."""
        with storage_errors("node.list"):
            nodes = await self._nodes.list_node(namespace, options or ListOptions())
        with storage_errors("shadow.list"):
            shadows = await self._shadows.list(namespace, ListOptions())

        by_name = {shadow.name: shadow for shadow in shadows.items}
        return NodeList(
            items=[node.with_shadow(by_name.get(node.name)) for node in nodes.items],
            total=nodes.total,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create(self, namespace: str, node: Node) -> Node:
        """Register *node*, provision its shadow and assign matching applications."""
        with _tracer.start_as_current_span("node.create") as span:
            span.set_attribute(ATTR_NAMESPACE, namespace)
            span.set_attribute(ATTR_NODE, node.name)

            with storage_errors("node.create"):
                created = await self._nodes.create_node(namespace, node)

            with storage_errors("shadow.get"):
                shadow = await self._shadows.get(namespace, created.name)
            if shadow is None:
                seed = Shadow.from_node(created)
                seed.namespace = namespace
                with storage_errors("shadow.create"):
                    shadow = await self._shadows.create(seed)
            else:
                logger.debug("Reusing existing shadow for %s/%s", namespace, created.name)

            return await self._reconcile(namespace, created, shadow)

    async def update(self, namespace: str, node: Node) -> Node:
        """Persist *node* and recompute its desire from the current catalog."""
        with _tracer.start_as_current_span("node.update") as span:
            span.set_attribute(ATTR_NAMESPACE, namespace)
            span.set_attribute(ATTR_NODE, node.name)

            with storage_errors("node.update"):
                updated = await self._nodes.update_node(namespace, node)
            return await self._reconcile(namespace, updated)

    async def delete(self, namespace: str, name: str) -> None:
        """Remove the node's shadow, metadata and index membership.

        Only the metadata deletion is fatal.  Shadow deletion and the index
        refresh are best-effort; their failures are logged.
        """
        with _tracer.start_as_current_span("node.delete") as span:
            span.set_attribute(ATTR_NAMESPACE, namespace)
            span.set_attribute(ATTR_NODE, name)

            try:
                with storage_errors("shadow.delete"):
                    await self._shadows.delete(namespace, name)
            except FleetError as exc:
                logger.warning("Failed to delete shadow of %s/%s: %s", namespace, name, exc)

            with storage_errors("node.delete"):
                await self._nodes.delete_node(namespace, name)

            try:
                await self._refresh_index(namespace, name, [])
            except IndexRefreshError as exc:
                logger.warning("Stale index entries left for deleted node %s/%s: %s", namespace, name, exc)

    # ------------------------------------------------------------------
    # Shadow field updates
    # ------------------------------------------------------------------

    async def update_desire(self, namespace: str, name: str, desire: Desire) -> Shadow:
        """Overlay *desire*'s keys onto the node's shadow desire.

        Keys not present in *desire* are preserved.  A missing shadow is
        created with *desire* as its initial desire.
        """
        return await self._apply_desire(namespace, name, desire)

    async def update_report(
        self, namespace: str, name: str, report: Report | Mapping[str, Any]
    ) -> Shadow:
        """Merge an incoming node report into the node's shadow.

        The node must be registered.  A missing shadow is provisioned from
        the node first, so the first report merges into an empty report.

        Raises:
            InvalidReportError: A known report kind carries a malformed payload.
        """
        with _tracer.start_as_current_span("node.update_report") as span:
            span.set_attribute(ATTR_NAMESPACE, namespace)
            span.set_attribute(ATTR_NODE, name)

            node = await self._get_node(namespace, name)

            with storage_errors("shadow.get"):
                shadow = await self._shadows.get(namespace, name)
            if shadow is None:
                seed = Shadow.from_node(node)
                seed.namespace = namespace
                with storage_errors("shadow.create"):
                    shadow = await self._shadows.create(seed)

            target = shadow.model_copy(deep=True)
            try:
                target.report.merge(report)
            except ValidationError as exc:
                raise InvalidReportError(namespace, name, str(exc)) from exc
            with storage_errors("shadow.update_report"):
                return await self._shadows.update_report(target)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _get_node(self, namespace: str, name: str) -> Node:
        with storage_errors("node.get"):
            node = await self._nodes.get_node(namespace, name)
        if node is None:
            raise NodeNotFoundError(namespace, name)
        return node

    async def _reconcile(self, namespace: str, node: Node, shadow: Shadow | None = None) -> Node:
        """Compose the node's desire, push it and refresh the index."""
        with storage_errors("application.list"):
            apps = await self._nodes.list_application(namespace, ListOptions())

        desire, matched = compose(apps.items, node.labels, self._matcher)
        shadow = await self._apply_desire(namespace, node.name, desire, shadow)
        await self._refresh_index(namespace, node.name, matched)

        trace.get_current_span().set_attribute(ATTR_MATCHED_APPS, matched)
        return node.with_shadow(shadow)

    async def _apply_desire(
        self,
        namespace: str,
        name: str,
        desire: Desire,
        shadow: Shadow | None = None,
    ) -> Shadow:
        if shadow is None:
            with storage_errors("shadow.get"):
                shadow = await self._shadows.get(namespace, name)
        if shadow is None:
            seed = Shadow(namespace=namespace, name=name, desire=desire.model_copy(deep=True))
            with storage_errors("shadow.create"):
                return await self._shadows.create(seed)

        target = shadow.model_copy(deep=True)
        for key, value in desire.items():
            target.desire[key] = value
        with storage_errors("shadow.update_desire"):
            return await self._shadows.update_desire(target)

    async def _refresh_index(self, namespace: str, name: str, app_names: list[str]) -> None:
        with index_errors(namespace, name):
            await self._index.refresh_apps_index_by_node(namespace, name, app_names)
