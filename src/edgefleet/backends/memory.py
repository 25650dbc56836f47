"""Dict-backed implementations of the persistence protocols.

Resources are stored as serialised JSON so that every read returns a
fresh, independent copy, mimicking a real persistence layer.  Suitable
for tests, the CLI and single-process deployments.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from edgefleet.backends.selector import LabelSelectorMatcher
from edgefleet.core.models import (
    Application,
    ApplicationList,
    ListOptions,
    Node,
    NodeList,
    Shadow,
    ShadowList,
)
from edgefleet.errors import NodeNotFoundError, ShadowConflictError, StorageError

if TYPE_CHECKING:
    from edgefleet.core.matcher import SelectorMatcher

_T = TypeVar("_T")

_Key = tuple[str, str]


def _page(items: list[_T], options: ListOptions) -> list[_T]:
    if options.page_size <= 0:
        return items
    start = max(options.page_no - 1, 0) * options.page_size
    return items[start : start + options.page_size]


class InMemoryNodeStore:
    """Dict-backed :class:`~edgefleet.backends.protocols.NodeStore`.

    *matcher* evaluates ``ListOptions.label_selector`` filters; it defaults
    to :class:`~edgefleet.backends.selector.LabelSelectorMatcher`.
    """

    def __init__(self, matcher: SelectorMatcher | None = None) -> None:
        self._matcher = matcher or LabelSelectorMatcher()
        self._nodes: dict[_Key, str] = {}
        self._apps: dict[_Key, str] = {}

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    async def get_node(self, namespace: str, name: str) -> Node | None:
        data = self._nodes.get((namespace, name))
        if data is None:
            return None
        return Node.model_validate_json(data)

    async def list_node(self, namespace: str, options: ListOptions) -> NodeList:
        nodes = [
            Node.model_validate_json(data)
            for (ns, _), data in self._nodes.items()
            if ns == namespace
        ]
        nodes = [n for n in nodes if self._accepts(n.name, n.labels, options)]
        return NodeList(items=_page(nodes, options), total=len(nodes))

    async def create_node(self, namespace: str, node: Node) -> Node:
        key = (namespace, node.name)
        if key in self._nodes:
            raise StorageError("node.create", f"node {namespace}/{node.name} already exists")
        stored = node.model_copy(update={"namespace": namespace})
        self._nodes[key] = stored.model_dump_json()
        return Node.model_validate_json(self._nodes[key])

    async def update_node(self, namespace: str, node: Node) -> Node:
        key = (namespace, node.name)
        if key not in self._nodes:
            raise NodeNotFoundError(namespace, node.name)
        stored = node.model_copy(update={"namespace": namespace})
        self._nodes[key] = stored.model_dump_json()
        return Node.model_validate_json(self._nodes[key])

    async def delete_node(self, namespace: str, name: str) -> None:
        if self._nodes.pop((namespace, name), None) is None:
            raise NodeNotFoundError(namespace, name)

    # ------------------------------------------------------------------
    # Application catalog
    # ------------------------------------------------------------------

    async def put_application(self, app: Application) -> Application:
        """Insert or replace a catalog entry (upsert semantics)."""
        self._apps[(app.namespace, app.name)] = app.model_dump_json()
        return app.model_copy(deep=True)

    async def delete_application(self, namespace: str, name: str) -> None:
        """Remove a catalog entry (no-op if absent)."""
        self._apps.pop((namespace, name), None)

    async def list_application(self, namespace: str, options: ListOptions) -> ApplicationList:
        apps = [
            Application.model_validate_json(data)
            for (ns, _), data in self._apps.items()
            if ns == namespace
        ]
        apps = [a for a in apps if self._accepts(a.name, a.labels, options)]
        return ApplicationList(items=_page(apps, options), total=len(apps))

    def _accepts(self, name: str, labels: dict[str, str], options: ListOptions) -> bool:
        if options.name_contains and options.name_contains not in name:
            return False
        if options.label_selector:
            return self._matcher.is_label_match(options.label_selector, labels)
        return True


class InMemoryShadowStore:
    """Dict-backed :class:`~edgefleet.backends.protocols.ShadowStore`.

    Every write bumps the shadow's ``resource_version``.  Field updates
    carrying a non-empty ``resource_version`` are compare-and-swap: a stale
    token raises :class:`~edgefleet.errors.ShadowConflictError`.
    """

    def __init__(self) -> None:
        self._shadows: dict[_Key, str] = {}

    async def get(self, namespace: str, name: str) -> Shadow | None:
        data = self._shadows.get((namespace, name))
        if data is None:
            return None
        return Shadow.model_validate_json(data)

    async def create(self, shadow: Shadow) -> Shadow:
        key = (shadow.namespace, shadow.name)
        if key in self._shadows:
            raise StorageError(
                "shadow.create", f"shadow {shadow.namespace}/{shadow.name} already exists"
            )
        return self._store(shadow.model_copy(update={"resource_version": "1"}))

    async def delete(self, namespace: str, name: str) -> None:
        self._shadows.pop((namespace, name), None)

    async def list(self, namespace: str, options: ListOptions) -> ShadowList:
        shadows = [
            Shadow.model_validate_json(data)
            for (ns, _), data in self._shadows.items()
            if ns == namespace
        ]
        if options.name_contains:
            shadows = [s for s in shadows if options.name_contains in s.name]
        return ShadowList(items=_page(shadows, options), total=len(shadows))

    async def update_desire(self, shadow: Shadow) -> Shadow:
        current = self._current(shadow, "shadow.update_desire")
        current.desire = shadow.desire.model_copy(deep=True)
        return self._bump(current)

    async def update_report(self, shadow: Shadow) -> Shadow:
        current = self._current(shadow, "shadow.update_report")
        current.report = shadow.report.model_copy(deep=True)
        return self._bump(current)

    def _current(self, shadow: Shadow, operation: str) -> Shadow:
        data = self._shadows.get((shadow.namespace, shadow.name))
        if data is None:
            raise StorageError(operation, f"shadow {shadow.namespace}/{shadow.name} not found")
        current = Shadow.model_validate_json(data)
        if shadow.resource_version and shadow.resource_version != current.resource_version:
            raise ShadowConflictError(shadow.namespace, shadow.name)
        return current

    def _bump(self, shadow: Shadow) -> Shadow:
        shadow.resource_version = str(int(shadow.resource_version or "0") + 1)
        return self._store(shadow)

    def _store(self, shadow: Shadow) -> Shadow:
        data = shadow.model_dump_json()
        self._shadows[(shadow.namespace, shadow.name)] = data
        return Shadow.model_validate_json(data)


class InMemoryIndexService:
    """Dict-backed :class:`~edgefleet.backends.protocols.IndexService`."""

    def __init__(self) -> None:
        # namespace -> application name -> node names
        self._index: dict[str, dict[str, set[str]]] = {}

    async def refresh_apps_index_by_node(
        self, namespace: str, node_name: str, app_names: list[str]
    ) -> None:
        apps = self._index.setdefault(namespace, {})
        for app in list(apps):
            apps[app].discard(node_name)
            if not apps[app]:
                del apps[app]
        for app in app_names:
            apps.setdefault(app, set()).add(node_name)

    async def list_nodes_by_app(self, namespace: str, app_name: str) -> list[str]:
        """Return the nodes currently indexed as desiring *app_name*."""
        return sorted(self._index.get(namespace, {}).get(app_name, ()))

    async def list_apps_by_node(self, namespace: str, node_name: str) -> list[str]:
        """Return the applications currently indexed for *node_name*."""
        apps = self._index.get(namespace, {})
        return sorted(app for app, nodes in apps.items() if node_name in nodes)
