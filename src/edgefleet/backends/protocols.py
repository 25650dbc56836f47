"""Persistence protocols consumed by the node service.

:class:`NodeStore` holds node declarations and the application catalog,
:class:`ShadowStore` holds the live twins, and :class:`IndexService`
maintains the application-to-node membership index.

Stores return ``None`` for a missing single resource instead of raising.
Any other failure may be raised as-is; the service layer wraps it into
:class:`~edgefleet.errors.StorageError`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from edgefleet.core.models import (
        ApplicationList,
        ListOptions,
        Node,
        NodeList,
        Shadow,
        ShadowList,
    )


@runtime_checkable
class NodeStore(Protocol):
    """Node metadata and application catalog store."""

    async def get_node(self, namespace: str, name: str) -> Node | None: ...

    async def list_node(self, namespace: str, options: ListOptions) -> NodeList: ...

    async def create_node(self, namespace: str, node: Node) -> Node: ...

    async def update_node(self, namespace: str, node: Node) -> Node: ...

    async def delete_node(self, namespace: str, name: str) -> None: ...

    async def list_application(self, namespace: str, options: ListOptions) -> ApplicationList: ...


@runtime_checkable
class ShadowStore(Protocol):
    """Shadow store with atomic single-field updates.

    ``update_desire`` and ``update_report`` each replace exactly one field
    of the stored shadow keyed by ``(namespace, name)`` and return the
    post-update shadow.
    """

    async def get(self, namespace: str, name: str) -> Shadow | None: ...

    async def create(self, shadow: Shadow) -> Shadow: ...

    async def delete(self, namespace: str, name: str) -> None: ...

    async def list(self, namespace: str, options: ListOptions) -> ShadowList: ...

    async def update_desire(self, shadow: Shadow) -> Shadow: ...

    async def update_report(self, shadow: Shadow) -> Shadow: ...


@runtime_checkable
class IndexService(Protocol):
    """Inverted application -> node membership index."""

    async def refresh_apps_index_by_node(
        self, namespace: str, node_name: str, app_names: list[str]
    ) -> None:
        """Make *app_names* the exact set of applications indexed for the node.

        Idempotent for the same *app_names*.
        """
        ...
