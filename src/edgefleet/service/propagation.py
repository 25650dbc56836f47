"""AppVersionPropagator — push one application's version change across the fleet.

Instead of recomposing every node's desire, the propagator patches the
single :class:`~edgefleet.core.models.AppInfo` entry of each shadow that
already lists the application.  Nodes are processed sequentially and the
run stops at the first failure; patches already applied are kept.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from edgefleet.core.composer import match_application
from edgefleet.core.models import AppInfo, ListOptions
from edgefleet.errors import FleetError, NodeNotFoundError, PropagationError
from edgefleet.service.guards import storage_errors
from edgefleet.utils.telemetry import (
    ATTR_APP,
    ATTR_APP_SYSTEM,
    ATTR_APP_VERSION,
    ATTR_NAMESPACE,
    ATTR_PATCHED_NODES,
    get_tracer,
)

if TYPE_CHECKING:
    from edgefleet.backends.protocols import NodeStore, ShadowStore
    from edgefleet.core.matcher import SelectorMatcher
    from edgefleet.core.models import Application, Shadow

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class AppVersionPropagator:
    """Incrementally patches shadow desires when an application changes.

    Applications without a selector are never tracked in any desire, so
    both operations are no-ops for them.
    """

    def __init__(
        self,
        nodes: NodeStore,
        shadows: ShadowStore,
        matcher: SelectorMatcher,
    ) -> None:
        self._nodes = nodes
        self._shadows = shadows
        self._matcher = matcher

    async def update_node_app_version(self, namespace: str, app: Application) -> list[str]:
        """Set *app*'s version on every node currently desiring it.

        A node is patched only if *app*'s selector still matches the node's
        current labels.  Returns the names of the patched nodes.

        Raises:
            PropagationError: On the first node that fails; chained to the
                underlying storage, lookup or match error.
        """
        with _tracer.start_as_current_span("fleet.propagate_version") as span:
            span.set_attribute(ATTR_NAMESPACE, namespace)
            span.set_attribute(ATTR_APP, app.name)
            span.set_attribute(ATTR_APP_VERSION, app.version)
            span.set_attribute(ATTR_APP_SYSTEM, app.is_system)
            patched = await self._propagate(namespace, app, remove=False)
            span.set_attribute(ATTR_PATCHED_NODES, patched)
            return patched

    async def delete_node_app_version(self, namespace: str, app: Application) -> list[str]:
        """Remove *app* from every node desire that lists it.

        Returns the names of the patched nodes.

        Raises:
            PropagationError: On the first node that fails.
        """
        with _tracer.start_as_current_span("fleet.delete_version") as span:
            span.set_attribute(ATTR_NAMESPACE, namespace)
            span.set_attribute(ATTR_APP, app.name)
            span.set_attribute(ATTR_APP_SYSTEM, app.is_system)
            patched = await self._propagate(namespace, app, remove=True)
            span.set_attribute(ATTR_PATCHED_NODES, patched)
            return patched

    async def _propagate(self, namespace: str, app: Application, *, remove: bool) -> list[str]:
        if not app.selector:
            logger.debug("Application %s has no selector; nothing to propagate", app.name)
            return []

        with storage_errors("shadow.list"):
            shadows = await self._shadows.list(namespace, ListOptions())

        patched: list[str] = []
        for shadow in shadows.items:
            try:
                if await self._patch(namespace, shadow, app, remove=remove):
                    patched.append(shadow.name)
            except FleetError as exc:
                raise PropagationError(app.name, shadow.name, patched) from exc
        return patched

    async def _patch(self, namespace: str, shadow: Shadow, app: Application, *, remove: bool) -> bool:
        """Patch a single shadow; return ``False`` if it was left untouched."""
        key = app.desire_key
        infos = shadow.desire.app_infos(key)
        index = next((i for i, info in enumerate(infos) if info.name == app.name), None)
        if index is None:
            return False

        if remove:
            del infos[index]
        else:
            if not await self._still_matches(namespace, shadow.name, app):
                logger.debug("Skipping %s: %s no longer matches its labels", shadow.name, app.name)
                return False
            infos[index] = AppInfo(name=app.name, version=app.version)

        target = shadow.model_copy(deep=True)
        target.desire.set_app_infos(key, infos)
        with storage_errors("shadow.update_desire"):
            await self._shadows.update_desire(target)

        logger.debug("Patched %s on %s/%s", app.name, namespace, shadow.name)
        return True

    async def _still_matches(self, namespace: str, name: str, app: Application) -> bool:
        with storage_errors("node.get"):
            node = await self._nodes.get_node(namespace, name)
        if node is None:
            raise NodeNotFoundError(namespace, name)
        return match_application(self._matcher, app, node.labels)
