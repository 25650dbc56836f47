"""edgefleet — desired-state reconciliation and version propagation for edge fleets."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from edgefleet.service.node import NodeService as NodeService
    from edgefleet.service.propagation import AppVersionPropagator as AppVersionPropagator

_SERVICE_EXPORTS = {
    "NodeService": "edgefleet.service.node",
    "AppVersionPropagator": "edgefleet.service.propagation",
}


def __getattr__(name: str) -> object:
    module_path = _SERVICE_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'edgefleet' has no attribute {name!r}")
