"""Service layer — node lifecycle orchestration and version propagation."""

from edgefleet.service.node import NodeService
from edgefleet.service.propagation import AppVersionPropagator

__all__ = [
    "AppVersionPropagator",
    "NodeService",
]
