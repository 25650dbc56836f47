"""Persistence protocols and in-memory backends."""

from edgefleet.backends.memory import InMemoryIndexService, InMemoryNodeStore, InMemoryShadowStore
from edgefleet.backends.protocols import IndexService, NodeStore, ShadowStore
from edgefleet.backends.selector import LabelSelectorMatcher, parse_selector

__all__ = [
    "InMemoryIndexService",
    "InMemoryNodeStore",
    "InMemoryShadowStore",
    "IndexService",
    "LabelSelectorMatcher",
    "NodeStore",
    "ShadowStore",
    "parse_selector",
]
