"""Selector matching capability consumed by the composer and propagator."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SelectorMatcher(Protocol):
    """Evaluates a label selector expression against a node's labels."""

    def is_label_match(self, selector: str, labels: dict[str, str]) -> bool:
        """Return ``True`` if *labels* satisfy *selector*.

        Raises on a selector that cannot be evaluated.
        """
        ...
