"""Shared error types for the fleet control plane.

Every error raised by :mod:`edgefleet` derives from :class:`FleetError` so
callers can catch the whole family with a single ``except`` clause.
"""

from __future__ import annotations


class FleetError(Exception):
    """Base error for all control-plane failures."""


class NodeNotFoundError(FleetError):
    """A node required by the operation is not registered."""

    def __init__(self, namespace: str, name: str) -> None:
        self.namespace = namespace
        self.name = name
        super().__init__(f"Node not found: {namespace}/{name}")


class StorageError(FleetError):
    """A metadata or shadow store operation failed."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage operation failed: {operation}" + (f": {detail}" if detail else ""))


class ShadowConflictError(StorageError):
    """A conditional shadow write lost against a concurrent writer."""

    def __init__(self, namespace: str, name: str) -> None:
        self.namespace = namespace
        self.name = name
        super().__init__("shadow.update", f"resource version conflict on {namespace}/{name}")


class MatchEvaluationError(FleetError):
    """The selector matcher could not evaluate an expression."""

    def __init__(self, selector: str, detail: str = "") -> None:
        self.selector = selector
        self.detail = detail
        msg = f"Selector evaluation failed: {selector!r}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class SelectorSyntaxError(MatchEvaluationError):
    """The selector expression is malformed."""


class IndexRefreshError(FleetError):
    """The application index could not be refreshed for a node."""

    def __init__(self, namespace: str, node: str, detail: str = "") -> None:
        self.namespace = namespace
        self.node = node
        self.detail = detail
        super().__init__(
            f"Index refresh failed for node {namespace}/{node}" + (f": {detail}" if detail else "")
        )


class PropagationError(FleetError):
    """A fleet-wide version propagation aborted part-way.

    ``patched`` lists the nodes that were already updated before the
    failure; those patches are kept.  The underlying error is available as
    ``__cause__``.
    """

    def __init__(self, app: str, node: str, patched: list[str] | None = None) -> None:
        self.app = app
        self.node = node
        self.patched = list(patched or [])
        super().__init__(
            f"Propagation of {app} aborted at node {node} "
            f"({len(self.patched)} node(s) already patched)"
        )


class InvalidReportError(FleetError):
    """A node report carries a malformed payload for a known kind-key."""

    def __init__(self, namespace: str, node: str, detail: str = "") -> None:
        self.namespace = namespace
        self.node = node
        self.detail = detail
        super().__init__(
            f"Invalid report from node {namespace}/{node}" + (f": {detail}" if detail else "")
        )
