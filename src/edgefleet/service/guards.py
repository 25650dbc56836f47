"""Context managers translating collaborator failures into the fleet error taxonomy."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from edgefleet.errors import FleetError, IndexRefreshError, StorageError

if TYPE_CHECKING:
    from collections.abc import Iterator


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Wrap any non-fleet exception raised inside the block in :class:`StorageError`."""
    try:
        yield
    except FleetError:
        raise
    except Exception as exc:
        raise StorageError(operation, str(exc)) from exc


@contextmanager
def index_errors(namespace: str, node: str) -> Iterator[None]:
    """Wrap any exception raised inside the block in :class:`IndexRefreshError`."""
    try:
        yield
    except IndexRefreshError:
        raise
    except Exception as exc:
        raise IndexRefreshError(namespace, node, str(exc)) from exc
