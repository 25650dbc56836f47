"""SDK error types."""

from __future__ import annotations

from edgefleet.errors import FleetError


class ManifestValidationError(FleetError):
    """Raised when a fleet manifest fails parsing or validation."""
