"""edgefleet SDK — manifest-driven in-memory fleets."""

from edgefleet.sdk.errors import ManifestValidationError
from edgefleet.sdk.manifest import Fleet, ManifestLoader, build_fleet, load_report
from edgefleet.sdk.models import FleetManifest, TelemetrySettings

__all__ = [
    "Fleet",
    "FleetManifest",
    "ManifestLoader",
    "ManifestValidationError",
    "TelemetrySettings",
    "build_fleet",
    "load_report",
]
