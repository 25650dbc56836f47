"""Pydantic models for the fleet manifest YAML consumed by the ``edgefleet`` CLI."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from edgefleet.core.models import Application, Node


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class FleetManifest(BaseModel):
    """A namespace's application catalog and registered nodes."""

    version: str = "1"
    namespace: str = "default"
    applications: list[Application] = Field(default_factory=list)
    nodes: list[Node] = Field(default_factory=list)
    telemetry: TelemetrySettings | None = None

    @model_validator(mode="after")
    def _validate_entries(self) -> FleetManifest:
        for kind, names in (
            ("application", [a.name for a in self.applications]),
            ("node", [n.name for n in self.nodes]),
        ):
            seen: set[str] = set()
            for name in names:
                if name in seen:
                    msg = f"duplicate {kind} '{name}'"
                    raise ValueError(msg)
                seen.add(name)

        for app in self.applications:
            app.namespace = app.namespace or self.namespace
            if app.namespace != self.namespace:
                msg = f"application '{app.name}' is not in namespace '{self.namespace}'"
                raise ValueError(msg)
        for node in self.nodes:
            node.namespace = node.namespace or self.namespace
            if node.namespace != self.namespace:
                msg = f"node '{node.name}' is not in namespace '{self.namespace}'"
                raise ValueError(msg)
        return self
