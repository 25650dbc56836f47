"""Tracing for fleet operations.

Service operations open spans through :func:`get_tracer`; until
:func:`configure_telemetry` installs an SDK tracer provider those spans are
no-ops, so the library only needs ``opentelemetry-api`` at runtime.
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

# Span attribute keys set by NodeService and AppVersionPropagator
ATTR_NAMESPACE = "edgefleet.namespace"
ATTR_NODE = "edgefleet.node"
ATTR_APP = "edgefleet.app.name"
ATTR_APP_VERSION = "edgefleet.app.version"
ATTR_APP_SYSTEM = "edgefleet.app.system"
ATTR_MATCHED_APPS = "edgefleet.matched_apps"
ATTR_PATCHED_NODES = "edgefleet.patched_nodes"

_INSTRUMENTATION_NAME = "edgefleet"


def get_tracer(name: str | None = None) -> trace.Tracer:
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "edgefleet",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install a global tracer provider for the ``edgefleet`` CLI.

    Spans go to stdout when *export_to_console* is set and to an OTLP/gRPC
    collector when *otlp_endpoint* is given.

    Raises:
        ImportError: ``opentelemetry-sdk`` (or, for OTLP, the exporter) is
            not installed; both come with ``pip install edgefleet[otel]``.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = "opentelemetry-sdk is required for tracing; install edgefleet[otel]"
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    for processor in _span_processors(export_to_console, otlp_endpoint):
        provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


def _span_processors(export_to_console: bool, otlp_endpoint: str | None) -> list[Any]:
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    processors: list[Any] = []
    if export_to_console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter()))
    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            msg = "opentelemetry-exporter-otlp is required for OTLP export; install edgefleet[otel]"
            raise ImportError(msg) from exc
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    return processors
