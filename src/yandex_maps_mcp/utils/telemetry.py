"""OpenTelemetry tracing for the gateway.

The dispatcher and the HTTP binding take their tracer from :func:`get_tracer`
at import time. Until :func:`configure_telemetry` installs an SDK provider
(``yandex-maps-mcp serve --telemetry`` or ``OTEL_EXPORTER_OTLP_ENDPOINT``),
every span is a no-op and the ``otel`` extra is not needed.

Spans emitted:

- ``mcp.dispatch``: one per request, tagged with :data:`ATTR_METHOD`,
  :data:`ATTR_REQUEST_ID` and, on failure, :data:`ATTR_ERROR_CODE`;
- ``mcp.tool_call``: one per ``tools/call``, tagged with :data:`ATTR_TOOL_NAME`
  and :data:`ATTR_TOOL_IS_ERROR`;
- ``mcp.session.open``: one per HTTP session, tagged with
  :data:`ATTR_SESSION_ID` and :data:`ATTR_TRANSPORT`.
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace

# Span attribute keys
ATTR_METHOD = "mcp.method"
ATTR_REQUEST_ID = "mcp.request.id"
ATTR_ERROR_CODE = "mcp.error.code"
ATTR_TOOL_NAME = "mcp.tool.name"
ATTR_TOOL_IS_ERROR = "mcp.tool.is_error"
ATTR_SESSION_ID = "mcp.session.id"
ATTR_TRANSPORT = "mcp.transport"

_INSTRUMENTATION_NAME = "yandex_maps_mcp"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Tracer for *name*, defaulting to the package instrumentation scope."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "yandex-maps-mcp",
    export_to_console: bool = False,
    otlp_endpoint: str | None = None,
) -> None:
    """Install a tracer provider for the gateway (requires ``yandex-maps-mcp[otel]``).

    Spans are tagged with ``service.name`` and the package version as
    ``service.version``.

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    export_to_console:
        Print finished spans as JSON on stderr. Stdout is left alone because
        the stdio transport owns it.
    otlp_endpoint:
        If set, batch spans to this OTLP/gRPC collector.

    Raises
    ------
    ImportError
        If the ``opentelemetry-sdk`` package, or the OTLP exporter when
        *otlp_endpoint* is given, is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install yandex-maps-mcp[otel]"
        )
        raise ImportError(msg) from exc

    from yandex_maps_mcp import __version__

    processors = _span_processors(export_to_console=export_to_console, otlp_endpoint=otlp_endpoint)
    resource = Resource.create(  # pyright: ignore[reportUnknownVariableType,reportUnknownMemberType]
        {"service.name": service_name, "service.version": __version__}
    )
    provider = TracerProvider(resource=resource)  # pyright: ignore[reportUnknownVariableType]
    for processor in processors:
        provider.add_span_processor(processor)  # pyright: ignore[reportUnknownMemberType]

    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]


def _span_processors(*, export_to_console: bool, otlp_endpoint: str | None) -> list[Any]:
    """Build every requested span processor before the provider is installed."""
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    processors: list[Any] = []
    if export_to_console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))

    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        except ImportError as exc:
            msg = (
                "opentelemetry-exporter-otlp is required for OTLP export. "
                "Install it with: pip install yandex-maps-mcp[otel]"
            )
            raise ImportError(msg) from exc
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))

    return processors
