"""``yandex-maps-mcp serve`` — run the gateway on stdio or HTTP."""

from __future__ import annotations

import asyncio
import sys

import click
from pydantic import ValidationError

from yandex_maps_mcp.cli_commands._output import err_console
from yandex_maps_mcp.protocol.errors import ConfigurationError


@click.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "http", "sse"]),
    default=None,
    help="Transport binding; 'sse' is an alias of 'http'. Defaults to $MODE or stdio.",
)
@click.option("--host", default=None, help="HTTP bind address. Defaults to $HOST or 0.0.0.0.")
@click.option("--port", type=int, default=None, help="HTTP port. Defaults to $PORT or 3000.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Log level. Defaults to $LOG_LEVEL or INFO.",
)
@click.option("--telemetry", is_flag=True, help="Print trace spans to stderr.")
def serve(
    transport: str | None,
    host: str | None,
    port: int | None,
    log_level: str | None,
    telemetry: bool,
) -> None:
    """Serve the Yandex Maps tools until stdin closes or the server stops."""
    from yandex_maps_mcp.config import Settings
    from yandex_maps_mcp.maps.client import YandexMapsClient
    from yandex_maps_mcp.protocol.dispatcher import RequestDispatcher
    from yandex_maps_mcp.utils.logging import configure_logging

    overrides = {
        "mode": transport,
        "host": host,
        "port": port,
        "log_level": log_level,
    }
    try:
        settings = Settings(**{key: value for key, value in overrides.items() if value is not None})
        settings.require_api_keys()
    except (ValidationError, ConfigurationError) as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    configure_logging(settings.log_level)

    if telemetry or settings.otlp_endpoint:
        from yandex_maps_mcp.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(export_to_console=telemetry, otlp_endpoint=settings.otlp_endpoint)
        except ImportError as exc:
            err_console.print(f"[yellow]Telemetry disabled:[/yellow] {exc}")

    dispatcher = RequestDispatcher(YandexMapsClient(settings))

    try:
        if settings.mode == "stdio":
            from yandex_maps_mcp.gateway.stdio import StdioBinding

            asyncio.run(StdioBinding(dispatcher).serve())
        else:
            from yandex_maps_mcp.gateway.http import HttpBinding

            asyncio.run(HttpBinding(dispatcher).serve(settings.host, settings.port, settings.log_level))
    except KeyboardInterrupt:
        err_console.print("Interrupted.")
