"""yandex-maps-mcp CLI entrypoint."""

from __future__ import annotations

import click

from yandex_maps_mcp import __version__

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="yandex-maps-mcp")
def main() -> None:
    """Yandex Maps MCP server: geocoding and static maps for agents.

    \b
    yandex-maps-mcp serve                  stdio, for a local MCP client
    yandex-maps-mcp serve --transport http  /mcp, /sse and /message on HTTP
    yandex-maps-mcp tools                  print the tool catalog
    """


# Register subcommands
from yandex_maps_mcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
