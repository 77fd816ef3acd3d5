"""``yandex-maps-mcp tools`` — show the tool catalog."""

from __future__ import annotations

import click

from yandex_maps_mcp.cli_commands._output import print_tools_json, print_tools_table


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the catalog as tools/list JSON.")
def tools(as_json: bool) -> None:
    """List the tools this server exposes."""
    from yandex_maps_mcp.protocol.registry import ToolRegistry

    catalog = ToolRegistry().list_tools()
    if as_json:
        print_tools_json(catalog)
    else:
        print_tools_table(catalog)
