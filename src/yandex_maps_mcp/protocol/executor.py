"""MapsToolExecutor protocol: the contract of the tool execution collaborator.

The dispatcher resolves a tool name to one of these operations and awaits it
without knowing how the operation is implemented. Arguments arrive exactly as
the client sent them; validating them is the executor's job.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from yandex_maps_mcp.protocol.models import CallToolResult


@runtime_checkable
class MapsToolExecutor(Protocol):
    """Executes the three Yandex Maps tools.

    Every operation returns a :class:`CallToolResult`. Failures (no results,
    upstream outage, invalid arguments) come back as ``is_error=True``
    results; an operation never raises past its own boundary.
    """

    async def geocode(self, arguments: dict[str, Any]) -> CallToolResult:
        """Resolve address components to coordinates (``maps_geocode``)."""
        ...

    async def reverse_geocode(self, arguments: dict[str, Any]) -> CallToolResult:
        """Resolve coordinates to an address (``maps_reverse_geocode``)."""
        ...

    async def render_map(self, arguments: dict[str, Any]) -> CallToolResult:
        """Render a static map image (``maps_render``)."""
        ...
