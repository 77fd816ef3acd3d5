"""Tool registry: the fixed catalog of Yandex Maps tools.

The catalog is built once at import time and never mutated, so any number of
concurrent readers can share it without locking.
"""

from __future__ import annotations

from collections.abc import Iterable

from yandex_maps_mcp.protocol.models import ToolDescriptor

_LANG_PROPERTY = {
    "type": "string",
    "description": "Language code, e.g. 'ru_RU', 'en_US'",
}

GEOCODE_TOOL = ToolDescriptor(
    name="maps_geocode",
    description="Convert an address into geographic coordinates using individual address components",
    input_schema={
        "type": "object",
        "properties": {
            "country": {"type": "string", "description": "The country name"},
            "state": {"type": "string", "description": "The state, region or province name"},
            "city": {"type": "string", "description": "The city or locality name"},
            "district": {
                "type": "string",
                "description": "The district or neighborhood within the city",
            },
            "street": {"type": "string", "description": "The street name"},
            "house_number": {"type": "string", "description": "The house or building number"},
            "lang": _LANG_PROPERTY,
        },
        "required": ["country", "lang"],
    },
)

REVERSE_GEOCODE_TOOL = ToolDescriptor(
    name="maps_reverse_geocode",
    description="Convert coordinates into an address",
    input_schema={
        "type": "object",
        "properties": {
            "latitude": {"type": "number", "description": "Latitude coordinate"},
            "longitude": {"type": "number", "description": "Longitude coordinate"},
            "lang": _LANG_PROPERTY,
        },
        "required": ["latitude", "longitude", "lang"],
    },
)

RENDER_MAP_TOOL = ToolDescriptor(
    name="maps_render",
    description="Render a map as a png image",
    input_schema={
        "type": "object",
        "properties": {
            "latitude": {"type": "number", "description": "Latitude coordinate of map center"},
            "longitude": {"type": "number", "description": "Longitude coordinate of map center"},
            "latitude_span": {"type": "number", "description": "Height of map image in degrees"},
            "longitude_span": {"type": "number", "description": "Width of map image in degrees"},
            "lang": _LANG_PROPERTY,
            "placemarks": {
                "type": "array",
                "description": "Array of placemarks to display on the map",
                "items": {
                    "type": "object",
                    "properties": {
                        "latitude": {
                            "type": "number",
                            "description": "Latitude coordinate of the placemark",
                        },
                        "longitude": {
                            "type": "number",
                            "description": "Longitude coordinate of the placemark",
                        },
                    },
                    "required": ["latitude", "longitude"],
                },
            },
        },
        "required": ["latitude", "longitude", "latitude_span", "longitude_span", "lang"],
    },
)

MAPS_TOOLS: tuple[ToolDescriptor, ...] = (GEOCODE_TOOL, REVERSE_GEOCODE_TOOL, RENDER_MAP_TOOL)


class ToolRegistry:
    """Immutable, ordered catalog of :class:`ToolDescriptor` objects.

    Usage::

        registry = ToolRegistry()
        [tool.name for tool in registry.list_tools()]
        # ['maps_geocode', 'maps_reverse_geocode', 'maps_render']
    """

    def __init__(self, tools: Iterable[ToolDescriptor] = MAPS_TOOLS) -> None:
        self._tools: tuple[ToolDescriptor, ...] = tuple(tools)
        self._by_name: dict[str, ToolDescriptor] = {}
        for tool in self._tools:
            if tool.name in self._by_name:
                msg = f"Duplicate tool name: {tool.name}"
                raise ValueError(msg)
            self._by_name[tool.name] = tool

    def list_tools(self) -> list[ToolDescriptor]:
        """Return the full catalog in its fixed order."""
        return list(self._tools)

    def get(self, name: str) -> ToolDescriptor | None:
        return self._by_name.get(name)

    def names(self) -> list[str]:
        return [tool.name for tool in self._tools]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._tools)
