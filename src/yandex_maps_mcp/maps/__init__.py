"""Yandex Maps tool execution: Geocoder and Static Maps API client."""

from yandex_maps_mcp.maps.client import YandexMapsClient
from yandex_maps_mcp.maps.models import (
    GeocodeArguments,
    Placemark,
    RenderMapArguments,
    ReverseGeocodeArguments,
)

__all__ = [
    "GeocodeArguments",
    "Placemark",
    "RenderMapArguments",
    "ReverseGeocodeArguments",
    "YandexMapsClient",
]
