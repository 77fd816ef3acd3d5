"""YandexMapsClient: executes the maps tools against the Yandex HTTP APIs.

Satisfies :class:`~yandex_maps_mcp.protocol.executor.MapsToolExecutor`.
Every failure is returned as an ``is_error`` result so that an agent can
read the explanation; nothing raises past this module.
"""

from __future__ import annotations

import base64
import functools
import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from yandex_maps_mcp.maps.models import (
    GeocodeArguments,
    GeocodeResponse,
    RenderMapArguments,
    ReverseGeocodeArguments,
)
from yandex_maps_mcp.protocol.models import CallToolResult, ImageContent

if TYPE_CHECKING:
    from yandex_maps_mcp.config import Settings

logger = logging.getLogger(__name__)

_Operation = Callable[["YandexMapsClient", dict[str, Any]], Awaitable[CallToolResult]]


def _reports_errors(prefix: str) -> Callable[[_Operation], _Operation]:
    """Convert anything an operation raises into an ``is_error`` result."""

    def decorator(func: _Operation) -> _Operation:
        @functools.wraps(func)
        async def wrapper(self: YandexMapsClient, arguments: dict[str, Any]) -> CallToolResult:
            try:
                return await func(self, arguments)
            except Exception as exc:
                logger.exception("%s: unexpected failure", prefix)
                return CallToolResult.error(f"{prefix}: {exc}")

        return wrapper

    return decorator


class YandexMapsClient:
    """Calls the Yandex Geocoder and Static Maps APIs.

    Usage::

        client = YandexMapsClient(Settings())
        result = await client.geocode({"country": "Germany", "city": "Berlin", "lang": "en_US"})
        result.is_error, result.text
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    @_reports_errors("Geocoding failed")
    async def geocode(self, arguments: dict[str, Any]) -> CallToolResult:
        """Resolve address components to coordinates."""
        try:
            args = GeocodeArguments.model_validate(arguments)
        except ValidationError as exc:
            return _invalid_arguments("maps_geocode", exc)
        return await self._geocode(args.address(), args.lang, failure="Geocoding failed")

    @_reports_errors("Reverse geocoding failed")
    async def reverse_geocode(self, arguments: dict[str, Any]) -> CallToolResult:
        """Resolve coordinates to the nearest address."""
        try:
            args = ReverseGeocodeArguments.model_validate(arguments)
        except ValidationError as exc:
            return _invalid_arguments("maps_reverse_geocode", exc)
        query = f"{_coord(args.longitude)},{_coord(args.latitude)}"
        return await self._geocode(query, args.lang, failure="Reverse geocoding failed")

    @_reports_errors("Error rendering map")
    async def render_map(self, arguments: dict[str, Any]) -> CallToolResult:
        """Fetch a static map image centred on the given point."""
        try:
            args = RenderMapArguments.model_validate(arguments)
        except ValidationError as exc:
            return _invalid_arguments("maps_render", exc)
        if not self._settings.static_api_key:
            return CallToolResult.error(
                "Error rendering map: YANDEX_MAPS_STATIC_API_KEY is not configured"
            )

        params = {
            "ll": f"{_coord(args.longitude)},{_coord(args.latitude)}",
            "spn": f"{_coord(args.longitude_span)},{_coord(args.latitude_span)}",
            "l": "map",
            "lang": args.lang,
            "apikey": self._settings.static_api_key,
        }
        if args.placemarks:
            params["pt"] = "~".join(
                f"{_coord(mark.longitude)},{_coord(mark.latitude)},pm2rdm"
                for mark in args.placemarks
            )

        try:
            async with self._http() as client:
                response = await client.get(self._settings.static_url, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Static map request failed: %s", exc)
            return CallToolResult.error(f"Error rendering map: {exc}")

        if not response.is_success:
            logger.warning("Static map request returned HTTP %s", response.status_code)
            return CallToolResult.error(
                f"Failed to fetch map image: {response.status_code} "
                f"{response.reason_phrase}\n{response.text}"
            )

        mime_type = response.headers.get("content-type") or "image/png"
        data = base64.b64encode(response.content).decode("ascii")
        return CallToolResult(content=[ImageContent(data=data, mime_type=mime_type)])

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._settings.request_timeout, follow_redirects=True)

    async def _geocode(self, query: str, lang: str, *, failure: str) -> CallToolResult:
        """Run one Geocoder query and summarise the first match."""
        if not self._settings.api_key:
            return CallToolResult.error(f"{failure}: YANDEX_MAPS_API_KEY is not configured")

        params = {
            "geocode": query,
            "format": "json",
            "results": "1",
            "lang": lang,
            "apikey": self._settings.api_key,
        }
        try:
            async with self._http() as client:
                response = await client.get(self._settings.geocoder_url, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Geocoder request failed: %s", exc)
            return CallToolResult.error(f"{failure}: {exc}")

        try:
            payload = response.json()
        except ValueError:
            return CallToolResult.error(
                f"{failure}: unexpected response (HTTP {response.status_code})"
            )

        if isinstance(payload, dict) and "error" in payload:
            message = payload.get("message") or "Unknown error"
            logger.warning("Geocoder returned an error: %s", message)
            return CallToolResult.error(f"{failure}: {message}")

        geo_object = GeocodeResponse.model_validate(payload).first()
        if geo_object is None:
            return CallToolResult.error(f"{failure}: No results found")

        return CallToolResult.from_text(
            json.dumps(geo_object.summary(), indent=2, ensure_ascii=False)
        )


def _coord(value: float) -> str:
    """Render a coordinate without a trailing ``.0`` for whole numbers."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _invalid_arguments(tool: str, exc: ValidationError) -> CallToolResult:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return CallToolResult.error(f"Invalid arguments for {tool}: {details}")
