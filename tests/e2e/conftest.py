"""Shared fixtures for end-to-end gateway tests.

The gateway runs with a real :class:`YandexMapsClient`; only the Yandex HTTP
APIs are replaced by an ``httpx.MockTransport``.
"""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from yandex_maps_mcp.config import Settings
from yandex_maps_mcp.maps.client import YandexMapsClient
from yandex_maps_mcp.protocol.dispatcher import RequestDispatcher

BERLIN_GEOCODER_RESPONSE: dict[str, Any] = {
    "response": {
        "GeoObjectCollection": {
            "featureMember": [
                {
                    "GeoObject": {
                        "metaDataProperty": {
                            "GeocoderMetaData": {
                                "kind": "locality",
                                "text": "Germany, Berlin",
                                "Address": {
                                    "country_code": "DE",
                                    "formatted": "Germany, Berlin",
                                    "Components": [
                                        {"kind": "country", "name": "Germany"},
                                        {"kind": "locality", "name": "Berlin"},
                                    ],
                                },
                            }
                        },
                        "name": "Berlin",
                        "Point": {"pos": "13.388860 52.517037"},
                    }
                }
            ]
        }
    }
}


@pytest.fixture
def yandex_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def dispatcher(yandex_requests: list[httpx.Request]) -> RequestDispatcher:
    def _handle(request: httpx.Request) -> httpx.Response:
        yandex_requests.append(request)
        if request.url.host == "geocode-maps.yandex.ru":
            return httpx.Response(200, json=BERLIN_GEOCODER_RESPONSE)
        return httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})

    settings = Settings(_env_file=None, api_key="geo-key", static_api_key="static-key")
    client = YandexMapsClient(settings)
    client._http = lambda: httpx.AsyncClient(transport=httpx.MockTransport(_handle))  # type: ignore[method-assign]
    return RequestDispatcher(client)
