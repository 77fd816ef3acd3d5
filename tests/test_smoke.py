"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations


def test_import() -> None:
    import yandex_maps_mcp

    assert yandex_maps_mcp.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from yandex_maps_mcp.cli import main

    assert callable(main)


def test_public_imports() -> None:
    from yandex_maps_mcp.gateway import HttpBinding, SessionStore, StdioBinding
    from yandex_maps_mcp.maps import YandexMapsClient
    from yandex_maps_mcp.protocol import RequestDispatcher, ToolRegistry

    assert HttpBinding is not None
    assert SessionStore is not None
    assert StdioBinding is not None
    assert YandexMapsClient is not None
    assert RequestDispatcher is not None
    assert ToolRegistry is not None
