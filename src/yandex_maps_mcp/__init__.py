"""Yandex Maps MCP server: geocoding and static maps for agents over stdio or HTTP."""

from __future__ import annotations

__version__ = "0.1.0"
