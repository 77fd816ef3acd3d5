"""Transport bindings and session management."""

from yandex_maps_mcp.gateway.http import HttpBinding
from yandex_maps_mcp.gateway.session import Channel, QueueChannel, Session, SessionStore
from yandex_maps_mcp.gateway.stdio import StdioBinding, StreamChannel

__all__ = [
    "Channel",
    "HttpBinding",
    "QueueChannel",
    "Session",
    "SessionStore",
    "StdioBinding",
    "StreamChannel",
]
