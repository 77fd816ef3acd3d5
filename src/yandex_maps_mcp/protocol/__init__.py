"""Protocol layer: JSON-RPC models, tool registry and request dispatch."""

from yandex_maps_mcp.protocol.dispatcher import RequestDispatcher
from yandex_maps_mcp.protocol.errors import (
    ChannelClosedError,
    ConfigurationError,
    DuplicateSessionIdError,
    GatewayError,
    MethodNotFoundError,
    ParseError,
    ProtocolError,
    RequestValidationError,
    SessionError,
    SessionNotFoundError,
)
from yandex_maps_mcp.protocol.executor import MapsToolExecutor
from yandex_maps_mcp.protocol.models import (
    CallToolResult,
    JsonRpcError,
    JsonRpcErrorResponse,
    JsonRpcRequest,
    JsonRpcResponse,
    JsonRpcSuccessResponse,
    ToolDescriptor,
)
from yandex_maps_mcp.protocol.registry import MAPS_TOOLS, ToolRegistry

__all__ = [
    "MAPS_TOOLS",
    "CallToolResult",
    "ChannelClosedError",
    "ConfigurationError",
    "DuplicateSessionIdError",
    "GatewayError",
    "JsonRpcError",
    "JsonRpcErrorResponse",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcSuccessResponse",
    "MapsToolExecutor",
    "MethodNotFoundError",
    "ParseError",
    "ProtocolError",
    "RequestDispatcher",
    "RequestValidationError",
    "SessionError",
    "SessionNotFoundError",
    "ToolDescriptor",
    "ToolRegistry",
]
