"""RequestDispatcher: turns decoded JSON-RPC messages into responses.

Stateless apart from its two collaborators, the :class:`ToolRegistry` and a
:class:`MapsToolExecutor`. Both transport bindings share one instance.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from yandex_maps_mcp import __version__
from yandex_maps_mcp.protocol.errors import (
    MethodNotFoundError,
    ParseError,
    ProtocolError,
    RequestValidationError,
)
from yandex_maps_mcp.protocol.models import (
    CallToolParams,
    CallToolResult,
    JsonRpcErrorResponse,
    JsonRpcRequest,
    JsonRpcResponse,
    JsonRpcSuccessResponse,
    RequestId,
)
from yandex_maps_mcp.protocol.registry import ToolRegistry
from yandex_maps_mcp.utils.telemetry import (
    ATTR_ERROR_CODE,
    ATTR_METHOD,
    ATTR_REQUEST_ID,
    ATTR_TOOL_IS_ERROR,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from yandex_maps_mcp.protocol.executor import MapsToolExecutor

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "mcp-server/yandex-maps"

ToolHandler = Callable[[dict[str, Any]], Awaitable[CallToolResult]]


class RequestDispatcher:
    """Routes ``initialize``, ``ping``, ``tools/list`` and ``tools/call``.

    Usage::

        dispatcher = RequestDispatcher(YandexMapsClient(settings))

        response = await dispatcher.dispatch("tools/list", {}, 1)
        response = await dispatcher.handle_raw(b'{"id": 2, "method": "ping"}')

    Tool failures stay in-band: an unknown tool name, a malformed
    ``tools/call`` payload or an exception raised by the executor all
    produce a *successful* response whose result has ``isError: true``.
    """

    def __init__(
        self,
        executor: MapsToolExecutor,
        registry: ToolRegistry | None = None,
    ) -> None:
        self._executor = executor
        self._registry = registry or ToolRegistry()
        self._tool_handlers: dict[str, ToolHandler] = {
            "maps_geocode": executor.geocode,
            "maps_reverse_geocode": executor.reverse_geocode,
            "maps_render": executor.render_map,
        }
        self._methods: dict[str, Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Parse boundary
    # ------------------------------------------------------------------

    @staticmethod
    def parse(body: bytes | str) -> JsonRpcRequest:
        """Decode and validate one JSON-RPC message.

        Raises:
            ParseError: If *body* is not valid JSON.
            RequestValidationError: If *body* is JSON but not a single
                request object.
        """
        try:
            raw = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(str(exc)) from exc

        if isinstance(raw, list):
            msg = "Batch requests are not supported"
            raise RequestValidationError(msg)
        if not isinstance(raw, dict):
            msg = f"Expected a JSON object, got {type(raw).__name__}"
            raise RequestValidationError(msg)

        try:
            return JsonRpcRequest.model_validate(raw)
        except ValidationError as exc:
            raw_id = raw.get("id")
            valid_id = isinstance(raw_id, int | str) and not isinstance(raw_id, bool)
            request_id = raw_id if valid_id else None
            raise RequestValidationError(_describe(exc), request_id=request_id) from exc

    async def handle_raw(self, body: bytes | str) -> JsonRpcResponse | None:
        """Parse *body* and dispatch it; ``None`` means no response is due."""
        try:
            message = self.parse(body)
        except ProtocolError as exc:
            logger.warning("Rejected inbound message: %s", exc)
            return JsonRpcErrorResponse.from_exception(exc, exc.request_id)
        return await self.handle_message(message)

    async def handle_message(self, message: JsonRpcRequest) -> JsonRpcResponse | None:
        """Dispatch a decoded message. Notifications get no response."""
        if message.is_notification:
            logger.debug("Notification received: %s", message.method)
            return None
        return await self.dispatch(message.method, message.params, message.id)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def dispatch(
        self,
        method: str,
        params: dict[str, Any] | None,
        request_id: RequestId | None,
    ) -> JsonRpcResponse:
        """Resolve *method* and build the response envelope."""
        with _tracer.start_as_current_span("mcp.dispatch") as span:
            span.set_attribute(ATTR_METHOD, method)
            if request_id is not None:
                span.set_attribute(ATTR_REQUEST_ID, str(request_id))
            logger.debug("Dispatching %s (id=%r)", method, request_id)

            try:
                handler = self._methods.get(method)
                if handler is None:
                    raise MethodNotFoundError(method)
                result = await handler(params or {})
            except ProtocolError as exc:
                span.set_attribute(ATTR_ERROR_CODE, exc.code)
                return JsonRpcErrorResponse.from_exception(exc, request_id)

            return JsonRpcSuccessResponse(id=request_id, result=result)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> CallToolResult:
        """Invoke the executor operation registered under *name*."""
        handler = self._tool_handlers.get(name)
        if handler is None or name not in self._registry:
            return CallToolResult.error(f"Unknown tool: {name}")

        with _tracer.start_as_current_span("mcp.tool_call") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            logger.info("Calling tool %s", name)
            try:
                result = await handler(arguments)
            except Exception as exc:
                logger.warning("Tool %s raised: %s", name, exc)
                result = CallToolResult.error(f"Tool error: {exc}")
            span.set_attribute(ATTR_TOOL_IS_ERROR, result.is_error)

        if result.is_error:
            logger.info("Tool %s reported an error: %s", name, result.text)
        return result

    # ------------------------------------------------------------------
    # Method handlers
    # ------------------------------------------------------------------

    async def _initialize(self, _params: dict[str, Any]) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
            "capabilities": {"tools": {}},
        }

    async def _ping(self, _params: dict[str, Any]) -> dict[str, Any]:
        return {}

    async def _list_tools(self, _params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": [tool.to_wire() for tool in self._registry.list_tools()]}

    async def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        try:
            call = CallToolParams.model_validate(params)
        except ValidationError as exc:
            return CallToolResult.error(f"Tool error: {_describe(exc)}").to_wire()
        result = await self.call_tool(call.name, call.arguments)
        return result.to_wire()


def _describe(exc: ValidationError) -> str:
    """Render a pydantic error as ``field: message`` pairs."""
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "message"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)
