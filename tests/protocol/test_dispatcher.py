"""Tests for RequestDispatcher routing and error mapping."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from yandex_maps_mcp import __version__
from yandex_maps_mcp.protocol.dispatcher import PROTOCOL_VERSION, SERVER_NAME, RequestDispatcher
from yandex_maps_mcp.protocol.errors import ParseError, RequestValidationError
from yandex_maps_mcp.protocol.executor import MapsToolExecutor
from yandex_maps_mcp.protocol.models import (
    CallToolResult,
    JsonRpcErrorResponse,
    JsonRpcRequest,
    JsonRpcSuccessResponse,
)


def _make_executor(text: str = "ok") -> MagicMock:
    executor = MagicMock()
    executor.geocode = AsyncMock(return_value=CallToolResult.from_text(f"geocode:{text}"))
    executor.reverse_geocode = AsyncMock(return_value=CallToolResult.from_text(f"reverse:{text}"))
    executor.render_map = AsyncMock(return_value=CallToolResult.from_text(f"render:{text}"))
    return executor


def _body(**message: object) -> bytes:
    return json.dumps({"jsonrpc": "2.0", **message}).encode()


class TestParse:
    def test_valid_request(self) -> None:
        message = RequestDispatcher.parse(_body(id=1, method="ping"))
        assert isinstance(message, JsonRpcRequest)
        assert message.method == "ping"

    def test_invalid_json(self) -> None:
        with pytest.raises(ParseError):
            RequestDispatcher.parse(b"{not json")

    def test_batch_rejected(self) -> None:
        with pytest.raises(RequestValidationError, match="Batch"):
            RequestDispatcher.parse(b'[{"id": 1, "method": "ping"}]')

    def test_scalar_rejected(self) -> None:
        with pytest.raises(RequestValidationError):
            RequestDispatcher.parse(b"42")

    def test_missing_method_keeps_request_id(self) -> None:
        with pytest.raises(RequestValidationError) as exc_info:
            RequestDispatcher.parse(_body(id=9))
        assert exc_info.value.request_id == 9
        assert "method" in exc_info.value.detail

    def test_boolean_id_rejected(self) -> None:
        with pytest.raises(RequestValidationError) as exc_info:
            RequestDispatcher.parse(_body(id=True, method="ping"))
        assert exc_info.value.request_id is None

    def test_float_id_rejected(self) -> None:
        with pytest.raises(RequestValidationError):
            RequestDispatcher.parse(_body(id=1.0, method="ping"))

    def test_wrong_jsonrpc_version_rejected(self) -> None:
        with pytest.raises(RequestValidationError) as exc_info:
            RequestDispatcher.parse(b'{"jsonrpc": "1.0", "id": 1, "method": "ping"}')
        assert exc_info.value.request_id == 1

    def test_missing_jsonrpc_defaults(self) -> None:
        message = RequestDispatcher.parse(b'{"id": 1, "method": "ping"}')
        assert message.jsonrpc == "2.0"


class TestHandleRaw:
    async def test_parse_error_maps_to_internal_error(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        response = await dispatcher.handle_raw(b"garbage")
        assert isinstance(response, JsonRpcErrorResponse)
        wire = response.to_wire()
        assert wire["id"] is None
        assert wire["error"]["code"] == -32603
        assert wire["error"]["message"] == "Internal error"
        assert "data" in wire["error"]

    async def test_invalid_request(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        response = await dispatcher.handle_raw(_body(id=4, method=12))
        assert isinstance(response, JsonRpcErrorResponse)
        assert response.id == 4
        assert response.error.code == -32600

    async def test_boolean_id_is_invalid_request(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        response = await dispatcher.handle_raw(b'{"id": true, "method": "ping"}')
        assert isinstance(response, JsonRpcErrorResponse)
        wire = response.to_wire()
        assert wire["id"] is None
        assert wire["error"]["code"] == -32600

    async def test_wrong_jsonrpc_version_is_invalid_request(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        response = await dispatcher.handle_raw(b'{"jsonrpc": "1.0", "id": 7, "method": "ping"}')
        assert isinstance(response, JsonRpcErrorResponse)
        assert response.id == 7
        assert response.error.code == -32600

    async def test_notification_gets_no_response(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        assert await dispatcher.handle_raw(_body(method="notifications/initialized")) is None

    async def test_unknown_method(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        response = await dispatcher.handle_raw(_body(id=1, method="foo/bar"))
        assert isinstance(response, JsonRpcErrorResponse)
        assert response.to_wire() == {
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32601, "message": "Method not found", "data": {"method": "foo/bar"}},
        }

    async def test_accepts_text(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        response = await dispatcher.handle_raw('{"jsonrpc": "2.0", "id": "a", "method": "ping"}')
        assert isinstance(response, JsonRpcSuccessResponse)
        assert response.id == "a"
        assert response.result == {}


class TestDispatch:
    async def test_initialize(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        response = await dispatcher.dispatch("initialize", {"protocolVersion": "2024-11-05"}, 0)
        assert isinstance(response, JsonRpcSuccessResponse)
        assert response.result == {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
            "capabilities": {"tools": {}},
        }

    async def test_tools_list(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        response = await dispatcher.dispatch("tools/list", None, 2)
        assert isinstance(response, JsonRpcSuccessResponse)
        names = [tool["name"] for tool in response.result["tools"]]
        assert names == ["maps_geocode", "maps_reverse_geocode", "maps_render"]
        assert "inputSchema" in response.result["tools"][0]

    async def test_tools_list_is_identical_across_calls(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        first = await dispatcher.dispatch("tools/list", {}, 1)
        second = await dispatcher.dispatch("tools/list", {}, 2)
        assert isinstance(first, JsonRpcSuccessResponse)
        assert isinstance(second, JsonRpcSuccessResponse)
        assert first.result == second.result

    async def test_unknown_method_is_never_success(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        response = await dispatcher.dispatch("resources/list", {}, 5)
        assert isinstance(response, JsonRpcErrorResponse)
        assert response.error.code == -32601


class TestToolsCall:
    @pytest.mark.parametrize(
        ("tool", "operation"),
        [
            ("maps_geocode", "geocode"),
            ("maps_reverse_geocode", "reverse_geocode"),
            ("maps_render", "render_map"),
        ],
    )
    async def test_routes_to_executor(self, tool: str, operation: str) -> None:
        executor = _make_executor()
        dispatcher = RequestDispatcher(executor)
        arguments = {"lang": "en_US"}
        response = await dispatcher.dispatch(
            "tools/call", {"name": tool, "arguments": arguments}, 3
        )
        assert isinstance(response, JsonRpcSuccessResponse)
        getattr(executor, operation).assert_awaited_once_with(arguments)
        assert response.result["isError"] is False

    async def test_unknown_tool_is_domain_error(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        response = await dispatcher.dispatch("tools/call", {"name": "maps_teleport"}, 6)
        assert isinstance(response, JsonRpcSuccessResponse)
        assert response.result == {
            "content": [{"type": "text", "text": "Unknown tool: maps_teleport"}],
            "isError": True,
        }

    async def test_executor_exception_is_domain_error(self) -> None:
        executor = _make_executor()
        executor.geocode = AsyncMock(side_effect=RuntimeError("boom"))
        dispatcher = RequestDispatcher(executor)
        response = await dispatcher.dispatch(
            "tools/call", {"name": "maps_geocode", "arguments": {}}, 7
        )
        assert isinstance(response, JsonRpcSuccessResponse)
        assert response.result["isError"] is True
        assert response.result["content"][0]["text"] == "Tool error: boom"

    async def test_missing_tool_name_is_domain_error(self) -> None:
        dispatcher = RequestDispatcher(_make_executor())
        response = await dispatcher.dispatch("tools/call", {"arguments": {}}, 8)
        assert isinstance(response, JsonRpcSuccessResponse)
        assert response.result["isError"] is True
        assert response.result["content"][0]["text"].startswith("Tool error: name")

    async def test_missing_arguments_default_to_empty(self) -> None:
        executor = _make_executor()
        dispatcher = RequestDispatcher(executor)
        await dispatcher.dispatch("tools/call", {"name": "maps_render"}, 9)
        executor.render_map.assert_awaited_once_with({})

    def test_executor_protocol(self) -> None:
        assert isinstance(_make_executor(), MapsToolExecutor)
