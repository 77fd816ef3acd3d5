"""MCP models: JSON-RPC 2.0 envelopes, tool descriptors and tool results.

A response is a tagged variant: :class:`JsonRpcSuccessResponse` carries a
``result`` and :class:`JsonRpcErrorResponse` carries an ``error``. Neither
class has a slot for the other branch.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    StrictInt,
    StrictStr,
    model_serializer,
)

from yandex_maps_mcp.protocol.errors import ProtocolError

# Strict: booleans and floats are not request ids.
RequestId = StrictInt | StrictStr

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request or notification."""

    jsonrpc: Literal["2.0"] = "2.0"
    method: str
    id: RequestId | None = None
    params: dict[str, Any] | None = None

    @property
    def is_notification(self) -> bool:
        """A message without an ``id`` member expects no response."""
        return "id" not in self.model_fields_set


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    @model_serializer(mode="wrap")
    def _drop_empty_data(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        dumped: dict[str, Any] = handler(self)
        if dumped.get("data") is None:
            dumped.pop("data", None)
        return dumped

    @classmethod
    def from_exception(cls, exc: ProtocolError) -> JsonRpcError:
        return cls(code=exc.code, message=exc.message, data=exc.data)


class JsonRpcSuccessResponse(BaseModel):
    """A JSON-RPC 2.0 response carrying a result."""

    model_config = ConfigDict(extra="forbid")

    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId | None
    result: dict[str, Any]

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class JsonRpcErrorResponse(BaseModel):
    """A JSON-RPC 2.0 response carrying an error."""

    model_config = ConfigDict(extra="forbid")

    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId | None = None
    error: JsonRpcError

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_exception(
        cls, exc: ProtocolError, request_id: RequestId | None = None
    ) -> JsonRpcErrorResponse:
        return cls(id=request_id, error=JsonRpcError.from_exception(exc))


JsonRpcResponse = JsonRpcSuccessResponse | JsonRpcErrorResponse


# ---------------------------------------------------------------------------
# MCP tool payloads
# ---------------------------------------------------------------------------


class ToolDescriptor(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class CallToolParams(BaseModel):
    """Parameters of a ``tools/call`` request."""

    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class TextContent(BaseModel):
    """Plain text content block."""

    type: Literal["text"] = "text"
    text: str


class ImageContent(BaseModel):
    """Inline base64 image content block."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["image"] = "image"
    data: str
    mime_type: str = Field(default="image/png", alias="mimeType")


ContentBlock = Annotated[TextContent | ImageContent, Field(discriminator="type")]


class CallToolResult(BaseModel):
    """The outcome of a tool call.

    Domain failures are reported with ``is_error=True`` and a readable text
    block, never as a protocol error.
    """

    model_config = ConfigDict(populate_by_name=True)

    content: list[ContentBlock] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def from_text(cls, text: str, *, is_error: bool = False) -> CallToolResult:
        """Create a result with a single text content block."""
        return cls(content=[TextContent(text=text)], is_error=is_error)

    @classmethod
    def error(cls, text: str) -> CallToolResult:
        return cls.from_text(text, is_error=True)

    @property
    def text(self) -> str:
        """Concatenated text of all text blocks."""
        return "".join(block.text for block in self.content if isinstance(block, TextContent))

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
