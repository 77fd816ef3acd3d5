"""Shared error types for the gateway.

Protocol errors map onto JSON-RPC error objects; session errors are raised by
the session layer and handled by the transport bindings.
"""

from __future__ import annotations

from typing import Any

# JSON-RPC 2.0 error codes used by the gateway
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603


class GatewayError(Exception):
    """Base error for all gateway failures."""


class ConfigurationError(GatewayError):
    """Required configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Protocol tier
# ---------------------------------------------------------------------------


class ProtocolError(GatewayError):
    """A fault reported to the caller as a JSON-RPC error object."""

    code: int = INTERNAL_ERROR
    message: str = "Internal error"

    def __init__(
        self, detail: str = "", data: Any = None, *, request_id: int | str | None = None
    ) -> None:
        self.detail = detail
        self.request_id = request_id
        self.data = data if data is not None else (detail or None)
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


class ParseError(ProtocolError):
    """The inbound message could not be decoded at all."""

    code = INTERNAL_ERROR
    message = "Internal error"


class RequestValidationError(ProtocolError):
    """The message decoded but is not a well-formed JSON-RPC request."""

    code = INVALID_REQUEST
    message = "Invalid Request"


class MethodNotFoundError(ProtocolError):
    """The requested method is not served by the gateway."""

    code = METHOD_NOT_FOUND
    message = "Method not found"

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(method, data={"method": method})


# ---------------------------------------------------------------------------
# Session tier
# ---------------------------------------------------------------------------


class SessionError(GatewayError):
    """Base error for session lifecycle failures."""


class DuplicateSessionIdError(SessionError):
    """A session with this id is already registered."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session already exists: {session_id}")


class SessionNotFoundError(SessionError):
    """No live session matches the requested id."""

    def __init__(self, session_id: str | None = None) -> None:
        self.session_id = session_id
        if session_id:
            super().__init__(f"Session not found: {session_id}")
        else:
            super().__init__("No active session found")


class ChannelClosedError(SessionError):
    """The session's channel is closed; the session must be destroyed."""

    def __init__(self, session_id: str = "") -> None:
        self.session_id = session_id
        super().__init__(f"Channel closed for session {session_id}" if session_id else "Channel closed")
