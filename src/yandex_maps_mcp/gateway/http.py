"""HTTP binding: one Starlette app serving every HTTP transport variant.

Routes
------
``GET /mcp``       open a session stream (requires ``Accept: text/event-stream``)
``POST /mcp``      session-bound message, or a stateless request answered inline
``DELETE /mcp``    terminate a session
``GET /sse``       open a session stream (legacy variant)
``POST /message``  session-bound message (legacy variant)
``GET /tools``     tool catalog
``GET /health``    liveness probe

A session-bound message is dispatched, its response is pushed onto the
session stream as a ``message`` event, and the POST itself is answered
with ``202 Accepted``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import anyio
from sse_starlette import EventSourceResponse
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from yandex_maps_mcp.gateway.middleware import AccessLogMiddleware, CorsMiddleware
from yandex_maps_mcp.gateway.session import QueueChannel, Session, SessionStore
from yandex_maps_mcp.protocol.errors import (
    ChannelClosedError,
    DuplicateSessionIdError,
    SessionNotFoundError,
)
from yandex_maps_mcp.utils.telemetry import ATTR_SESSION_ID, ATTR_TRANSPORT, get_tracer

if TYPE_CHECKING:
    from yandex_maps_mcp.protocol.dispatcher import RequestDispatcher

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

SESSION_ID_HEADER = "Mcp-Session-Id"
LEGACY_SESSION_ID_HEADER = "X-Session-Id"
SESSION_ID_QUERY_PARAM = "sessionId"

UNIFIED_PATH = "/mcp"
LEGACY_STREAM_PATH = "/sse"
LEGACY_MESSAGE_PATH = "/message"


class HttpBinding:
    """Builds the ASGI app and serves it with uvicorn.

    Usage::

        binding = HttpBinding(dispatcher)
        app = binding.build_app()
        await binding.serve(host="0.0.0.0", port=3000)
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        store: SessionStore | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._store = store if store is not None else SessionStore()

    @property
    def store(self) -> SessionStore:
        return self._store

    def build_app(self) -> Starlette:
        routes = [
            Route(UNIFIED_PATH, self.handle_unified, methods=["GET", "POST", "DELETE"]),
            Route(LEGACY_STREAM_PATH, self.handle_legacy_stream, methods=["GET"]),
            Route(LEGACY_MESSAGE_PATH, self.handle_legacy_message, methods=["POST"]),
            Route("/tools", self.handle_tools, methods=["GET"]),
            Route("/health", self.handle_health, methods=["GET"]),
        ]
        return Starlette(
            routes=routes,
            middleware=[Middleware(CorsMiddleware), Middleware(AccessLogMiddleware)],
            exception_handlers={404: _not_found, 405: _method_not_allowed},
            lifespan=self._lifespan,
        )

    async def serve(self, host: str, port: int, log_level: str = "info") -> None:
        import uvicorn

        config = uvicorn.Config(
            self.build_app(),
            host=host,
            port=port,
            log_level=log_level.lower(),
        )
        server = uvicorn.Server(config)
        logger.info("Yandex Maps MCP Server listening on http://%s:%d", host, port)
        await server.serve()

    @asynccontextmanager
    async def _lifespan(self, _app: Starlette) -> AsyncIterator[None]:
        yield
        if len(self._store):
            logger.info("Closing %d open session(s)", len(self._store))
        await self._store.close_all()

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def open_session(self) -> tuple[Session, QueueChannel]:
        """Register a fresh session backed by an in-memory channel."""
        with _tracer.start_as_current_span("mcp.session.open") as span:
            span.set_attribute(ATTR_TRANSPORT, "http")
            channel = QueueChannel()
            session = await self._store.create(uuid4().hex, channel)
            span.set_attribute(ATTR_SESSION_ID, session.id)
        logger.info("Session %s opened (%d open)", session.id, len(self._store))
        return session, channel

    async def event_stream(
        self,
        session: Session,
        channel: QueueChannel,
        message_path: str,
    ) -> AsyncIterator[dict[str, Any]]:
        """SSE events for one session: the endpoint first, then each response.

        Ends when the channel closes; the session is destroyed when the
        stream ends for any reason, including client disconnect.
        """
        try:
            yield {"event": "endpoint", "data": f"{message_path}?{SESSION_ID_QUERY_PARAM}={session.id}"}
            async for message in channel.messages():
                yield {"event": "message", "data": json.dumps(message, ensure_ascii=False)}
        finally:
            with anyio.CancelScope(shield=True):
                await session.close()
            logger.info("Session %s closed", session.id)

    async def _stream_response(self, message_path: str) -> Response:
        try:
            session, channel = await self.open_session()
        except DuplicateSessionIdError:
            logger.exception("Could not register a new session")
            return PlainTextResponse("Internal Server Error", status_code=500)
        return EventSourceResponse(
            self.event_stream(session, channel, message_path),
            headers={SESSION_ID_HEADER: session.id},
        )

    async def _submit(self, session: Session, request: Request) -> Response:
        """Dispatch the request body and deliver the result over *session*."""
        body = await request.body()
        response = await self._dispatcher.handle_raw(body)
        if response is not None:
            try:
                await session.send(response)
            except ChannelClosedError:
                logger.debug("Session %s closed before its response could be delivered", session.id)
                await session.close()
        return PlainTextResponse("Accepted", status_code=202)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def handle_unified(self, request: Request) -> Response:
        if request.method == "GET":
            if "text/event-stream" not in request.headers.get("accept", ""):
                return PlainTextResponse("Method Not Allowed", status_code=405)
            return await self._stream_response(UNIFIED_PATH)
        if request.method == "POST":
            return await self._handle_unified_post(request)
        if request.method == "DELETE":
            return await self._handle_delete(request)
        return PlainTextResponse("Method Not Allowed", status_code=405)

    async def _handle_unified_post(self, request: Request) -> Response:
        session_id = _session_id(request)
        try:
            if session_id is not None:
                return await self._submit(self._store.require(session_id), request)
            response = await self._dispatcher.handle_raw(await request.body())
        except SessionNotFoundError:
            return PlainTextResponse("Session not found", status_code=404)
        except Exception:
            logger.exception("Error handling POST %s", UNIFIED_PATH)
            return PlainTextResponse("Internal Server Error", status_code=500)

        if response is None:
            return PlainTextResponse("Accepted", status_code=202)
        return JSONResponse(response.to_wire())

    async def _handle_delete(self, request: Request) -> Response:
        session_id = _session_id(request)
        try:
            session = self._store.require(session_id or "")
        except SessionNotFoundError:
            return PlainTextResponse("Session not found", status_code=404)
        await session.close()
        logger.info("Session %s terminated by client", session.id)
        return PlainTextResponse("Session terminated", status_code=200)

    async def handle_legacy_stream(self, request: Request) -> Response:
        if request.method != "GET":
            return PlainTextResponse("Method Not Allowed", status_code=405)
        return await self._stream_response(LEGACY_MESSAGE_PATH)

    async def handle_legacy_message(self, request: Request) -> Response:
        session_id = _session_id(request)
        try:
            if session_id is not None:
                session = self._store.get(session_id)
            else:
                session = await self._store.resolve_implicit()
            if session is None:
                return PlainTextResponse("No active session found", status_code=404)
            return await self._submit(session, request)
        except Exception:
            logger.exception("Error handling POST %s", LEGACY_MESSAGE_PATH)
            return PlainTextResponse("Internal Server Error", status_code=500)

    async def handle_tools(self, _request: Request) -> Response:
        tools = [tool.to_wire() for tool in self._dispatcher.registry.list_tools()]
        return JSONResponse({"tools": tools})

    async def handle_health(self, _request: Request) -> Response:
        timestamp = datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return JSONResponse({"status": "ok", "timestamp": timestamp})


def _session_id(request: Request) -> str | None:
    """The session id named by header or query string, if any."""
    return (
        request.headers.get(SESSION_ID_HEADER)
        or request.headers.get(LEGACY_SESSION_ID_HEADER)
        or request.query_params.get(SESSION_ID_QUERY_PARAM)
        or None
    )


async def _not_found(_request: Request, _exc: HTTPException) -> Response:
    return PlainTextResponse("Not found", status_code=404)


async def _method_not_allowed(_request: Request, exc: HTTPException) -> Response:
    return PlainTextResponse("Method Not Allowed", status_code=405, headers=exc.headers)
