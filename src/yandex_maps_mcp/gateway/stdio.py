"""Stdio binding: newline-delimited JSON-RPC over the process streams.

One implicit session covers the lifetime of the process. Each non-blank
line of stdin is one message; each response is written as one line of
stdout and flushed. Diagnostics go through :mod:`logging` (stderr).
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import TYPE_CHECKING, Any, TextIO

from yandex_maps_mcp.gateway.session import Session
from yandex_maps_mcp.protocol.errors import ChannelClosedError

if TYPE_CHECKING:
    from yandex_maps_mcp.protocol.dispatcher import RequestDispatcher

logger = logging.getLogger(__name__)

STDIO_SESSION_ID = "stdio"


class StreamChannel:
    """Writes one JSON document per line to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, message: dict[str, Any]) -> None:
        if self._closed:
            raise ChannelClosedError(STDIO_SESSION_ID)
        line = json.dumps(message, ensure_ascii=False, separators=(",", ":"))
        try:
            self._stream.write(line + "\n")
            self._stream.flush()
        except (OSError, ValueError) as exc:
            self._closed = True
            raise ChannelClosedError(STDIO_SESSION_ID) from exc

    async def close(self) -> None:
        self._closed = True


class StdioBinding:
    """Serve one client over stdin/stdout.

    Usage::

        binding = StdioBinding(dispatcher)
        await binding.serve()   # returns when stdin reaches EOF
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout

    async def serve(self) -> None:
        """Read, dispatch and answer messages one at a time until EOF."""
        session = Session(STDIO_SESSION_ID, StreamChannel(self._stdout), created_order=1)
        logger.info("Yandex Maps MCP Server running on stdio")
        try:
            while True:
                line = await asyncio.to_thread(self._stdin.readline)
                if not line:
                    break
                line = line.strip()
                if not line:
                    continue

                response = await self._dispatcher.handle_raw(line)
                if response is None:
                    continue
                try:
                    await session.send(response)
                except ChannelClosedError:
                    logger.warning("stdout is closed; stopping")
                    break
        finally:
            await session.close()
        logger.info("stdin closed; shutting down")
