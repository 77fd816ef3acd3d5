"""Sessions, their channels, and the store that tracks live sessions.

A :class:`Session` exclusively owns one :class:`Channel`, the write target for
server-to-client messages. The :class:`SessionStore` is the single source of
truth for which sessions are alive; all of its mutations, and the fallback
resolution used by the legacy message endpoint, run under one lock.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable

from yandex_maps_mcp.protocol.errors import (
    ChannelClosedError,
    DuplicateSessionIdError,
    SessionNotFoundError,
)
from yandex_maps_mcp.protocol.models import JsonRpcErrorResponse, JsonRpcSuccessResponse

logger = logging.getLogger(__name__)

OutboundMessage = JsonRpcSuccessResponse | JsonRpcErrorResponse | dict[str, Any]


@runtime_checkable
class Channel(Protocol):
    """Write side of one client connection."""

    @property
    def closed(self) -> bool: ...

    async def send(self, message: dict[str, Any]) -> None:
        """Deliver one message; raise :class:`ChannelClosedError` once closed."""
        ...

    async def close(self) -> None:
        """Release the channel. Must be idempotent."""
        ...


class QueueChannel:
    """An in-memory FIFO channel drained by a streaming HTTP response.

    ``send`` never blocks: the queue is unbounded and a closed channel
    rejects writes immediately.
    """

    _CLOSED: Any = object()

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, message: dict[str, Any]) -> None:
        if self._closed:
            raise ChannelClosedError()
        self._queue.put_nowait(message)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(self._CLOSED)

    async def messages(self) -> AsyncIterator[dict[str, Any]]:
        """Yield queued messages in send order until the channel closes."""
        while True:
            item = await self._queue.get()
            if item is self._CLOSED:
                return
            yield item


class Session:
    """One addressable, ordered channel to one client."""

    def __init__(
        self,
        session_id: str,
        channel: Channel,
        created_order: int,
        store: SessionStore | None = None,
    ) -> None:
        self._id = session_id
        self._channel = channel
        self._created_order = created_order
        self._store = store
        self._closed = False

    @property
    def id(self) -> str:
        return self._id

    @property
    def channel(self) -> Channel:
        return self._channel

    @property
    def created_order(self) -> int:
        return self._created_order

    @property
    def closed(self) -> bool:
        return self._closed or self._channel.closed

    async def send(self, message: OutboundMessage) -> None:
        """Write *message* to the channel.

        Raises:
            ChannelClosedError: If the session or its channel is already
                closed. The caller must treat this as "destroy this session".
        """
        if self.closed:
            raise ChannelClosedError(self._id)
        payload = message if isinstance(message, dict) else message.to_wire()
        try:
            await self._channel.send(payload)
        except ChannelClosedError as exc:
            raise ChannelClosedError(self._id) from exc

    async def close(self) -> None:
        """Release the channel, then drop out of the store. Idempotent."""
        if self._closed:
            return
        self._closed = True
        await self._channel.close()
        if self._store is not None:
            await self._store.remove(self._id)

    def __repr__(self) -> str:
        return f"Session(id={self._id!r}, created_order={self._created_order}, closed={self.closed})"


class SessionStore:
    """Concurrency-safe registry of live sessions.

    Invariant: every id in the creation-order sequence has exactly one entry
    in the mapping and vice versa.

    Usage::

        store = SessionStore()
        session = await store.create(uuid4().hex, QueueChannel())
        store.get(session.id) is session          # True
        await session.close()
        store.get(session.id) is None             # True
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._order: list[str] = []
        self._counter = itertools.count(1)
        self._lock = asyncio.Lock()

    async def create(self, session_id: str, channel: Channel) -> Session:
        """Register a new session bound to *channel*.

        Raises:
            DuplicateSessionIdError: If *session_id* is already live.
        """
        async with self._lock:
            if session_id in self._sessions:
                raise DuplicateSessionIdError(session_id)
            session = Session(session_id, channel, next(self._counter), store=self)
            self._sessions[session_id] = session
            self._order.append(session_id)
        logger.debug("Session %s registered (%d open)", session_id, len(self._order))
        return session

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def require(self, session_id: str) -> Session:
        """Like :meth:`get`, but raise :class:`SessionNotFoundError` when absent."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def remove(self, session_id: str) -> bool:
        """Forget *session_id*. Returns ``False`` if it was already gone."""
        async with self._lock:
            if self._sessions.pop(session_id, None) is None:
                return False
            self._order.remove(session_id)
        logger.debug("Session %s removed (%d open)", session_id, len(self._order))
        return True

    async def resolve_implicit(self) -> Session | None:
        """Pick a target for a message that names no session.

        Zero open sessions resolve to ``None`` and exactly one resolves to
        itself. With several open, the most recently created wins, which can
        misroute messages from concurrent legacy clients.
        """
        async with self._lock:
            if not self._order:
                return None
            if len(self._order) > 1:
                logger.warning(
                    "No session id supplied and %d sessions are open; using the most recent (%s)",
                    len(self._order),
                    self._order[-1],
                )
            return self._sessions[self._order[-1]]

    async def close_all(self) -> None:
        """Close every live session (process shutdown)."""
        for session in list(self._sessions.values()):
            await session.close()

    def ids(self) -> list[str]:
        """Live session ids in creation order."""
        return list(self._order)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
