"""Realtime event routing between connected users.

Wire frames are JSON objects {"event": name, "data": payload}.

Client -> server: message:send, typing:start, typing:stop
Server -> client: message:receive, typing:indicator, users:online, error

Delivery is best effort: events for a user who is not online are
dropped without telling the sender.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from contextlib import suppress
from typing import Any
from uuid import uuid4

from pydantic import ValidationError as PayloadError
from starlette.websockets import WebSocketDisconnect

from app.realtime.presence import PresenceRegistry
from app.schemas.realtime import ClientFrame, MessageSend, TypingSignal
from app.utils.time import format_datetime, utc_now

logger = logging.getLogger(__name__)

# Event names
MESSAGE_SEND = "message:send"
MESSAGE_RECEIVE = "message:receive"
TYPING_START = "typing:start"
TYPING_STOP = "typing:stop"
TYPING_INDICATOR = "typing:indicator"
USERS_ONLINE = "users:online"
ERROR = "error"

# Outbound frames buffered per connection before it is dropped
DEFAULT_MAX_PENDING = 256


class RealtimeConnection:
    """One connected user with a single-writer outbound queue.

    deliver() never blocks; the writer task sends queued frames one at a
    time, so frames reach the client in the order they were delivered.

    A client that stops reading fills the queue. At max_pending the
    connection is closed and on_overflow (usually the socket close) runs.
    """

    def __init__(
        self,
        user_id: str,
        send: Callable[[dict[str, Any]], Awaitable[None]],
        on_overflow: Callable[[], Awaitable[None]] | None = None,
        max_pending: int = DEFAULT_MAX_PENDING,
    ) -> None:
        self.user_id = user_id
        self.connection_id = uuid4().hex[:12]
        self._send = send
        self._on_overflow = on_overflow
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=max_pending)
        self._writer: asyncio.Task | None = None
        self._closer: asyncio.Task | None = None
        self.closed = False

    def start(self) -> None:
        self._writer = asyncio.create_task(self._drain())

    def deliver(self, event: str, data: Any) -> None:
        if self.closed:
            return
        try:
            self._queue.put_nowait({"event": event, "data": data})
        except asyncio.QueueFull:
            logger.warning(
                f"Connection {self.connection_id} has {self._queue.qsize()} unsent frames; closing",
                extra={"connection_id": self.connection_id, "user_id": self.user_id},
            )
            self.closed = True
            if self._on_overflow is not None:
                self._closer = asyncio.create_task(self._run_overflow())

    async def _run_overflow(self) -> None:
        # the socket may already be gone
        with suppress(WebSocketDisconnect, RuntimeError, OSError):
            await self._on_overflow()

    async def _drain(self) -> None:
        while True:
            frame = await self._queue.get()
            try:
                await self._send(frame)
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                logger.info(
                    f"Stopped writing to connection {self.connection_id}: {e!r}",
                    extra={"connection_id": self.connection_id, "user_id": self.user_id},
                )
                self.closed = True
                return

    async def close(self) -> None:
        """Stop the writer; frames still queued are discarded."""
        self.closed = True
        if self._writer is not None:
            self._writer.cancel()
            with suppress(asyncio.CancelledError):
                await self._writer

    def pending(self) -> int:
        return self._queue.qsize()

    def __repr__(self) -> str:
        return f"<RealtimeConnection {self.connection_id} user={self.user_id[:8]}>"


class RealtimeRouter:
    """Owns the presence registry and routes client events.

    Every handler is synchronous: it reads and mutates the registry and
    enqueues outbound frames without awaiting, so no other handler can
    observe a half-applied change.
    """

    def __init__(self, registry: PresenceRegistry | None = None) -> None:
        self.registry = registry or PresenceRegistry()
        self._handlers: dict[str, Callable[[RealtimeConnection, dict[str, Any]], None]] = {
            MESSAGE_SEND: self._on_message_send,
            TYPING_START: self._on_typing_start,
            TYPING_STOP: self._on_typing_stop,
        }

    # --- Lifecycle ---

    def connect(self, connection: RealtimeConnection) -> None:
        """Register an authenticated connection and announce who is online."""
        displaced = self.registry.register(connection.user_id, connection)
        if displaced is not None:
            logger.info(
                f"User {connection.user_id[:8]} reconnected; older connection "
                f"{displaced.connection_id} no longer receives events",
                extra={"connection_id": connection.connection_id, "user_id": connection.user_id},
            )
        logger.info(
            f"User {connection.user_id[:8]} connected",
            extra={"connection_id": connection.connection_id, "user_id": connection.user_id},
        )
        self.broadcast_online()

    def disconnect(self, connection: RealtimeConnection) -> None:
        """Drop a connection; a stale one leaves the newer registration alone."""
        if self.registry.unregister(connection.user_id, connection):
            logger.info(
                f"User {connection.user_id[:8]} disconnected",
                extra={"connection_id": connection.connection_id, "user_id": connection.user_id},
            )
            self.broadcast_online()

    def broadcast_online(self) -> None:
        online = self.registry.snapshot()
        for connection in self.registry.connections():
            connection.deliver(USERS_ONLINE, online)

    # --- Inbound ---

    def dispatch(
        self, connection: RealtimeConnection, raw: str | bytes | dict[str, Any] | None
    ) -> None:
        """Route one inbound frame.

        Malformed frames and unknown events are answered with an error
        event to the sender only.
        """
        try:
            if isinstance(raw, (str, bytes)):
                raw = json.loads(raw)
            frame = ClientFrame.model_validate(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, PayloadError):
            connection.deliver(ERROR, {"message": "Malformed event"})
            return

        handler = self._handlers.get(frame.event)
        if handler is None:
            connection.deliver(ERROR, {"message": f"Unknown event: {frame.event}"})
            return

        try:
            handler(connection, frame.data)
        except PayloadError:
            logger.warning(
                f"Invalid {frame.event} payload from {connection.user_id[:8]}",
                extra={"connection_id": connection.connection_id, "event": frame.event},
            )
            connection.deliver(ERROR, {"message": _failure_message(frame.event)})

    def _on_message_send(self, connection: RealtimeConnection, data: dict[str, Any]) -> None:
        payload = MessageSend.model_validate(data)
        receiver = self.registry.lookup(payload.receiver_id)
        if receiver is None:
            return
        receiver.deliver(
            MESSAGE_RECEIVE,
            {
                "senderId": connection.user_id,
                "message": payload.message,
                "timestamp": format_datetime(utc_now()),
            },
        )

    def _on_typing_start(self, connection: RealtimeConnection, data: dict[str, Any]) -> None:
        self._send_typing(connection, data, is_typing=True)

    def _on_typing_stop(self, connection: RealtimeConnection, data: dict[str, Any]) -> None:
        self._send_typing(connection, data, is_typing=False)

    def _send_typing(
        self,
        connection: RealtimeConnection,
        data: dict[str, Any],
        is_typing: bool,
    ) -> None:
        payload = TypingSignal.model_validate(data)
        receiver = self.registry.lookup(payload.receiver_id)
        if receiver is None:
            return
        receiver.deliver(TYPING_INDICATOR, {"userId": connection.user_id, "isTyping": is_typing})


def _failure_message(event: str) -> str:
    if event == MESSAGE_SEND:
        return "Failed to send message"
    return f"Invalid {event} payload"
