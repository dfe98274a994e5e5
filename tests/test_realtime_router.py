"""Tests for realtime event routing."""

import asyncio
import json

import pytest
from starlette.websockets import WebSocketDisconnect

from app.realtime.router import (
    ERROR,
    MESSAGE_RECEIVE,
    TYPING_INDICATOR,
    USERS_ONLINE,
    RealtimeConnection,
    RealtimeRouter,
)


class Recorder:
    """Outbound sink that records every frame written."""

    def __init__(self) -> None:
        self.frames: list[dict] = []

    async def __call__(self, frame: dict) -> None:
        self.frames.append(frame)

    def events(self, name: str) -> list[dict]:
        return [f["data"] for f in self.frames if f["event"] == name]


async def flush(*connections: RealtimeConnection) -> None:
    """Let writer tasks drain their queues."""
    for _ in range(10):
        if all(c.pending() == 0 for c in connections):
            break
        await asyncio.sleep(0)
    await asyncio.sleep(0)


@pytest.fixture
def realtime() -> RealtimeRouter:
    return RealtimeRouter()


@pytest.fixture
async def pair(realtime: RealtimeRouter):
    """Two connected users, alice and bob, with recorded outbound frames."""
    alice_out, bob_out = Recorder(), Recorder()
    alice = RealtimeConnection("alice-id", alice_out)
    bob = RealtimeConnection("bob-id", bob_out)
    for conn in (alice, bob):
        conn.start()
        realtime.connect(conn)
    await flush(alice, bob)
    alice_out.frames.clear()
    bob_out.frames.clear()

    yield alice, alice_out, bob, bob_out

    for conn in (alice, bob):
        await conn.close()


class TestPresenceBroadcast:
    """users:online on connect and disconnect."""

    async def test_connect_broadcasts_online_list(self, realtime: RealtimeRouter) -> None:
        alice_out, bob_out = Recorder(), Recorder()
        alice = RealtimeConnection("alice-id", alice_out)
        bob = RealtimeConnection("bob-id", bob_out)
        alice.start()
        bob.start()

        realtime.connect(alice)
        realtime.connect(bob)
        await flush(alice, bob)

        assert alice_out.events(USERS_ONLINE) == [["alice-id"], ["alice-id", "bob-id"]]
        assert bob_out.events(USERS_ONLINE) == [["alice-id", "bob-id"]]

        await alice.close()
        await bob.close()

    async def test_disconnect_broadcasts_to_remaining(self, realtime: RealtimeRouter, pair) -> None:
        alice, alice_out, bob, bob_out = pair

        realtime.disconnect(bob)
        await flush(alice)

        assert alice_out.events(USERS_ONLINE) == [["alice-id"]]
        assert "bob-id" not in realtime.registry

    async def test_stale_disconnect_keeps_newer_connection(
        self, realtime: RealtimeRouter, pair
    ) -> None:
        alice, alice_out, bob, bob_out = pair
        newer_out = Recorder()
        newer = RealtimeConnection("bob-id", newer_out)
        newer.start()
        realtime.connect(newer)
        await flush(alice, newer)
        alice_out.frames.clear()

        realtime.disconnect(bob)
        await flush(alice)

        assert realtime.registry.lookup("bob-id") is newer
        assert alice_out.events(USERS_ONLINE) == []

        await newer.close()


class TestMessageSend:
    """message:send routing."""

    async def test_message_delivered_to_receiver(self, realtime: RealtimeRouter, pair) -> None:
        alice, alice_out, bob, bob_out = pair

        realtime.dispatch(
            alice,
            json.dumps({"event": "message:send", "data": {"receiverId": "bob-id", "message": "hi"}}),
        )
        await flush(bob)

        received = bob_out.events(MESSAGE_RECEIVE)
        assert len(received) == 1
        assert received[0]["senderId"] == "alice-id"
        assert received[0]["message"] == "hi"
        assert received[0]["timestamp"].endswith("Z")
        assert alice_out.frames == []

    async def test_message_payload_passes_through(self, realtime: RealtimeRouter, pair) -> None:
        alice, alice_out, bob, bob_out = pair
        payload = {"text": "see you at 3", "chatId": "c1"}

        realtime.dispatch(
            alice, {"event": "message:send", "data": {"receiverId": "bob-id", "message": payload}}
        )
        await flush(bob)

        assert bob_out.events(MESSAGE_RECEIVE)[0]["message"] == payload

    async def test_messages_arrive_in_send_order(self, realtime: RealtimeRouter, pair) -> None:
        alice, alice_out, bob, bob_out = pair

        for n in range(5):
            realtime.dispatch(
                alice,
                {"event": "message:send", "data": {"receiverId": "bob-id", "message": n}},
            )
        await flush(bob)

        assert [m["message"] for m in bob_out.events(MESSAGE_RECEIVE)] == [0, 1, 2, 3, 4]

    async def test_offline_receiver_is_dropped_silently(
        self, realtime: RealtimeRouter, pair
    ) -> None:
        alice, alice_out, bob, bob_out = pair

        realtime.dispatch(
            alice, {"event": "message:send", "data": {"receiverId": "carol-id", "message": "hi"}}
        )
        realtime.dispatch(alice, {"event": "ping", "data": {}})
        await flush(alice)

        # The only thing alice hears back is the error for the unknown event
        assert alice_out.frames == [{"event": ERROR, "data": {"message": "Unknown event: ping"}}]
        assert bob_out.frames == []

    async def test_missing_receiver_is_error(self, realtime: RealtimeRouter, pair) -> None:
        alice, alice_out, bob, bob_out = pair

        realtime.dispatch(alice, {"event": "message:send", "data": {"message": "hi"}})
        await flush(alice)

        assert alice_out.events(ERROR) == [{"message": "Failed to send message"}]

    async def test_sender_identity_comes_from_connection(
        self, realtime: RealtimeRouter, pair
    ) -> None:
        alice, alice_out, bob, bob_out = pair

        realtime.dispatch(
            alice,
            {
                "event": "message:send",
                "data": {"receiverId": "bob-id", "message": "hi", "senderId": "mallory"},
            },
        )
        await flush(bob)

        assert bob_out.events(MESSAGE_RECEIVE)[0]["senderId"] == "alice-id"


class TestTyping:
    """typing:start and typing:stop."""

    @pytest.mark.parametrize("event,is_typing", [("typing:start", True), ("typing:stop", False)])
    async def test_typing_indicator(
        self, realtime: RealtimeRouter, pair, event: str, is_typing: bool
    ) -> None:
        alice, alice_out, bob, bob_out = pair

        realtime.dispatch(bob, {"event": event, "data": {"receiverId": "alice-id"}})
        await flush(alice)

        assert alice_out.events(TYPING_INDICATOR) == [{"userId": "bob-id", "isTyping": is_typing}]

    async def test_typing_without_receiver_is_error(self, realtime: RealtimeRouter, pair) -> None:
        alice, alice_out, bob, bob_out = pair

        realtime.dispatch(alice, {"event": "typing:start", "data": {}})
        await flush(alice)

        assert alice_out.events(ERROR) == [{"message": "Invalid typing:start payload"}]


class TestMalformedInput:
    """Errors go back to the sender only."""

    @pytest.mark.parametrize(
        "raw", ["not json", "[1, 2]", json.dumps({"data": {}}), b"\x80abc", None]
    )
    async def test_malformed_frames(self, realtime: RealtimeRouter, pair, raw) -> None:
        alice, alice_out, bob, bob_out = pair

        realtime.dispatch(alice, raw)
        await flush(alice)

        assert alice_out.frames == [{"event": ERROR, "data": {"message": "Malformed event"}}]
        assert bob_out.frames == []


class TestConnection:
    """Outbound writer behaviour."""

    async def test_closed_connection_ignores_deliveries(self) -> None:
        out = Recorder()
        conn = RealtimeConnection("user-id", out)
        conn.start()
        await conn.close()

        conn.deliver(USERS_ONLINE, [])

        assert conn.pending() == 0
        assert out.frames == []

    async def test_send_failure_stops_writer(self) -> None:
        async def broken_send(frame: dict) -> None:
            raise WebSocketDisconnect(code=1006)

        conn = RealtimeConnection("user-id", broken_send)
        conn.start()

        conn.deliver(USERS_ONLINE, [])
        await flush(conn)

        assert conn.closed is True
        await conn.close()

    async def test_full_queue_closes_connection(self) -> None:
        closed_sockets = []

        async def close_socket() -> None:
            closed_sockets.append(True)

        # never started, so nothing drains
        conn = RealtimeConnection("user-id", Recorder(), on_overflow=close_socket, max_pending=2)

        conn.deliver(USERS_ONLINE, [])
        conn.deliver(USERS_ONLINE, [])
        assert conn.closed is False

        conn.deliver(USERS_ONLINE, [])
        await asyncio.sleep(0)

        assert conn.closed is True
        assert conn.pending() == 2
        assert closed_sockets == [True]

        conn.deliver(USERS_ONLINE, [])
        assert conn.pending() == 2
