"""End-to-end tests for the realtime WebSocket endpoint."""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.api.deps import get_connection_authenticator
from app.core.errors import UnauthorizedError
from app.main import app
from app.models.user import UserRole
from app.realtime.auth import ConnectionIdentity
from app.realtime.router import RealtimeRouter

WS_URL = "/api/v1/realtime/ws"


class StubAuthenticator:
    """Maps fixed tokens to identities without touching the database."""

    IDENTITIES = {
        "alice-token": ConnectionIdentity(user_id="alice-id", role=UserRole.PATIENT),
        "bob-token": ConnectionIdentity(user_id="bob-id", role=UserRole.DOCTOR),
    }

    async def authenticate(self, token: str | None) -> ConnectionIdentity:
        if not token:
            raise UnauthorizedError("Authentication token required")
        identity = self.IDENTITIES.get(token)
        if identity is None:
            raise UnauthorizedError("Invalid or expired token")
        return identity


@pytest.fixture
def ws_client():
    app.state.realtime = RealtimeRouter()
    app.dependency_overrides[get_connection_authenticator] = StubAuthenticator

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
    app.state.realtime = RealtimeRouter()


class TestHandshake:
    """Connection admission."""

    def test_missing_token_is_rejected(self, ws_client: TestClient) -> None:
        with pytest.raises(WebSocketDisconnect) as exc:
            with ws_client.websocket_connect(WS_URL):
                pass

        assert exc.value.code == 1008

    def test_bad_token_is_rejected(self, ws_client: TestClient) -> None:
        with pytest.raises(WebSocketDisconnect) as exc:
            with ws_client.websocket_connect(f"{WS_URL}?token=forged"):
                pass

        assert exc.value.code == 1008
        assert len(app.state.realtime.registry) == 0

    def test_connect_announces_presence(self, ws_client: TestClient) -> None:
        with ws_client.websocket_connect(f"{WS_URL}?token=alice-token") as alice:
            frame = alice.receive_json()

            assert frame == {"event": "users:online", "data": ["alice-id"]}


class TestMessaging:
    """Direct messages and typing between two connected users."""

    def test_message_and_presence_flow(self, ws_client: TestClient) -> None:
        with ws_client.websocket_connect(f"{WS_URL}?token=alice-token") as alice:
            assert alice.receive_json()["data"] == ["alice-id"]

            with ws_client.websocket_connect(f"{WS_URL}?token=bob-token") as bob:
                assert bob.receive_json()["data"] == ["alice-id", "bob-id"]
                assert alice.receive_json()["data"] == ["alice-id", "bob-id"]

                alice.send_json(
                    {"event": "message:send", "data": {"receiverId": "bob-id", "message": "hello"}}
                )
                received = bob.receive_json()
                assert received["event"] == "message:receive"
                assert received["data"]["senderId"] == "alice-id"
                assert received["data"]["message"] == "hello"

                bob.send_json({"event": "typing:start", "data": {"receiverId": "alice-id"}})
                assert alice.receive_json() == {
                    "event": "typing:indicator",
                    "data": {"userId": "bob-id", "isTyping": True},
                }

            # bob left
            assert alice.receive_json() == {"event": "users:online", "data": ["alice-id"]}

    def test_message_to_offline_user_is_dropped(self, ws_client: TestClient) -> None:
        with ws_client.websocket_connect(f"{WS_URL}?token=alice-token") as alice:
            alice.receive_json()

            alice.send_json(
                {"event": "message:send", "data": {"receiverId": "bob-id", "message": "hello"}}
            )
            alice.send_text("not json")

            # The next frame alice sees is the error, so nothing was sent for the drop
            assert alice.receive_json() == {"event": "error", "data": {"message": "Malformed event"}}

    def test_unknown_event_is_reported(self, ws_client: TestClient) -> None:
        with ws_client.websocket_connect(f"{WS_URL}?token=alice-token") as alice:
            alice.receive_json()

            alice.send_json({"event": "call:start", "data": {}})

            assert alice.receive_json() == {
                "event": "error",
                "data": {"message": "Unknown event: call:start"},
            }

    def test_binary_frames_are_routed(self, ws_client: TestClient) -> None:
        with ws_client.websocket_connect(f"{WS_URL}?token=alice-token") as alice:
            alice.receive_json()

            with ws_client.websocket_connect(f"{WS_URL}?token=bob-token") as bob:
                bob.receive_json()
                alice.receive_json()

                bob.send_bytes(b'{"event": "typing:start", "data": {"receiverId": "alice-id"}}')

                assert alice.receive_json() == {
                    "event": "typing:indicator",
                    "data": {"userId": "bob-id", "isTyping": True},
                }

    def test_undecodable_binary_frame_keeps_connection(self, ws_client: TestClient) -> None:
        with ws_client.websocket_connect(f"{WS_URL}?token=alice-token") as alice:
            alice.receive_json()

            alice.send_bytes(b"\x80abc")
            assert alice.receive_json() == {"event": "error", "data": {"message": "Malformed event"}}

            alice.send_json({"event": "call:start", "data": {}})
            assert alice.receive_json()["data"] == {"message": "Unknown event: call:start"}
