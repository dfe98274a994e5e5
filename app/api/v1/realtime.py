"""Realtime WebSocket endpoint."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, WebSocket, status

from app.api.deps import get_connection_authenticator, get_realtime_router
from app.core.config import settings
from app.core.errors import UnauthorizedError
from app.realtime.auth import ConnectionAuthenticator
from app.realtime.router import RealtimeConnection, RealtimeRouter

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    authenticator: Annotated[ConnectionAuthenticator, Depends(get_connection_authenticator)],
    realtime: Annotated[RealtimeRouter, Depends(get_realtime_router)],
    token: Annotated[str | None, Query()] = None,
) -> None:
    """Presence, direct messages and typing indicators.

    The access token is passed as ?token=. Unauthenticated handshakes are
    closed with 1008 before accept.
    """
    try:
        identity = await authenticator.authenticate(token)
    except UnauthorizedError as e:
        logger.info(f"Realtime connection rejected: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.detail)
        return

    await websocket.accept()

    async def close_slow_client() -> None:
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER, reason="Too many unsent events")

    connection = RealtimeConnection(
        identity.user_id,
        websocket.send_json,
        on_overflow=close_slow_client,
        max_pending=settings.realtime_max_pending,
    )
    connection.start()
    realtime.connect(connection)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            # clients may send text or binary frames
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            realtime.dispatch(connection, raw)
    finally:
        realtime.disconnect(connection)
        await connection.close()
