"""Realtime presence and messaging over WebSockets."""

from app.realtime.auth import ConnectionAuthenticator, ConnectionIdentity
from app.realtime.presence import PresenceRegistry
from app.realtime.router import RealtimeConnection, RealtimeRouter

__all__ = [
    "ConnectionAuthenticator",
    "ConnectionIdentity",
    "PresenceRegistry",
    "RealtimeConnection",
    "RealtimeRouter",
]
