"""In-memory map of online users to their live connection."""

from typing import Any


class PresenceRegistry:
    """userId -> connection, at most one connection per user.

    Registering a user who is already present replaces the earlier
    connection (last connect wins). All methods are synchronous so a
    mutation never spans an await.
    """

    def __init__(self) -> None:
        self._connections: dict[str, Any] = {}

    def register(self, user_id: str, connection: Any) -> Any | None:
        """Map a user to a connection.

        Returns:
            The connection that was displaced, if any
        """
        displaced = self._connections.get(user_id)
        self._connections[user_id] = connection
        return displaced if displaced is not connection else None

    def unregister(self, user_id: str, connection: Any | None = None) -> bool:
        """Remove a user's entry.

        When a connection is given, the entry is only removed if it still
        points at that connection, so a stale connection closing cannot
        evict a newer one.

        Returns:
            True if an entry was removed
        """
        current = self._connections.get(user_id)
        if current is None:
            return False
        if connection is not None and current is not connection:
            return False
        del self._connections[user_id]
        return True

    def lookup(self, user_id: str) -> Any | None:
        return self._connections.get(user_id)

    def snapshot(self) -> list[str]:
        """Ids of users currently online, in connection order."""
        return list(self._connections)

    def connections(self) -> list[Any]:
        return list(self._connections.values())

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
