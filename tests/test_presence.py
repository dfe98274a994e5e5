"""Tests for the presence registry."""

from app.realtime.presence import PresenceRegistry


class FakeConnection:
    def __init__(self, name: str) -> None:
        self.name = name


class TestPresenceRegistry:
    """Registration, replacement and removal."""

    def test_register_and_lookup(self) -> None:
        registry = PresenceRegistry()
        conn = FakeConnection("a")

        displaced = registry.register("user-a", conn)

        assert displaced is None
        assert registry.lookup("user-a") is conn
        assert "user-a" in registry
        assert len(registry) == 1

    def test_lookup_missing_user(self) -> None:
        assert PresenceRegistry().lookup("nobody") is None

    def test_last_connect_wins(self) -> None:
        registry = PresenceRegistry()
        first = FakeConnection("first")
        second = FakeConnection("second")

        registry.register("user-a", first)
        displaced = registry.register("user-a", second)

        assert displaced is first
        assert registry.lookup("user-a") is second
        assert registry.snapshot() == ["user-a"]

    def test_registering_same_connection_twice_displaces_nothing(self) -> None:
        registry = PresenceRegistry()
        conn = FakeConnection("a")

        registry.register("user-a", conn)

        assert registry.register("user-a", conn) is None

    def test_stale_connection_does_not_evict_newer(self) -> None:
        registry = PresenceRegistry()
        stale = FakeConnection("stale")
        current = FakeConnection("current")
        registry.register("user-a", stale)
        registry.register("user-a", current)

        removed = registry.unregister("user-a", stale)

        assert removed is False
        assert registry.lookup("user-a") is current

    def test_unregister_current_connection(self) -> None:
        registry = PresenceRegistry()
        conn = FakeConnection("a")
        registry.register("user-a", conn)

        assert registry.unregister("user-a", conn) is True
        assert "user-a" not in registry
        assert registry.unregister("user-a", conn) is False

    def test_unregister_without_connection(self) -> None:
        registry = PresenceRegistry()
        registry.register("user-a", FakeConnection("a"))

        assert registry.unregister("user-a") is True
        assert len(registry) == 0

    def test_snapshot_keeps_connection_order(self) -> None:
        registry = PresenceRegistry()
        for user_id in ("u1", "u2", "u3"):
            registry.register(user_id, FakeConnection(user_id))
        registry.unregister("u2")

        assert registry.snapshot() == ["u1", "u3"]
        assert [c.name for c in registry.connections()] == ["u1", "u3"]
