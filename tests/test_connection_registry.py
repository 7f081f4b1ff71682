"""
Tests for the connection registry.

This module tests membership tracking, idempotent removal and snapshot
iteration of ConnectionRegistry.
"""

import random
import threading

from starlette.websockets import WebSocketState

from relay.managers.connection_registry import (
    ConnectionRegistry,
    describe_client,
    is_connection_open,
)
from tests.mocks.websocket_mocks import create_mock_websocket


class TestConnectionRegistry:
    """Tests for ConnectionRegistry class."""

    def test_init(self, registry):
        """Test registry starts empty."""
        assert registry.size() == 0
        assert len(registry) == 0
        assert registry.snapshot() == []

    def test_add(self, registry):
        """Test adding a connection."""
        ws = create_mock_websocket()

        registry.add(ws)

        assert ws in registry
        assert registry.size() == 1

    def test_add_same_connection_twice(self, registry):
        """Test adding the same connection keeps a single entry."""
        ws = create_mock_websocket()

        registry.add(ws)
        registry.add(ws)

        assert registry.size() == 1

    def test_add_multiple(self, registry):
        """Test adding multiple connections."""
        connections = [create_mock_websocket(port=50000 + i) for i in range(3)]

        for ws in connections:
            registry.add(ws)

        assert registry.size() == 3
        for ws in connections:
            assert ws in registry

    def test_remove(self, registry):
        """Test removing a connection."""
        ws = create_mock_websocket()
        registry.add(ws)

        assert registry.remove(ws) is True
        assert ws not in registry
        assert registry.size() == 0

    def test_remove_nonexistent(self, registry):
        """Test removing a connection that was never added (should do nothing)."""
        ws1 = create_mock_websocket(port=50001)
        ws2 = create_mock_websocket(port=50002)
        registry.add(ws1)

        assert registry.remove(ws2) is False
        assert registry.size() == 1
        assert ws1 in registry

    def test_remove_is_idempotent(self, registry):
        """Test removing the same connection twice."""
        ws = create_mock_websocket()
        registry.add(ws)

        assert registry.remove(ws) is True
        assert registry.remove(ws) is False
        assert registry.size() == 0

    def test_snapshot_is_stable_copy(self, registry):
        """Test snapshot is not affected by later mutations."""
        ws1 = create_mock_websocket(port=50001)
        ws2 = create_mock_websocket(port=50002)
        registry.add(ws1)
        registry.add(ws2)

        snapshot = registry.snapshot()
        registry.remove(ws1)
        registry.add(create_mock_websocket(port=50003))

        assert len(snapshot) == 2
        assert ws1 in snapshot
        assert ws2 in snapshot

    def test_contains_uses_identity(self, registry):
        """Test membership is by identity, not equality."""
        ws = create_mock_websocket()
        registry.add(ws)

        assert create_mock_websocket() not in registry
        assert object() not in registry

    def test_size_tracks_connects_minus_disconnects(self, registry):
        """Test size equals connects minus disconnects and never goes negative."""
        rng = random.Random(1234)
        connected = []
        pool = [create_mock_websocket(port=50000 + i) for i in range(20)]

        for _ in range(500):
            if connected and rng.random() < 0.5:
                ws = connected.pop(rng.randrange(len(connected)))
                registry.remove(ws)
            elif len(connected) < len(pool):
                ws = rng.choice([c for c in pool if c not in connected])
                connected.append(ws)
                registry.add(ws)
            else:
                # Removing an absent connection must not change the count
                registry.remove(create_mock_websocket())

            assert registry.size() == len(connected)
            assert registry.size() >= 0

    def test_concurrent_mutations_from_threads(self, registry):
        """Test mutations from several threads keep the count consistent."""
        connections = [create_mock_websocket(port=40000 + i) for i in range(200)]

        def churn(chunk):
            for ws in chunk:
                registry.add(ws)
            for ws in chunk[::2]:
                registry.remove(ws)

        threads = [
            threading.Thread(target=churn, args=(connections[i::4],))
            for i in range(4)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        expected = sum(len(connections[i::4][1::2]) for i in range(4))
        assert registry.size() == expected


class TestConnectionHelpers:
    """Tests for connection state and address helpers."""

    def test_is_connection_open(self):
        """Test open connection is reported as open."""
        assert is_connection_open(create_mock_websocket()) is True

    def test_is_connection_open_when_closed(self):
        """Test closed connection is reported as closed."""
        assert is_connection_open(create_mock_websocket(connected=False)) is False

    def test_is_connection_open_when_application_closed(self):
        """Test a connection closed by the server side is not open."""
        ws = create_mock_websocket()
        ws.application_state = WebSocketState.DISCONNECTED

        assert is_connection_open(ws) is False

    def test_describe_client(self):
        """Test remote address formatting."""
        assert describe_client(create_mock_websocket(port=51234)) == "127.0.0.1:51234"

    def test_describe_client_without_address(self):
        """Test connections without client info."""
        ws = create_mock_websocket()
        ws.client = None

        assert describe_client(ws) == "unknown"


def test_registries_are_independent():
    """Test two registries never share members."""
    first = ConnectionRegistry()
    second = ConnectionRegistry()
    ws = create_mock_websocket()

    first.add(ws)

    assert ws in first
    assert ws not in second
