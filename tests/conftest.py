"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the relay application, its
connection registry and broadcaster.
"""

import os

import pytest

# Keep test runs from writing error logs into the working tree
os.environ.setdefault("LOG_FILE_PATH", os.devnull)

from fastapi.testclient import TestClient

from relay import application
from relay.managers.broadcaster import Broadcaster
from relay.managers.connection_registry import ConnectionRegistry


@pytest.fixture
def relay_app():
    """
    Provides a fresh application with an empty connection registry.

    Returns:
        FastAPI: Application instance.
    """
    return application()


@pytest.fixture
def client(relay_app):
    """
    Provides a test client with the application lifespan running.

    All WebSocket sessions opened from this client share one event loop.

    Yields:
        TestClient: FastAPI test client instance.
    """
    with TestClient(relay_app) as test_client:
        yield test_client


@pytest.fixture
def registry():
    """Provides an empty ConnectionRegistry."""
    return ConnectionRegistry()


@pytest.fixture
def broadcaster(registry):
    """Provides a Broadcaster bound to the ``registry`` fixture."""
    return Broadcaster(registry)
