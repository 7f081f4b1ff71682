"""Tests for the application factory."""

import relay
from relay import application


def test_each_application_owns_its_registry():
    """Test apps built by the factory do not share connection state."""
    first = application()
    second = application()

    assert first.state.registry is not second.state.registry
    assert first.state.broadcaster.registry is first.state.registry
    assert second.state.broadcaster.registry is second.state.registry


def test_import_does_not_build_an_application():
    """Test importing the package exposes the factory without building an app."""
    assert callable(relay.application)
    assert not hasattr(relay, "app")
