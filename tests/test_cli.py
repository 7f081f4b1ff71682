"""Tests for the relay command line interface."""

from types import SimpleNamespace
from unittest.mock import patch

from starlette.routing import Route, WebSocketRoute
from typer.testing import CliRunner

from relay.api.ws.consumers.web import Web
from relay.cli import typer_app

runner = CliRunner()


def test_show_settings():
    """Test show-settings prints the effective configuration."""
    result = runner.invoke(typer_app, ["show-settings"])

    assert result.exit_code == 0
    assert "PORT" in result.output
    assert "SHUTDOWN_TIMEOUT_SECONDS" in result.output


def test_routes_lists_static_and_websocket_routes():
    """Test routes lists the mounted paths."""
    result = runner.invoke(typer_app, ["routes"])

    assert result.exit_code == 0
    assert "/client.js" in result.output
    assert "websocket" in result.output


def test_serve_uses_settings_by_default():
    """Test serve starts uvicorn with the app factory and configured port."""
    with patch("relay.cli.uvicorn.run") as mock_run:
        result = runner.invoke(typer_app, ["serve"])

    assert result.exit_code == 0
    mock_run.assert_called_once()
    args, kwargs = mock_run.call_args
    assert args == ("relay:application",)
    assert kwargs["factory"] is True
    assert kwargs["port"] == 8080
    assert kwargs["reload"] is False


def test_serve_options_override_settings():
    """Test --host and --port take precedence over settings."""
    with patch("relay.cli.uvicorn.run") as mock_run:
        result = runner.invoke(
            typer_app, ["serve", "--host", "127.0.0.1", "--port", "9001"]
        )

    assert result.exit_code == 0
    kwargs = mock_run.call_args.kwargs
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9001


def test_routes_descends_into_included_routers():
    """Test routes wrapped in included-router entries without a path are listed."""
    websocket = WebSocketRoute("/", endpoint=Web, name="Web")
    included = SimpleNamespace(router=SimpleNamespace(routes=[websocket]))
    grouped = SimpleNamespace(routes=[included, Route("/health", endpoint=lambda r: None)])
    app = SimpleNamespace(routes=[grouped])

    with patch("relay.application", return_value=app):
        result = runner.invoke(typer_app, ["routes"])

    assert result.exit_code == 0, result.output
    assert "/health" in result.output
    assert "websocket" in result.output
