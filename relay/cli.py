"""
CLI tool for running and inspecting the relay.

Provides commands for starting the server, viewing the effective
configuration and listing the mounted routes.
"""

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from starlette.routing import WebSocketRoute

from relay.settings import app_settings

# Initialize Typer app with help text
typer_app = typer.Typer(
    name="relay",
    help="Broadcast relay CLI - Run and inspect the WebSocket relay server",
    add_completion=False,
)
console = Console()


@typer_app.command(name="serve")
def serve(
    host: str = typer.Option(
        None, "--host", help="Interface to bind (default: HOST setting)"
    ),
    port: int = typer.Option(
        None, "--port", "-p", help="Port to listen on (default: PORT setting)"
    ),
    reload: bool = typer.Option(
        False, "--reload", help="Restart the server on code changes"
    ),
):
    """
    Start the relay server with uvicorn.

    SIGINT/SIGTERM stop accepting new connections and close the listening
    socket; open connections are not drained.

    Examples:
        relay serve
        PORT=9000 relay serve
        relay serve --host 127.0.0.1 --port 8081 --reload
    """
    bind_host = host or app_settings.HOST
    bind_port = port or app_settings.PORT

    console.print(
        Panel.fit(
            f"[bold cyan]Broadcast relay[/bold cyan]\n\n"
            f"HTTP:      [yellow]http://{bind_host}:{bind_port}/[/yellow]\n"
            f"WebSocket: [yellow]ws://{bind_host}:{bind_port}/[/yellow]",
            border_style="cyan",
        )
    )

    uvicorn.run(
        "relay:application",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        timeout_graceful_shutdown=app_settings.SHUTDOWN_TIMEOUT_SECONDS,
        log_config=None,  # Keep the handlers installed by relay.logging
    )


@typer_app.command(name="show-settings")
def show_settings():
    """
    Display the effective settings after environment overrides.

    Example:
        ENV=production relay show-settings
    """
    table = Table(
        "Setting",
        "Value",
        title="Relay Settings",
        show_lines=True,
    )

    for name, value in app_settings.model_dump(mode="json").items():
        table.add_row(f"[cyan]{name}[/cyan]", str(value))

    console.print()
    console.print(table)
    console.print()


def _iter_routes(routes):
    """Yield routes that have a path, descending into included routers."""
    for route in routes:
        if getattr(route, "path", None) is not None:
            yield route
            continue

        nested = getattr(route, "routes", None)
        if nested is None:
            nested = getattr(getattr(route, "router", None), "routes", None)
        if nested:
            yield from _iter_routes(nested)


@typer_app.command(name="routes")
def routes():
    """
    Display a table of all HTTP and WebSocket routes.

    Example:
        relay routes
    """
    from relay import application

    table = Table(
        "Type",
        "Path",
        "Name",
        title="Mounted Routes",
        show_lines=True,
    )

    for route in _iter_routes(application().routes):
        kind = (
            "[magenta]websocket[/magenta]"
            if isinstance(route, WebSocketRoute)
            else "[green]http[/green]"
        )
        table.add_row(kind, route.path, getattr(route, "name", None) or "")

    console.print()
    console.print(table)
    console.print()


if __name__ == "__main__":
    typer_app()
