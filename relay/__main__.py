from relay.cli import typer_app

typer_app()
