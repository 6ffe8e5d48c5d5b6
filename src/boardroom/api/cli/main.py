"""Boardroom CLI entry point."""

from typing import Optional

import typer
from rich.console import Console

from boardroom.api.cli.commands import actions, agents, permissions, run

app = typer.Typer(
    name="boardroom",
    help="Boardroom - agent task planning and permission-gated execution",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

app.add_typer(run.app, name="run", help="Process requests through an agent")
app.add_typer(agents.app, name="agents", help="Agent registry")
app.add_typer(permissions.app, name="permissions", help="Permission gate")
app.add_typer(actions.app, name="actions", help="Dispatch external actions")


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Settings YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    offline: bool = typer.Option(False, "--offline", help="Skip the language model; use fallbacks only"),
):
    """Boardroom agent CLI."""
    ctx.obj = {"config": config, "verbose": verbose, "offline": offline}


@app.command()
def version():
    """Show Boardroom version."""
    from boardroom import __version__

    console.print(f"[bold blue]Boardroom[/bold blue] version [cyan]{__version__}[/cyan]")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(8070, "--port", help="Bind port"),
):
    """Start the HTTP API."""
    import uvicorn

    from boardroom.api.server import create_app

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    app()
