"""Actions command - dispatch external actions through the permission gate."""

import asyncio
import json
from typing import List

import typer
from rich.console import Console
from rich.table import Table

from boardroom.api.cli.context import build_boardroom
from boardroom.core.domain.dispatcher import ACTIONS

app = typer.Typer(help="Dispatch external actions")
console = Console()

RESULT_STYLES = {"success": "green", "pending_approval": "yellow", "error": "red"}


def parse_params(pairs: List[str]) -> dict:
    """Parse key=value pairs; values are read as JSON when possible."""
    params = {}
    for pair in pairs:
        if "=" not in pair:
            raise typer.BadParameter(f"Expected key=value, got '{pair}'")
        key, raw = pair.split("=", 1)
        try:
            params[key] = json.loads(raw)
        except json.JSONDecodeError:
            params[key] = raw
    return params


@app.command("list")
def list_actions():
    """List dispatchable actions."""
    table = Table(title="Actions")
    table.add_column("Action", style="cyan")
    table.add_column("Gateway function", style="white")
    table.add_column("Permission action", style="white")
    for spec in ACTIONS.values():
        table.add_row(spec.name, spec.gateway_function, spec.permission_action)
    console.print(table)


@app.command("dispatch")
def dispatch(
    ctx: typer.Context,
    action: str = typer.Argument(..., help="Action name, e.g. send_email"),
    agent_id: str = typer.Argument(..., help="Agent on whose behalf the action runs"),
    param: List[str] = typer.Option([], "--param", "-p", help="Parameter as key=value (repeatable)"),
):
    """Dispatch one action and print the result."""
    boardroom = build_boardroom(ctx)
    result = asyncio.run(boardroom.dispatcher.dispatch(action, agent_id, parse_params(param)))
    style = RESULT_STYLES.get(result.status.value, "white")
    console.print(f"[{style}]{result.status.value}[/{style}] {action}")
    console.print_json(json.dumps(result.to_dict(), default=str))
    if result.status.value == "error":
        raise typer.Exit(1)
