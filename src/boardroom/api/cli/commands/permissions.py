"""Permissions command - query the permission gate."""

from typing import Optional

import typer
from rich.console import Console

from boardroom.api.cli.context import load_settings
from boardroom.core.domain.permissions import PermissionGate

app = typer.Typer(help="Permission gate")
console = Console()


@app.command("check")
def check(
    ctx: typer.Context,
    action: str = typer.Argument(..., help="Permission action name, e.g. send_email"),
    amount: Optional[float] = typer.Option(None, "--amount", "-a", help="Amount for financial actions"),
    agent_id: Optional[str] = typer.Option(None, "--agent", help="Requesting agent"),
):
    """Tell whether an action needs approval under the current settings."""
    settings = load_settings(ctx)
    gate = PermissionGate(
        financial_threshold=settings.financial_approval_threshold,
        require_approval_for_communications=settings.require_approval_for_communications,
    )
    metadata = {"amount": amount} if amount is not None else {}
    if gate.requires_approval(action, agent_id, metadata):
        console.print(f"[yellow]{action}[/yellow] requires approval")
    else:
        console.print(f"[green]{action}[/green] can run without approval")
