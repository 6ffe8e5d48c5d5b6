"""Agents command - inspect the agent registry."""

import typer
from rich.console import Console
from rich.table import Table

from boardroom.core.domain.agents import get_profile, list_profiles
from boardroom.core.domain.errors import UnknownAgentError

app = typer.Typer(help="Agent registry")
console = Console()


@app.command("list")
def list_agents():
    """List all agents with their tools."""
    table = Table(title="Agents")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Role", style="white")
    table.add_column("Tools", style="green")

    for profile in list_profiles():
        table.add_row(profile.id, profile.name, profile.role, ", ".join(profile.tools))

    console.print(table)


@app.command("show")
def show_agent(agent_id: str = typer.Argument(..., help="Agent id")):
    """Show one agent's rosters and expertise."""
    try:
        profile = get_profile(agent_id)
    except UnknownAgentError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold]{profile.name}[/bold] ({profile.id})")
    console.print(f"[bold]Role:[/bold] {profile.role}")
    console.print(f"[bold]Tools:[/bold] {', '.join(profile.tools)}")
    console.print(f"[bold]Delegates to:[/bold] {', '.join(d.value for d in profile.delegates_to)}")
    console.print(f"[bold]Expertise:[/bold] {', '.join(profile.expertise)}")
