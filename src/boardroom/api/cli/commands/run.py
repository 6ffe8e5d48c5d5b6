"""Run command - process a request through an agent's planning pipeline."""

import asyncio
import json

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from boardroom.api.cli.context import build_boardroom
from boardroom.core.domain.agents import get_profile
from boardroom.core.domain.errors import UnknownAgentError

app = typer.Typer(help="Process requests through an agent")
console = Console()

STATUS_STYLES = {"complete": "green", "failed": "red", "thinking": "yellow"}


@app.command("request")
def run_request(
    ctx: typer.Context,
    agent_id: str = typer.Argument(..., help="Agent id, e.g. finance"),
    request: str = typer.Argument(..., help="Request text"),
    output_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
):
    """Process a request and show thoughts, deliverable and response.

    Examples:
        boardroom run request finance "Analyze our Q3 budget"

        boardroom --offline run request strategy "Plan a market entry with the team"
    """
    try:
        profile = get_profile(agent_id)
    except UnknownAgentError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    boardroom = build_boardroom(ctx)

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        task = progress.add_task(f"[>] {profile.name} is thinking...", total=None)

        def on_thought(thought):
            if thought.agent_id == profile.id and thought.thoughts:
                progress.update(task, description=f"[>] {thought.thoughts[-1].content[:80]}")

        unsubscribe = boardroom.thought_stream.subscribe(on_thought)
        try:
            result = asyncio.run(boardroom.orchestrator.process_request(profile.id, request))
        finally:
            unsubscribe()

    if output_json:
        console.print_json(json.dumps(result.to_dict(), default=str))
        return

    table = Table(title=f"{profile.name} - Thoughts")
    table.add_column("Type", style="cyan")
    table.add_column("Status")
    table.add_column("Content", style="white")
    table.add_column("ms", justify="right")
    for step in result.thoughts:
        style = STATUS_STYLES.get(step.status.value, "white")
        table.add_row(
            step.type.value,
            f"[{style}]{step.status.value}[/{style}]",
            step.content[:80],
            f"{step.duration:.0f}" if step.duration is not None else "-",
        )
    console.print(table)

    for deliverable in result.deliverables:
        console.print(
            Panel(Markdown(deliverable.content), title=f"{deliverable.type.value}: {deliverable.title}")
        )

    console.print(Panel(result.response, title="Response", border_style="blue"))
