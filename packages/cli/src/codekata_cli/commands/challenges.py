"""challenges command — list the challenge catalog."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from codekata_core.challenges import load_challenges
from codekata_core.scoring import SubmissionKind

console = Console()


@click.command("challenges")
@click.pass_context
def challenges_cmd(ctx):
    """List available challenges and which ones you have completed."""
    config = ctx.obj["config"]
    try:
        challenges = load_challenges(config.get("challenges"))
    except (FileNotFoundError, ValueError) as e:
        raise click.UsageError(str(e))

    completed = ctx.obj["session"].progress.completed_tasks

    table = Table(title="Challenges", show_header=True, header_style="bold cyan")
    table.add_column("Id", style="bold")
    table.add_column("Title")
    table.add_column("Kind")
    table.add_column("XP", justify="right")
    table.add_column("Done", justify="center")
    for c in challenges:
        kind = "[red]incident[/red]" if c.kind is SubmissionKind.PRODUCTION_INCIDENT else "standard"
        table.add_row(c.id, c.title, kind, str(c.xp), "[green]✓[/green]" if c.id in completed else "")
    console.print(table)
