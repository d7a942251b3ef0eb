"""reset command — clear attempt history and progress."""

from __future__ import annotations

import click
from rich.console import Console

from codekata_cli.state import reset_store

console = Console()


@click.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_context
def reset_cmd(ctx, yes: bool):
    """Delete all recorded attempts, XP and completed challenges."""
    if not yes and not click.confirm("This deletes your whole practice history. Continue?"):
        console.print("[yellow]Nothing changed.[/yellow]")
        return

    ctx.obj["session"].reset()
    reset_store(ctx.obj["store"])
    console.print("[green]History and progress cleared.[/green]")
