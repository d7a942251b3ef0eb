"""history command — list past attempts from the store."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from codekata_core.scoring import MAX_TOTAL_SCORE

console = Console()


def require_store(ctx) -> None:
    from codekata_store.noop import NoOpStore

    store = ctx.obj.get("store") if ctx.obj else None
    if store is None or isinstance(store, NoOpStore):
        raise click.UsageError(
            "No store configured. Add 'store: sqlite' or 'store: gist' to .codekata.yml to keep history."
        )


@click.command("history")
@click.option("--task", "task_id", default=None, help="Only show attempts for this challenge.")
@click.option("--limit", default=20, show_default=True, help="Maximum number of attempts to show.")
@click.pass_context
def history_cmd(ctx, task_id: str | None, limit: int):
    """Show past attempts, most recent first."""
    require_store(ctx)

    session = ctx.obj["session"]
    entries = session.history if task_id is None else session.task_history(task_id)
    if not entries:
        console.print("[yellow]No attempts found.[/yellow]")
        return

    numbered = list(enumerate(entries, 1))
    rows = list(reversed(numbered))[:limit]

    title = f"Attempts — {task_id}" if task_id else "Attempts"
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", width=4)
    table.add_column("Challenge", max_width=30)
    table.add_column("Score", justify="right", width=8)
    table.add_column("Status", width=10)
    table.add_column("Submitted At", width=20)

    for attempt, e in rows:
        style = "green" if e.record.approved else "red"
        table.add_row(
            str(attempt),
            e.task_id,
            f"{e.record.total_score}/{MAX_TOTAL_SCORE}",
            f"[{style}]{e.record.status.value}[/{style}]",
            e.created_at[:19].replace("T", " "),
        )

    console.print(table)
