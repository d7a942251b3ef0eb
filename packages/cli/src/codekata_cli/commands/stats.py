"""stats command — trend statistics across the attempt history."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from codekata_cli.commands.history import require_store
from codekata_core.history import aggregate_by_task
from codekata_core.scoring import CATEGORIES, CATEGORY_LABELS, Verdict

console = Console()


@click.command("stats")
@click.option("--task", "task_id", default=None, help="Restrict statistics to one challenge.")
@click.pass_context
def stats_cmd(ctx, task_id: str | None):
    """Show score trends, category averages and success rate.

    Statistics are recomputed from the full attempt history on every run.
    """
    require_store(ctx)

    session = ctx.obj["session"]
    stats = session.statistics(task_id)
    if not stats.total_attempts:
        console.print("[yellow]No attempts found.[/yellow]")
        return

    scope = f"[cyan]{task_id}[/cyan]" if task_id else "all challenges"
    console.print(f"\n[bold]Practice stats for {scope}[/bold]")
    console.print(f"  Total attempts:   {stats.total_attempts}")
    console.print(f"  Approved:         {stats.approved_count}")
    console.print(f"  Success rate:     {stats.success_rate * 100:.1f}%")
    console.print(f"  Average total:    {stats.average_total:.1f}")
    console.print(f"  Best total:       {stats.best_total}")
    console.print(f"  Improvement rate: {stats.improvement_rate:+.2f} per attempt")
    if not task_id:
        console.print(f"  XP:               {session.progress.total_xp}")

    # --- Category averages ---
    cat_table = Table(title="Category Averages", show_header=True)
    cat_table.add_column("Category", style="bold")
    cat_table.add_column("Average", justify="right")
    cat_table.add_column("", width=10)
    for name in CATEGORIES:
        marker = ""
        if name == stats.strongest_category:
            marker = "[green]strongest[/green]"
        elif name == stats.weakest_category:
            marker = "[red]weakest[/red]"
        cat_table.add_row(CATEGORY_LABELS[name], f"{stats.category_averages[name]:.1f}", marker)
    console.print(cat_table)

    # --- Progression ---
    prog_table = Table(title="Progression", show_header=True)
    prog_table.add_column("#", justify="right")
    prog_table.add_column("Challenge")
    prog_table.add_column("Total", justify="right")
    prog_table.add_column("Status")
    for point in stats.progression:
        style = "green" if point.status is Verdict.APPROVED else "red"
        prog_table.add_row(
            str(point.attempt), point.task_id, str(point.total_score), f"[{style}]{point.status.value}[/{style}]"
        )
    console.print(prog_table)

    # --- Per challenge ---
    if not task_id:
        task_table = Table(title="Per Challenge", show_header=True)
        task_table.add_column("Challenge")
        task_table.add_column("Attempts", justify="right")
        task_table.add_column("Best", justify="right")
        task_table.add_column("Success", justify="right")
        task_table.add_column("Last change", justify="right")
        for tid, task_stats in aggregate_by_task(session.history).items():
            change = session.task_delta(tid)
            task_table.add_row(
                tid,
                str(task_stats.total_attempts),
                str(task_stats.best_total),
                f"{task_stats.success_rate * 100:.0f}%",
                "—" if change is None else f"{change:+d}",
            )
        console.print(task_table)
