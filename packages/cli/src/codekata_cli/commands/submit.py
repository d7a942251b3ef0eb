"""submit command — evaluate a solution and record the attempt."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from codekata_cli.state import persist_attempt
from codekata_core.challenges import get_challenge, load_challenges
from codekata_core.decision import rejection_reason
from codekata_core.evaluator import EvaluationRequest, RequestInvalid, evaluate, get_evaluator, is_fallback
from codekata_core.history import HistoryEntry
from codekata_core.scoring import CATEGORIES, CATEGORY_LABELS, MAX_TOTAL_SCORE, ScoreRecord, SubmissionKind

console = Console()

_SEVERITY_STYLE = {"error": "red", "warning": "yellow", "info": "blue"}


def _score_style(score: int) -> str:
    if score >= 8:
        return "green"
    if score >= 6:
        return "yellow"
    return "red"


def print_score_record(record: ScoreRecord, kind: SubmissionKind) -> None:
    """Render a ScoreRecord: rubric, remarks, suggestions and verdict."""
    table = Table(title="Rubric", show_header=True, header_style="bold cyan")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    for name in CATEGORIES:
        score = getattr(record.rubric, name)
        style = _score_style(score)
        table.add_row(CATEGORY_LABELS[name], f"[{style}]{score}[/{style}]/10")
    table.add_row("[bold]Total[/bold]", f"[bold]{record.total_score}[/bold]/{MAX_TOTAL_SCORE}")
    console.print(table)

    if record.feedback_summary:
        console.print(f"\n{record.feedback_summary}\n")

    for c in record.line_comments:
        color = _SEVERITY_STYLE.get(c.severity, "white")
        console.print(f"  line [bold]{c.line_number}[/bold]  [{color}]{c.severity.upper()}[/{color}]  {c.comment}")

    for s in record.diff_suggestions:
        console.print(f"\n[bold]Suggestion:[/bold] {s.explanation}")
        console.print(f"  [red]- {s.original}[/red]")
        console.print(f"  [green]+ {s.suggested}[/green]")

    if record.approved:
        console.print("\n[bold green]APPROVED[/bold green]")
    else:
        # A fallback record's summary already says why.
        reason = None if is_fallback(record) else rejection_reason(record, kind)
        console.print("\n[bold red]REJECTED[/bold red]" + (f" — {reason}" if reason else ""))


@click.command("submit")
@click.option("--task", "task_id", required=True, help="Challenge id (see `codekata challenges`).")
@click.argument("code_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option(
    "--kind",
    type=click.Choice([k.value for k in SubmissionKind]),
    default=None,
    help="Submission kind. Defaults to the challenge's own kind.",
)
@click.option("--timeout", type=float, default=None, help="Evaluation time budget in seconds.")
@click.pass_context
def submit_cmd(ctx, task_id: str, code_file: str, model: str | None, kind: str | None, timeout: float | None):
    """Submit CODE_FILE as a solution to a challenge.

    \b
    Required environment variables:
      ANTHROPIC_API_KEY    Required when using --model anthropic
      OPENAI_API_KEY       Required when using --model openai
    """
    config = dict(ctx.obj["config"])
    if model is not None:
        config["model"] = model
    if timeout is not None:
        config["timeout_seconds"] = timeout

    if config["model"] == "anthropic" and not config.get("anthropic_api_key"):
        raise click.UsageError("ANTHROPIC_API_KEY environment variable is not set.")
    if config["model"] == "openai" and not config.get("openai_api_key"):
        raise click.UsageError("OPENAI_API_KEY environment variable is not set.")

    try:
        challenges = load_challenges(config.get("challenges"))
    except (FileNotFoundError, ValueError) as e:
        raise click.UsageError(str(e))
    challenge = get_challenge(challenges, task_id)
    if challenge is None:
        raise click.UsageError(f"Unknown challenge {task_id!r}. Run `codekata challenges` to list them.")

    code = Path(code_file).read_text(encoding="utf-8", errors="replace")
    submission_kind = SubmissionKind(kind) if kind else challenge.kind
    request = EvaluationRequest(
        code=code,
        requirements=challenge.requirements,
        task_id=challenge.id,
        kind=submission_kind,
    )

    evaluator = get_evaluator(config)
    try:
        with console.status(f"Evaluating {challenge.title}..."):
            record = evaluate(
                request,
                evaluator,
                timeout=float(config["timeout_seconds"]),
                max_code_chars=int(config["max_code_chars"]),
            )
    except RequestInvalid as e:
        raise click.UsageError(str(e))

    session = ctx.obj["session"]
    entry = HistoryEntry(task_id=challenge.id, record=record, code=code)
    xp = session.record(entry, xp_reward=challenge.xp)
    persist_attempt(ctx.obj["store"], session, entry)

    print_score_record(record, submission_kind)

    change = session.task_delta(challenge.id)
    if change is None:
        console.print("[dim]First attempt at this challenge.[/dim]")
    else:
        sign = "+" if change >= 0 else ""
        console.print(f"Change since previous attempt: [bold]{sign}{change}[/bold]")
    if xp:
        console.print(f"[green]+{xp} XP[/green] — total {session.progress.total_xp} XP")
