"""Trend statistics over the attempt history.

History is an append-only, time-ordered sequence of HistoryEntry values.
Nothing here keeps running totals: every statistic is recomputed from the
full sequence on each call, so clearing or reloading the history can never
leave stale derived state behind. All functions are pure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from codekata_core.scoring import CATEGORIES, ScoreRecord, Verdict


@dataclass(frozen=True)
class HistoryEntry:
    """One evaluated attempt at a task.

    ``code`` is kept for reviewing attempts within a session; stores may
    drop it.
    """

    task_id: str
    record: ScoreRecord
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())  # ISO-8601 UTC
    code: str = ""


@dataclass(frozen=True)
class ProgressPoint:
    attempt: int  # 1-based position in the scope being aggregated
    task_id: str
    created_at: str
    total_score: int
    status: Verdict


@dataclass(frozen=True)
class AggregateStatistics:
    progression: tuple[ProgressPoint, ...]
    category_averages: dict[str, float]
    strongest_category: str
    weakest_category: str
    improvement_rate: float
    total_attempts: int
    approved_count: int
    success_rate: float
    average_total: float
    best_total: int


def entries_for_task(entries: list[HistoryEntry], task_id: str) -> list[HistoryEntry]:
    return [e for e in entries if e.task_id == task_id]


def _strongest_and_weakest(averages: dict[str, float]) -> tuple[str, str]:
    # Strict comparisons keep the first category in CATEGORIES order on ties.
    strongest = weakest = CATEGORIES[0]
    for name in CATEGORIES[1:]:
        if averages[name] > averages[strongest]:
            strongest = name
        if averages[name] < averages[weakest]:
            weakest = name
    return strongest, weakest


def improvement_rate(entries: list[HistoryEntry]) -> float:
    """Average change in total score per attempt across the whole sequence.

    ``(last - first) / (n - 1)``; 0.0 when there are fewer than two entries.
    """
    if len(entries) < 2:
        return 0.0
    first = entries[0].record.total_score
    last = entries[-1].record.total_score
    return (last - first) / (len(entries) - 1)


def delta(task_entries: list[HistoryEntry]) -> int | None:
    """Total-score change between the latest attempt and the one before it.

    Returns None ("no prior attempt") when there are fewer than two entries.
    """
    if len(task_entries) < 2:
        return None
    return task_entries[-1].record.total_score - task_entries[-2].record.total_score


def aggregate(entries: list[HistoryEntry]) -> AggregateStatistics:
    """Fold a history sequence into trend statistics.

    Defined for any length. An empty history yields zero averages and rates,
    with both strongest and weakest category defaulting to the first
    category in CATEGORIES.
    """
    count = len(entries)
    progression = tuple(
        ProgressPoint(
            attempt=i,
            task_id=e.task_id,
            created_at=e.created_at,
            total_score=e.record.total_score,
            status=e.record.status,
        )
        for i, e in enumerate(entries, 1)
    )

    sums = {name: 0 for name in CATEGORIES}
    for e in entries:
        for name, score in e.record.rubric.as_dict().items():
            sums[name] += score
    averages = {name: (sums[name] / count if count else 0.0) for name in CATEGORIES}
    strongest, weakest = _strongest_and_weakest(averages)

    approved = sum(1 for e in entries if e.record.status is Verdict.APPROVED)
    totals = [e.record.total_score for e in entries]

    return AggregateStatistics(
        progression=progression,
        category_averages=averages,
        strongest_category=strongest,
        weakest_category=weakest,
        improvement_rate=improvement_rate(entries),
        total_attempts=count,
        approved_count=approved,
        success_rate=approved / count if count else 0.0,
        average_total=sum(totals) / count if count else 0.0,
        best_total=max(totals, default=0),
    )


def aggregate_by_task(entries: list[HistoryEntry]) -> dict[str, AggregateStatistics]:
    """Per-task statistics, keyed in order of each task's first attempt."""
    grouped: dict[str, list[HistoryEntry]] = {}
    for e in entries:
        grouped.setdefault(e.task_id, []).append(e)
    return {task_id: aggregate(task_entries) for task_id, task_entries in grouped.items()}
