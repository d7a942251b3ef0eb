"""Explicitly owned per-session state.

A SessionContext holds everything that changes while someone practices:
accumulated XP, the set of completed tasks, and the attempt history. It is
constructed by the caller (the CLI builds one from the configured store)
and passed to whatever needs it; there is no module-level session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from codekata_core.history import AggregateStatistics, HistoryEntry, aggregate, delta, entries_for_task

logger = logging.getLogger(__name__)


@dataclass
class Progress:
    total_xp: int = 0
    completed_tasks: set[str] = field(default_factory=set)


@dataclass
class SessionContext:
    progress: Progress = field(default_factory=Progress)
    history: list[HistoryEntry] = field(default_factory=list)

    def record(self, entry: HistoryEntry, xp_reward: int = 0) -> int:
        """Append an attempt and award XP for a first approval of its task.

        Returns the XP awarded by this attempt (0 when rejected or the task
        was already completed).
        """
        self.history.append(entry)
        if not entry.record.approved or entry.task_id in self.progress.completed_tasks:
            return 0
        self.progress.completed_tasks.add(entry.task_id)
        self.progress.total_xp += xp_reward
        logger.debug("Task %s completed, +%d XP", entry.task_id, xp_reward)
        return xp_reward

    def reset(self) -> None:
        self.history.clear()
        self.progress = Progress()

    def task_history(self, task_id: str) -> list[HistoryEntry]:
        return entries_for_task(self.history, task_id)

    def task_delta(self, task_id: str) -> int | None:
        return delta(self.task_history(task_id))

    def statistics(self, task_id: str | None = None) -> AggregateStatistics:
        # Snapshot so a concurrent append cannot change the sequence mid-scan.
        entries = list(self.history) if task_id is None else self.task_history(task_id)
        return aggregate(entries)
