"""Persisted practice-state models.

Decoupled from codekata_core so the store layer can be used independently
and codekata_core has no knowledge of persistence concerns. The score is
kept in its wire shape (a plain dict); the CLI re-validates it on load.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AttemptRecord:
    """One evaluated attempt persisted to the store."""

    task_id: str
    created_at: str  # ISO-8601 UTC timestamp
    score: dict  # ScoreRecord wire shape
    code: str = ""


@dataclass
class ProgressRecord:
    """Accumulated progress: XP and the ids of completed tasks."""

    total_xp: int = 0
    completed_tasks: list[str] = field(default_factory=list)

    @classmethod
    def from_stored(cls, total_xp, completed_tasks) -> ProgressRecord:
        """Build from values read back from storage.

        Returns the empty default when either value has the wrong shape, so
        a corrupt store never blocks startup.
        """
        if isinstance(total_xp, bool) or not isinstance(total_xp, int) or total_xp < 0:
            return cls()
        if not isinstance(completed_tasks, list) or not all(isinstance(t, str) for t in completed_tasks):
            return cls()
        return cls(total_xp=total_xp, completed_tasks=list(completed_tasks))
