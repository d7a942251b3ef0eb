"""No-op store — the default when no store is configured.

Attempts are evaluated and shown but not kept between runs. Using a
NoOpStore rather than None lets the CLI always call the store without
conditional checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from codekata_store.base import BaseStore
from codekata_store.models import ProgressRecord

if TYPE_CHECKING:
    from codekata_store.models import AttemptRecord


class NoOpStore(BaseStore):
    """Silently discards everything — zero configuration required."""

    def save_attempt(self, record: AttemptRecord) -> None:
        pass

    def list_attempts(self, task_id: str | None = None) -> list[AttemptRecord]:
        return []

    def clear_attempts(self) -> None:
        pass

    def load_progress(self) -> ProgressRecord:
        return ProgressRecord()

    def save_progress(self, progress: ProgressRecord) -> None:
        pass
