"""Abstract store interface.

Any storage backend (SQLite, Gist, something else) implements this
interface. The CLI depends on BaseStore, not on a concrete backend, so
backends are swappable without touching CLI code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codekata_store.models import AttemptRecord, ProgressRecord


class BaseStore(ABC):
    """Pluggable persistence layer for attempt history and progress.

    Reads must never raise: an unavailable backend degrades to an empty
    history and default progress. Writes report failures but the caller
    treats persistence as best effort.
    """

    @abstractmethod
    def save_attempt(self, record: AttemptRecord) -> None:
        """Append one attempt to the history."""

    @abstractmethod
    def list_attempts(self, task_id: str | None = None) -> list[AttemptRecord]:
        """Return attempts oldest first, optionally for one task.

        Returns an empty list if nothing is stored or the backend fails.
        """

    @abstractmethod
    def clear_attempts(self) -> None:
        """Remove the whole attempt history (session reset)."""

    @abstractmethod
    def load_progress(self) -> ProgressRecord:
        """Return stored progress, or a default ProgressRecord."""

    @abstractmethod
    def save_progress(self, progress: ProgressRecord) -> None:
        """Replace stored progress."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional — subclasses that need cleanup should override this.
        Default is a no-op so callers can always call close() safely.
        """
