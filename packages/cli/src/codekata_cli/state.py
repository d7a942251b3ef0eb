"""Bridges core session state and the store.

codekata_core has no store knowledge and codekata_store has no core
knowledge; the CLI maps between HistoryEntry/Progress and
AttemptRecord/ProgressRecord here.
"""

from __future__ import annotations

import logging

from codekata_core.history import HistoryEntry
from codekata_core.session import Progress, SessionContext
from codekata_core.validation import ValidationFailure, validate
from codekata_store.base import BaseStore
from codekata_store.models import AttemptRecord, ProgressRecord

logger = logging.getLogger(__name__)


def entry_to_record(entry: HistoryEntry) -> AttemptRecord:
    return AttemptRecord(
        task_id=entry.task_id,
        created_at=entry.created_at,
        score=entry.record.to_dict(),
        code=entry.code,
    )


def record_to_entry(record: AttemptRecord) -> HistoryEntry | None:
    """Rebuild a HistoryEntry, or None if the stored score no longer validates."""
    result = validate(record.score)
    if isinstance(result, ValidationFailure):
        logger.warning("Skipping stored attempt for %s (%s): %s", record.task_id, record.created_at, result)
        return None
    return HistoryEntry(task_id=record.task_id, record=result, created_at=record.created_at, code=record.code)


def load_session(store: BaseStore) -> SessionContext:
    progress = store.load_progress()
    entries = [e for e in (record_to_entry(r) for r in store.list_attempts()) if e is not None]
    return SessionContext(
        progress=Progress(total_xp=progress.total_xp, completed_tasks=set(progress.completed_tasks)),
        history=entries,
    )


def persist_attempt(store: BaseStore, session: SessionContext, entry: HistoryEntry) -> None:
    """Write the latest attempt and the session's current progress."""
    store.save_attempt(entry_to_record(entry))
    store.save_progress(
        ProgressRecord(
            total_xp=session.progress.total_xp,
            completed_tasks=sorted(session.progress.completed_tasks),
        )
    )


def reset_store(store: BaseStore) -> None:
    store.clear_attempts()
    store.save_progress(ProgressRecord())
