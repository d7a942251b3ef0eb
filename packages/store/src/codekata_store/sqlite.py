"""SQLiteStore — local file-based store for a single practitioner.

Schema:
  attempts — one row per evaluated attempt, score kept as its JSON wire
             shape so the CLI can re-validate it on load.
  progress — a single row (id = 1) holding total XP and completed task ids.
"""

from __future__ import annotations

import json
import logging
import sqlite3

from codekata_store.base import BaseStore
from codekata_store.models import AttemptRecord, ProgressRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS attempts (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    task_id     TEXT NOT NULL,
    created_at  TEXT NOT NULL,
    score_json  TEXT NOT NULL,
    code        TEXT DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_attempts_task ON attempts (task_id);
CREATE TABLE IF NOT EXISTS progress (
    id               INTEGER PRIMARY KEY CHECK (id = 1),
    total_xp         INTEGER NOT NULL DEFAULT 0,
    completed_json   TEXT NOT NULL DEFAULT '[]'
);
"""


class SQLiteStore(BaseStore):
    """Stores attempts and progress in a local SQLite database file.

    The database file path defaults to `.codekata.db` in the current working
    directory. Configure via .codekata.yml: `store_path: /path/to/codekata.db`.
    """

    def __init__(self, db_path: str = ".codekata.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def _write(self, action: str, sql: str, params: tuple = ()) -> None:
        try:
            self._conn.execute(sql, params)
            self._conn.commit()
        except sqlite3.Error as e:
            logger.warning("SQLiteStore.%s failed: %s", action, e)
            print(f"Warning: could not save practice history ({type(e).__name__}: {e})")

    def save_attempt(self, record: AttemptRecord) -> None:
        self._write(
            "save_attempt()",
            "INSERT INTO attempts (task_id, created_at, score_json, code) VALUES (?, ?, ?, ?)",
            (record.task_id, record.created_at, json.dumps(record.score), record.code),
        )

    def list_attempts(self, task_id: str | None = None) -> list[AttemptRecord]:
        try:
            if task_id is not None:
                rows = self._conn.execute(
                    "SELECT * FROM attempts WHERE task_id=? ORDER BY id",
                    (task_id,),
                ).fetchall()
            else:
                rows = self._conn.execute("SELECT * FROM attempts ORDER BY id").fetchall()
        except sqlite3.Error as e:
            logger.warning("SQLiteStore.list_attempts() failed: %s", e)
            return []

        records = []
        for row in rows:
            try:
                records.append(self._row_to_record(row))
            except (ValueError, RecursionError):
                logger.warning("Skipping attempt %s with unreadable score JSON", row["id"])
        return records

    def clear_attempts(self) -> None:
        self._write("clear_attempts()", "DELETE FROM attempts")

    def load_progress(self) -> ProgressRecord:
        try:
            row = self._conn.execute("SELECT * FROM progress WHERE id = 1").fetchone()
        except sqlite3.Error as e:
            logger.warning("SQLiteStore.load_progress() failed: %s", e)
            return ProgressRecord()
        if row is None:
            return ProgressRecord()
        try:
            completed = json.loads(row["completed_json"] or "[]")
        except (ValueError, RecursionError):
            logger.warning("Stored completed-task list is unreadable; starting from none")
            completed = []
        return ProgressRecord.from_stored(row["total_xp"] or 0, completed)

    def save_progress(self, progress: ProgressRecord) -> None:
        self._write(
            "save_progress()",
            """
            INSERT INTO progress (id, total_xp, completed_json) VALUES (1, ?, ?)
            ON CONFLICT(id) DO UPDATE SET total_xp=excluded.total_xp, completed_json=excluded.completed_json
            """,
            (progress.total_xp, json.dumps(sorted(progress.completed_tasks))),
        )

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> AttemptRecord:
        return AttemptRecord(
            task_id=row["task_id"],
            created_at=row["created_at"],
            score=json.loads(row["score_json"]),
            code=row["code"] or "",
        )
