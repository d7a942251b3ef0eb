"""GistStore — practice history that follows you between machines.

Data lives in a (secret) GitHub Gist as two JSON files:
  codekata_attempts.json  — JSON array of attempts, newest appended
  codekata_progress.json  — {"total_xp": int, "completed_tasks": [...]}

Submitted code is not uploaded; it is only kept for review within a
session. Gist access can fail (network, rate limit, token scope, file
size), so every read degrades to an empty value and every write failure
is reported as a warning without aborting the command.
"""

from __future__ import annotations

import json
import logging

from codekata_store.base import BaseStore
from codekata_store.models import AttemptRecord, ProgressRecord

logger = logging.getLogger(__name__)

_ATTEMPTS_FILENAME = "codekata_attempts.json"
_PROGRESS_FILENAME = "codekata_progress.json"


class GistStore(BaseStore):
    """Stores attempts and progress in a GitHub Gist.

    list_attempts() reads the full array and filters in memory; fine for
    one person's practice history. The Gist ID is configured in
    .codekata.yml under `gist_id`.
    """

    def __init__(self, gist_id: str, token: str):
        try:
            from github import Github
        except ImportError:
            raise ImportError("PyGithub is required for GistStore. Install it with: pip install PyGithub")
        self._gist_id = gist_id
        self._gh = Github(token)

    def _get_gist(self):
        return self._gh.get_gist(self._gist_id)

    def _write(self, gist, filename: str, content) -> None:
        gist.edit(files={filename: {"content": json.dumps(content, indent=2)}})

    def _warn_write_failed(self, action: str, e: Exception) -> None:
        logger.warning("GistStore.%s failed (%s): %s", action, type(e).__name__, e)
        print(f"Warning: could not sync practice history to Gist ({type(e).__name__}: {e})")

    def save_attempt(self, record: AttemptRecord) -> None:
        try:
            gist = self._get_gist()
            existing = self._read_json(gist, _ATTEMPTS_FILENAME, [])
            existing.append(self._to_dict(record))
            self._write(gist, _ATTEMPTS_FILENAME, existing)
        except Exception as e:
            self._warn_write_failed("save_attempt()", e)

    def list_attempts(self, task_id: str | None = None) -> list[AttemptRecord]:
        try:
            gist = self._get_gist()
            items = self._read_json(gist, _ATTEMPTS_FILENAME, [])
        except Exception as e:
            logger.warning("GistStore.list_attempts() failed: %s", e)
            return []

        results = [self._from_dict(d) for d in items if isinstance(d, dict)]
        if task_id is not None:
            results = [r for r in results if r.task_id == task_id]
        return results

    def clear_attempts(self) -> None:
        try:
            self._write(self._get_gist(), _ATTEMPTS_FILENAME, [])
        except Exception as e:
            self._warn_write_failed("clear_attempts()", e)

    def load_progress(self) -> ProgressRecord:
        try:
            data = self._read_json(self._get_gist(), _PROGRESS_FILENAME, {})
        except Exception as e:
            logger.warning("GistStore.load_progress() failed: %s", e)
            return ProgressRecord()
        return ProgressRecord.from_stored(data.get("total_xp", 0), data.get("completed_tasks", []))

    def save_progress(self, progress: ProgressRecord) -> None:
        try:
            self._write(
                self._get_gist(),
                _PROGRESS_FILENAME,
                {"total_xp": progress.total_xp, "completed_tasks": sorted(progress.completed_tasks)},
            )
        except Exception as e:
            self._warn_write_failed("save_progress()", e)

    @staticmethod
    def _read_json(gist, filename: str, default):
        """Read a JSON file from the Gist, or return ``default``."""
        file_obj = gist.files.get(filename)
        if file_obj is None:
            return default
        try:
            data = json.loads(file_obj.content)
        except (ValueError, TypeError, RecursionError):
            logger.warning("Gist file %s is not valid JSON; ignoring it", filename)
            return default
        if not isinstance(data, type(default)):
            logger.warning(
                "Gist file %s holds a %s, expected a %s; ignoring it",
                filename,
                type(data).__name__,
                type(default).__name__,
            )
            return default
        return data

    @staticmethod
    def _to_dict(record: AttemptRecord) -> dict:
        return {
            "task_id": record.task_id,
            "created_at": record.created_at,
            "score": record.score,
        }

    @staticmethod
    def _from_dict(d: dict) -> AttemptRecord:
        score = d.get("score")
        return AttemptRecord(
            task_id=str(d.get("task_id", "")),
            created_at=str(d.get("created_at", "")),
            score=score if isinstance(score, dict) else {},
        )
