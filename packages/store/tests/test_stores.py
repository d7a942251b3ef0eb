"""Tests for codekata-store implementations."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from unittest.mock import MagicMock

from codekata_store.gist import GistStore
from codekata_store.models import AttemptRecord, ProgressRecord
from codekata_store.noop import NoOpStore
from codekata_store.sqlite import SQLiteStore


def _score(total=42, status="APPROVED"):
    return {
        "total_score": total,
        "rubric": {
            "functional_correctness": 8,
            "code_readability": 7,
            "structure_modularity": 7,
            "performance_efficiency": 7,
            "security_practices": 7,
            "error_handling": 6,
        },
        "status": status,
        "feedback_summary": "ok",
        "line_comments": [{"line_number": 1, "comment": "c", "severity": "info"}],
        "diff_suggestions": [],
    }


def _make_record(task_id="fizzbuzz", code="print(1)"):
    return AttemptRecord(
        task_id=task_id,
        created_at=datetime.now(timezone.utc).isoformat(),
        score=_score(),
        code=code,
    )


# ---------------------------------------------------------------------------
# NoOpStore
# ---------------------------------------------------------------------------


class TestNoOpStore:
    def test_save_does_not_raise(self):
        NoOpStore().save_attempt(_make_record())

    def test_list_attempts_returns_empty(self):
        store = NoOpStore()
        store.save_attempt(_make_record())
        assert store.list_attempts() == []
        assert store.list_attempts(task_id="fizzbuzz") == []

    def test_progress_is_default(self):
        store = NoOpStore()
        store.save_progress(ProgressRecord(total_xp=10, completed_tasks=["a"]))
        assert store.load_progress() == ProgressRecord()


# ---------------------------------------------------------------------------
# SQLiteStore
# ---------------------------------------------------------------------------


class TestSQLiteStore:
    def test_save_and_list(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        record = _make_record()
        store.save_attempt(record)

        results = store.list_attempts()
        assert results == [record]
        store.close()

    def test_list_by_task(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save_attempt(_make_record(task_id="a"))
        store.save_attempt(_make_record(task_id="b"))

        results = store.list_attempts(task_id="a")
        assert len(results) == 1
        assert results[0].task_id == "a"
        store.close()

    def test_keeps_insertion_order(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        for task in ("c", "a", "b"):
            store.save_attempt(_make_record(task_id=task))
        assert [r.task_id for r in store.list_attempts()] == ["c", "a", "b"]
        store.close()

    def test_clear_attempts(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save_attempt(_make_record())
        store.clear_attempts()
        assert store.list_attempts() == []
        store.close()

    def test_progress_defaults_when_unset(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        assert store.load_progress() == ProgressRecord()
        store.close()

    def test_progress_roundtrip_and_overwrite(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save_progress(ProgressRecord(total_xp=50, completed_tasks=["fizzbuzz"]))
        store.save_progress(ProgressRecord(total_xp=200, completed_tasks=["rate-limiter", "fizzbuzz"]))

        progress = store.load_progress()
        assert progress.total_xp == 200
        assert progress.completed_tasks == ["fizzbuzz", "rate-limiter"]
        store.close()

    def test_persists_across_connections(self, tmp_path):
        db_path = str(tmp_path / "test.db")
        store_a = SQLiteStore(db_path=db_path)
        store_a.save_attempt(_make_record())
        store_a.save_progress(ProgressRecord(total_xp=5))
        store_a.close()

        store_b = SQLiteStore(db_path=db_path)
        assert len(store_b.list_attempts()) == 1
        assert store_b.load_progress().total_xp == 5
        store_b.close()

    def test_unreadable_score_row_skipped(self, tmp_path):
        db_path = str(tmp_path / "test.db")
        store = SQLiteStore(db_path=db_path)
        store.save_attempt(_make_record(task_id="good"))
        store._conn.execute(
            "INSERT INTO attempts (task_id, created_at, score_json) VALUES ('bad', 'now', '{not json')"
        )
        store._conn.commit()

        assert [r.task_id for r in store.list_attempts()] == ["good"]
        store.close()

    def test_progress_defaults_when_stored_values_are_malformed(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store._conn.execute(
            "INSERT INTO progress (id, total_xp, completed_json) VALUES (1, 'lots', '{\"a\": 1}')"
        )
        store._conn.commit()

        assert store.load_progress() == ProgressRecord()
        store.close()

    def test_reads_degrade_when_connection_fails(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store._conn = MagicMock()
        store._conn.execute.side_effect = sqlite3.OperationalError("disk I/O error")

        assert store.list_attempts() == []
        assert store.load_progress() == ProgressRecord()

    def test_write_failure_warns_instead_of_raising(self, tmp_path, capsys):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store._conn = MagicMock()
        store._conn.execute.side_effect = sqlite3.OperationalError("database or disk is full")

        store.save_attempt(_make_record())

        assert "Warning" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# GistStore
# ---------------------------------------------------------------------------


def _make_gist_mock(attempts: list[dict] | None = None, progress: dict | None = None):
    gist = MagicMock()
    files = {}
    if attempts is not None:
        files["codekata_attempts.json"] = MagicMock(content=json.dumps(attempts))
    if progress is not None:
        files["codekata_progress.json"] = MagicMock(content=json.dumps(progress))
    gist.files = files
    return gist


def _make_gist_store():
    """Return a GistStore with a mocked Github client."""
    # Github is a local import inside __init__, so bypass it entirely
    # by constructing the object and injecting the mock client directly.
    store = object.__new__(GistStore)
    store._gist_id = "abc123"
    store._gh = MagicMock()
    return store


def _written(gist, filename):
    return json.loads(gist.edit.call_args[1]["files"][filename]["content"])


class TestGistStore:
    def test_save_appends_record_without_code(self):
        store = _make_gist_store()
        gist = _make_gist_mock(attempts=[])
        store._gh.get_gist.return_value = gist

        store.save_attempt(_make_record(code="secret = 1"))

        content = _written(gist, "codekata_attempts.json")
        assert len(content) == 1
        assert content[0]["task_id"] == "fizzbuzz"
        assert content[0]["score"]["total_score"] == 42
        assert "code" not in content[0]

    def test_save_appends_to_existing_records(self):
        existing = [GistStore._to_dict(_make_record(task_id="a"))]
        store = _make_gist_store()
        gist = _make_gist_mock(attempts=existing)
        store._gh.get_gist.return_value = gist

        store.save_attempt(_make_record(task_id="b"))

        assert [r["task_id"] for r in _written(gist, "codekata_attempts.json")] == ["a", "b"]

    def test_save_does_not_raise_on_exception(self, capsys):
        store = _make_gist_store()
        store._gh.get_gist.side_effect = Exception("network error")

        store.save_attempt(_make_record())

        assert "Warning" in capsys.readouterr().out

    def test_list_attempts_filters_by_task(self):
        records = [GistStore._to_dict(_make_record(task_id=t)) for t in ("a", "b", "a")]
        store = _make_gist_store()
        store._gh.get_gist.return_value = _make_gist_mock(attempts=records)

        assert len(store.list_attempts()) == 3
        assert len(store.list_attempts(task_id="a")) == 2

    def test_list_attempts_returns_empty_on_exception(self):
        store = _make_gist_store()
        store._gh.get_gist.side_effect = Exception("rate limited")
        assert store.list_attempts() == []

    def test_list_attempts_handles_missing_file(self):
        store = _make_gist_store()
        store._gh.get_gist.return_value = _make_gist_mock()
        assert store.list_attempts() == []

    def test_list_attempts_handles_corrupt_file(self):
        store = _make_gist_store()
        gist = MagicMock()
        gist.files = {"codekata_attempts.json": MagicMock(content="{not json")}
        store._gh.get_gist.return_value = gist
        assert store.list_attempts() == []

    def test_clear_attempts_writes_empty_array(self):
        store = _make_gist_store()
        gist = _make_gist_mock(attempts=[GistStore._to_dict(_make_record())])
        store._gh.get_gist.return_value = gist

        store.clear_attempts()

        assert _written(gist, "codekata_attempts.json") == []

    def test_progress_roundtrip(self):
        store = _make_gist_store()
        store._gh.get_gist.return_value = _make_gist_mock(
            progress={"total_xp": 120, "completed_tasks": ["fizzbuzz"]}
        )
        progress = store.load_progress()
        assert progress.total_xp == 120
        assert progress.completed_tasks == ["fizzbuzz"]

    def test_save_progress_sorts_tasks(self):
        store = _make_gist_store()
        gist = _make_gist_mock()
        store._gh.get_gist.return_value = gist

        store.save_progress(ProgressRecord(total_xp=7, completed_tasks=["b", "a"]))

        assert _written(gist, "codekata_progress.json") == {"total_xp": 7, "completed_tasks": ["a", "b"]}

    def test_load_progress_defaults_on_exception(self):
        store = _make_gist_store()
        store._gh.get_gist.side_effect = Exception("offline")
        assert store.load_progress() == ProgressRecord()

    def test_load_progress_defaults_on_wrong_value_types(self):
        store = _make_gist_store()
        store._gh.get_gist.return_value = _make_gist_mock(progress={"total_xp": "lots", "completed_tasks": 3})
        assert store.load_progress() == ProgressRecord()

    def test_load_progress_defaults_on_non_string_task_ids(self):
        store = _make_gist_store()
        store._gh.get_gist.return_value = _make_gist_mock(progress={"total_xp": 10, "completed_tasks": [1, None]})
        assert store.load_progress() == ProgressRecord()

    def test_load_progress_defaults_when_file_is_not_an_object(self):
        store = _make_gist_store()
        store._gh.get_gist.return_value = _make_gist_mock(progress=[1, 2])
        assert store.load_progress() == ProgressRecord()

    def test_list_attempts_handles_scalar_file(self):
        store = _make_gist_store()
        store._gh.get_gist.return_value = _make_gist_mock(attempts=7)
        assert store.list_attempts() == []

    def test_save_replaces_scalar_attempts_file(self):
        store = _make_gist_store()
        gist = _make_gist_mock(attempts="oops")
        store._gh.get_gist.return_value = gist

        store.save_attempt(_make_record())

        assert len(_written(gist, "codekata_attempts.json")) == 1

    def test_from_dict_drops_non_object_score(self):
        restored = GistStore._from_dict({"task_id": "a", "created_at": "now", "score": "n/a"})
        assert restored.score == {}

    def test_to_dict_from_dict_roundtrip(self):
        record = _make_record()
        restored = GistStore._from_dict(GistStore._to_dict(record))
        assert restored.task_id == record.task_id
        assert restored.created_at == record.created_at
        assert restored.score == record.score
        assert restored.code == ""
