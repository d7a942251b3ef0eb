"""Validation of untrusted assessment payloads.

The evaluation service is asked for a JSON object in the ScoreRecord wire
shape, but nothing it returns is trusted. validate() checks the payload
field by field, in a fixed order, and returns either a ScoreRecord or a
ValidationFailure describing the first problem found. It never raises.

The reported ``total_score`` only has to be present and numeric; the
record's total is always recomputed from the six category scores.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from codekata_core.scoring import (
    CATEGORIES,
    MAX_CATEGORY_SCORE,
    SEVERITIES,
    DiffSuggestion,
    LineComment,
    Rubric,
    ScoreRecord,
    Verdict,
)

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    MALFORMED_PAYLOAD = "MalformedPayload"
    MISSING_FIELD = "MissingField"
    OUT_OF_RANGE_SCORE = "OutOfRangeScore"
    INVALID_VERDICT = "InvalidVerdict"


@dataclass(frozen=True)
class ValidationFailure:
    kind: FailureKind
    field: str | None = None
    detail: str = ""

    def __str__(self) -> str:
        where = f" [{self.field}]" if self.field else ""
        return f"{self.kind.value}{where}: {self.detail}" if self.detail else f"{self.kind.value}{where}"


def _strip_fence(text: str) -> str:
    # Only the outer ```json ... ``` wrapper; fences inside string values stay.
    cleaned = re.sub(r"^```(?:json)?\s*", "", text.strip())
    return re.sub(r"\s*```$", "", cleaned.strip())


def _first_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` span in text, honouring JSON strings."""
    start = text.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def parse_payload(raw: Any) -> Any:
    """Turn raw service output into a parsed structure.

    Mappings pass through untouched. Text is tried as JSON after removing a
    markdown fence; if that fails, the first JSON object embedded in the
    surrounding prose is tried. Returns None when nothing parses.
    """
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if not isinstance(raw, str):
        return None

    cleaned = _strip_fence(raw)
    try:
        return json.loads(cleaned)
    except (ValueError, RecursionError):
        pass

    candidate = _first_object(cleaned)
    if candidate is None:
        return None
    try:
        return json.loads(candidate)
    except (ValueError, RecursionError):
        logger.debug("Embedded JSON object did not parse: %s", candidate[:200])
        return None


def _as_int(value: Any) -> int | None:
    """Return value as an int if it is an integral number, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _line_comments(items: list) -> tuple[LineComment, ...] | ValidationFailure:
    comments = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            return ValidationFailure(FailureKind.MALFORMED_PAYLOAD, "line_comments", f"entry {i} is not an object")
        line = _as_int(item.get("line_number"))
        text = item.get("comment")
        severity = item.get("severity")
        if line is None or line < 1:
            return ValidationFailure(FailureKind.MALFORMED_PAYLOAD, "line_comments", f"entry {i} has a bad line_number")
        if not isinstance(text, str):
            return ValidationFailure(FailureKind.MALFORMED_PAYLOAD, "line_comments", f"entry {i} has no comment text")
        if severity not in SEVERITIES:
            return ValidationFailure(
                FailureKind.MALFORMED_PAYLOAD, "line_comments", f"entry {i} has severity {severity!r}"
            )
        comments.append(LineComment(line_number=line, comment=text, severity=severity))
    return tuple(comments)


def _diff_suggestions(items: list) -> tuple[DiffSuggestion, ...] | ValidationFailure:
    suggestions = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            return ValidationFailure(FailureKind.MALFORMED_PAYLOAD, "diff_suggestions", f"entry {i} is not an object")
        values = [item.get(key) for key in ("original", "suggested", "explanation")]
        if not all(isinstance(v, str) for v in values):
            return ValidationFailure(
                FailureKind.MALFORMED_PAYLOAD, "diff_suggestions", f"entry {i} is missing a text field"
            )
        suggestions.append(DiffSuggestion(*values))
    return tuple(suggestions)


def validate(raw: Any) -> ScoreRecord | ValidationFailure:
    """Check raw service output against the ScoreRecord contract.

    Checks run in a fixed order and the first failure wins:
      1. payload parses to a JSON object             → MalformedPayload
      2. total_score present and numeric             → MissingField
      3. six rubric categories, integers in [0, 10]  → OutOfRangeScore
      4. status is APPROVED or REJECTED              → InvalidVerdict
      5. feedback_summary present and a string       → MissingField
      6. line_comments / diff_suggestions are lists
         of well-formed entries                      → MalformedPayload
    """
    payload = parse_payload(raw)
    if not isinstance(payload, dict):
        return ValidationFailure(FailureKind.MALFORMED_PAYLOAD, None, "payload is not a JSON object")

    if not _is_number(payload.get("total_score")):
        return ValidationFailure(FailureKind.MISSING_FIELD, "total_score", "missing or not numeric")

    rubric_data = payload.get("rubric")
    if not isinstance(rubric_data, dict):
        rubric_data = {}
    scores: dict[str, int] = {}
    for name in CATEGORIES:
        score = _as_int(rubric_data.get(name))
        if score is None or not 0 <= score <= MAX_CATEGORY_SCORE:
            return ValidationFailure(
                FailureKind.OUT_OF_RANGE_SCORE, name, f"expected an integer 0-10, got {rubric_data.get(name)!r}"
            )
        scores[name] = score

    status = payload.get("status")
    if status not in (Verdict.APPROVED.value, Verdict.REJECTED.value):
        return ValidationFailure(FailureKind.INVALID_VERDICT, "status", f"got {status!r}")

    summary = payload.get("feedback_summary")
    if not isinstance(summary, str):
        return ValidationFailure(FailureKind.MISSING_FIELD, "feedback_summary", "missing or not text")

    raw_comments = payload.get("line_comments")
    raw_suggestions = payload.get("diff_suggestions")
    if not isinstance(raw_comments, list):
        return ValidationFailure(FailureKind.MALFORMED_PAYLOAD, "line_comments", "missing or not a list")
    if not isinstance(raw_suggestions, list):
        return ValidationFailure(FailureKind.MALFORMED_PAYLOAD, "diff_suggestions", "missing or not a list")

    comments = _line_comments(raw_comments)
    if isinstance(comments, ValidationFailure):
        return comments
    suggestions = _diff_suggestions(raw_suggestions)
    if isinstance(suggestions, ValidationFailure):
        return suggestions

    rubric = Rubric(**scores)
    return ScoreRecord(
        rubric=rubric,
        total_score=rubric.total,
        status=Verdict(status),
        feedback_summary=summary,
        line_comments=comments,
        diff_suggestions=suggestions,
    )
