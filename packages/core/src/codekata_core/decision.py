"""Admission decision: does a scored submission pass?

The verdict is always derived here from the category scores. Whatever
status the evaluation service put in its payload is ignored, so the
service cannot approve work that fails the thresholds below.
"""

from __future__ import annotations

from codekata_core.scoring import ScoreRecord, SubmissionKind, Verdict

MIN_FUNCTIONAL_CORRECTNESS = 7
MIN_SECURITY = 6
MIN_TOTAL = 30
MIN_INCIDENT_PERFORMANCE = 8


def rejection_reason(record: ScoreRecord, kind: SubmissionKind | str) -> str | None:
    """Return the first threshold the record fails, or None if it passes.

    Rules are checked in precedence order; the first match decides.
    """
    kind = SubmissionKind(kind)
    rubric = record.rubric
    if rubric.functional_correctness < MIN_FUNCTIONAL_CORRECTNESS:
        return f"functional correctness below {MIN_FUNCTIONAL_CORRECTNESS}"
    if rubric.security_practices < MIN_SECURITY:
        return f"security below {MIN_SECURITY}"
    if record.total_score < MIN_TOTAL:
        return f"total score below {MIN_TOTAL}"
    if kind is SubmissionKind.PRODUCTION_INCIDENT and rubric.performance_efficiency < MIN_INCIDENT_PERFORMANCE:
        return f"performance below {MIN_INCIDENT_PERFORMANCE} for a production incident"
    return None


def decide(record: ScoreRecord, kind: SubmissionKind | str) -> Verdict:
    if rejection_reason(record, kind) is None:
        return Verdict.APPROVED
    return Verdict.REJECTED
