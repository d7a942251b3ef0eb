"""Score record data model.

A ScoreRecord is the validated outcome of one evaluation. Records are
frozen: corrections (a recomputed total, a derived verdict) produce a new
record via dataclasses.replace rather than mutating the original.

The wire shape produced by ScoreRecord.to_dict() is the same JSON object
the evaluation service is asked to return, so a serialized record can be
fed straight back through codekata_core.validation.validate().
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

# Fixed category order. Also the tie-break precedence for strongest/weakest
# category: earlier wins.
CATEGORIES: tuple[str, ...] = (
    "functional_correctness",
    "code_readability",
    "structure_modularity",
    "performance_efficiency",
    "security_practices",
    "error_handling",
)

CATEGORY_LABELS = {
    "functional_correctness": "Functional correctness",
    "code_readability": "Readability",
    "structure_modularity": "Structure / modularity",
    "performance_efficiency": "Performance",
    "security_practices": "Security",
    "error_handling": "Error handling",
}

MAX_CATEGORY_SCORE = 10
MAX_TOTAL_SCORE = MAX_CATEGORY_SCORE * len(CATEGORIES)

SEVERITIES: tuple[str, ...] = ("error", "warning", "info")


class Verdict(str, Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class SubmissionKind(str, Enum):
    STANDARD = "standard"
    PRODUCTION_INCIDENT = "production_incident"


@dataclass(frozen=True)
class LineComment:
    line_number: int
    comment: str
    severity: str  # "error" | "warning" | "info"


@dataclass(frozen=True)
class DiffSuggestion:
    original: str
    suggested: str
    explanation: str


@dataclass(frozen=True)
class Rubric:
    """The six category scores, each an integer in [0, 10]."""

    functional_correctness: int = 0
    code_readability: int = 0
    structure_modularity: int = 0
    performance_efficiency: int = 0
    security_practices: int = 0
    error_handling: int = 0

    def as_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in CATEGORIES}

    @property
    def total(self) -> int:
        return sum(self.as_dict().values())


@dataclass(frozen=True)
class ScoreRecord:
    """A validated evaluation outcome.

    ``total_score`` is derived from the rubric; the validator always
    overwrites whatever total the evaluation service reported.
    """

    rubric: Rubric
    total_score: int
    status: Verdict
    feedback_summary: str
    line_comments: tuple[LineComment, ...] = field(default_factory=tuple)
    diff_suggestions: tuple[DiffSuggestion, ...] = field(default_factory=tuple)

    def with_verdict(self, verdict: Verdict) -> ScoreRecord:
        return replace(self, status=verdict)

    @property
    def approved(self) -> bool:
        return self.status is Verdict.APPROVED

    def to_dict(self) -> dict:
        """Serialize to the boundary wire shape."""
        return {
            "total_score": self.total_score,
            "rubric": self.rubric.as_dict(),
            "status": self.status.value,
            "feedback_summary": self.feedback_summary,
            "line_comments": [
                {"line_number": c.line_number, "comment": c.comment, "severity": c.severity}
                for c in self.line_comments
            ],
            "diff_suggestions": [
                {"original": s.original, "suggested": s.suggested, "explanation": s.explanation}
                for s in self.diff_suggestions
            ],
        }


def fallback_record(summary: str) -> ScoreRecord:
    """Return the REJECTED all-zero record used for every failure path."""
    return ScoreRecord(
        rubric=Rubric(),
        total_score=0,
        status=Verdict.REJECTED,
        feedback_summary=summary,
    )
