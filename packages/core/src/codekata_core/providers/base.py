"""Base evaluator implementing the Template Method pattern.

All providers share the same assessment algorithm:
    assess() → _build_system_prompt() + _build_user_prompt()
             → _call_api()   ← only this differs per provider

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

The provider returns raw text. Parsing, validation and the admission
decision belong to the orchestrator (codekata_core.evaluator), so a
provider can never influence the verdict beyond the scores it reports.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from codekata_core.decision import (
    MIN_FUNCTIONAL_CORRECTNESS,
    MIN_INCIDENT_PERFORMANCE,
    MIN_SECURITY,
    MIN_TOTAL,
)
from codekata_core.scoring import CATEGORIES, SubmissionKind

if TYPE_CHECKING:
    from codekata_core.evaluator import EvaluationRequest

_MAX_TOKENS = 4096
_DEFAULT_TIMEOUT = 10.0


class BaseEvaluator(ABC):
    MAX_TOKENS: int = _MAX_TOKENS

    def __init__(self, timeout: float = _DEFAULT_TIMEOUT):
        self.timeout = timeout

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def assess(self, request: EvaluationRequest) -> str:
        """Ask the model for an assessment of one submission.

        Returns the raw response text. Raises whatever the SDK raises;
        the orchestrator turns faults into a fallback record.
        """
        system = self._build_system_prompt(request.kind)
        user = self._build_user_prompt(request)
        return self._call_api(system, user)

    # ------------------------------------------------------------------ #
    # Abstract — implement in each provider                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response."""

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _build_system_prompt(self, kind: SubmissionKind | str) -> str:
        kind = SubmissionKind(kind)
        rubric_lines = "\n".join(f"- {name}: integer 0-10" for name in CATEGORIES)
        incident_rule = ""
        if kind is SubmissionKind.PRODUCTION_INCIDENT:
            incident_rule = (
                "\nThis is a production incident fix: weigh performance_efficiency heavily; "
                f"anything below {MIN_INCIDENT_PERFORMANCE} is not acceptable."
            )
        return f"""You are a strict senior engineer grading a coding-practice submission.
Score the code against the task requirements on six categories:

{rubric_lines}

Acceptance bar: functional_correctness >= {MIN_FUNCTIONAL_CORRECTNESS}, security_practices >= {MIN_SECURITY}, \
total_score >= {MIN_TOTAL}.{incident_rule}

Rules:
- Judge only the submitted code against the listed requirements.
- Point at concrete lines; line numbers start at 1.
- Be concise and actionable."""

    def _build_user_prompt(self, request: EvaluationRequest) -> str:
        requirements = "\n".join(f"{i}. {req}" for i, req in enumerate(request.requirements, 1))
        return f"""Task `{request.task_id}` ({SubmissionKind(request.kind).value})

## Requirements
{requirements}

## Submitted Code
```
{request.code}
```

### Output Format:
Respond with **only** a valid JSON object:

{{
  "total_score": <sum of the six rubric scores, integer 0-60>,
  "rubric": {{
    "functional_correctness": <0-10>,
    "code_readability": <0-10>,
    "structure_modularity": <0-10>,
    "performance_efficiency": <0-10>,
    "security_practices": <0-10>,
    "error_handling": <0-10>
  }},
  "status": "<APPROVED|REJECTED>",
  "feedback_summary": "<two or three sentences>",
  "line_comments": [
    {{"line_number": <integer >= 1>, "comment": "<text>", "severity": "<error|warning|info>"}}
  ],
  "diff_suggestions": [
    {{"original": "<snippet>", "suggested": "<snippet>", "explanation": "<why>"}}
  ]
}}

Use empty lists when there is nothing to report.
Do not return any text outside the JSON object."""
