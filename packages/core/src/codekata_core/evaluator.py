"""Core submission evaluation orchestration.

evaluate() is the single entry point the presentation layer calls:

    validate_request()  → RequestInvalid, no service call made
    evaluator.assess()  → run on a worker thread, bounded by ``timeout``
    validate()          → ScoreRecord or ValidationFailure
    decide()            → verdict written onto the returned record

Every failure after request validation resolves to a REJECTED fallback
record, so callers always get exactly one ScoreRecord to render. Nothing
is persisted here; appending to history is the caller's job.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass

from codekata_core.decision import decide, rejection_reason
from codekata_core.providers.anthropic import AnthropicEvaluator
from codekata_core.providers.base import BaseEvaluator
from codekata_core.providers.openai import OpenAIEvaluator
from codekata_core.scoring import ScoreRecord, SubmissionKind, fallback_record
from codekata_core.validation import ValidationFailure, validate

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
MAX_CODE_CHARS = 50_000

TIMEOUT_SUMMARY = "The evaluation service took too long to respond. Please try again."
FAULT_SUMMARY = "The evaluation service is unavailable right now. Please try again."
INVALID_RESPONSE_SUMMARY = "The evaluation service returned an unreadable assessment. Please resubmit."
FALLBACK_SUMMARIES = frozenset({TIMEOUT_SUMMARY, FAULT_SUMMARY, INVALID_RESPONSE_SUMMARY})


class RequestInvalid(ValueError):
    """The request itself is unusable; the caller can correct it and resubmit."""


@dataclass(frozen=True)
class EvaluationRequest:
    code: str
    requirements: tuple[str, ...]
    task_id: str
    kind: SubmissionKind = SubmissionKind.STANDARD


def validate_request(request: EvaluationRequest, max_code_chars: int = MAX_CODE_CHARS) -> None:
    """Raise RequestInvalid if the request should not be sent for evaluation."""
    if not request.task_id or not str(request.task_id).strip():
        raise RequestInvalid("A task identifier is required.")
    if not isinstance(request.code, str) or not request.code.strip():
        raise RequestInvalid("Submitted code is empty.")
    if len(request.code) > max_code_chars:
        raise RequestInvalid(f"Submitted code is {len(request.code)} characters; the limit is {max_code_chars}.")
    if not request.requirements:
        raise RequestInvalid("The task has no requirements to evaluate against.")
    if any(not isinstance(r, str) or not r.strip() for r in request.requirements):
        raise RequestInvalid("Requirements must be non-empty strings.")
    try:
        SubmissionKind(request.kind)
    except ValueError:
        raise RequestInvalid(f"Unknown submission kind: {request.kind!r}.")


def is_fallback(record: ScoreRecord) -> bool:
    """True if record stands in for a failed evaluation rather than an assessment."""
    return record.total_score == 0 and record.feedback_summary in FALLBACK_SUMMARIES


def get_evaluator(config: dict) -> BaseEvaluator:
    model = config["model"]
    timeout = float(config.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS))
    if model == "anthropic":
        return AnthropicEvaluator(api_key=config["anthropic_api_key"], timeout=timeout)
    if model == "openai":
        return OpenAIEvaluator(api_key=config["openai_api_key"], timeout=timeout)
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")


def _call_with_timeout(evaluator: BaseEvaluator, request: EvaluationRequest, timeout: float) -> str:
    """Run evaluator.assess() and wait at most ``timeout`` seconds.

    The call runs on a daemon thread, so an abandoned call never delays
    interpreter exit. Whatever it produces after the timeout is discarded.
    """
    future: Future = Future()

    def run() -> None:
        try:
            future.set_result(evaluator.assess(request))
        except Exception as e:
            future.set_exception(e)

    threading.Thread(target=run, name="codekata-eval", daemon=True).start()
    return future.result(timeout=timeout)


def evaluate(
    request: EvaluationRequest,
    evaluator: BaseEvaluator,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    max_code_chars: int = MAX_CODE_CHARS,
) -> ScoreRecord:
    """Evaluate one submission and return its ScoreRecord.

    Raises RequestInvalid for request-shape problems. Any other failure
    (timeout, service fault, unusable payload) returns a REJECTED fallback
    record whose summary is safe to show to the user.
    """
    validate_request(request, max_code_chars)

    try:
        raw = _call_with_timeout(evaluator, request, timeout)
    except (FuturesTimeoutError, TimeoutError):
        logger.warning("Evaluation of %s timed out after %.1fs", request.task_id, timeout)
        return fallback_record(TIMEOUT_SUMMARY)
    except Exception as e:
        logger.error(
            "%s failed for %s (%s): %s",
            evaluator.__class__.__name__,
            request.task_id,
            type(e).__name__,
            e,
        )
        return fallback_record(FAULT_SUMMARY)

    result = validate(raw)
    if isinstance(result, ValidationFailure):
        logger.warning("Rejected assessment payload for %s: %s", request.task_id, result)
        return fallback_record(INVALID_RESPONSE_SUMMARY)

    verdict = decide(result, request.kind)
    if verdict is not result.status:
        logger.debug(
            "Overriding reported status %s with %s for %s (%s)",
            result.status.value,
            verdict.value,
            request.task_id,
            rejection_reason(result, request.kind) or "all thresholds met",
        )
    return result.with_verdict(verdict)
