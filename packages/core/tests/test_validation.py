"""Tests for assessment payload validation."""

import json

from codekata_core.scoring import DiffSuggestion, LineComment, Rubric, ScoreRecord, Verdict
from codekata_core.validation import FailureKind, ValidationFailure, parse_payload, validate


def _payload(**overrides):
    payload = {
        "total_score": 42,
        "rubric": {
            "functional_correctness": 8,
            "code_readability": 7,
            "structure_modularity": 7,
            "performance_efficiency": 7,
            "security_practices": 7,
            "error_handling": 6,
        },
        "status": "APPROVED",
        "feedback_summary": "Solid solution with minor naming issues.",
        "line_comments": [{"line_number": 3, "comment": "Rename `x`.", "severity": "info"}],
        "diff_suggestions": [{"original": "x = 1", "suggested": "count = 1", "explanation": "Clearer name."}],
    }
    payload.update(overrides)
    return payload


def _with_score(category, value):
    payload = _payload()
    payload["rubric"] = {**payload["rubric"], category: value}
    return payload


# ---------------------------------------------------------------------------
# parse_payload
# ---------------------------------------------------------------------------


class TestParsePayload:
    def test_dict_passes_through(self):
        payload = _payload()
        assert parse_payload(payload) is payload

    def test_plain_json_text(self):
        assert parse_payload(json.dumps(_payload()))["total_score"] == 42

    def test_strips_markdown_fence(self):
        raw = f"```json\n{json.dumps(_payload())}\n```"
        assert parse_payload(raw)["status"] == "APPROVED"

    def test_extracts_object_from_surrounding_prose(self):
        raw = f"Here is my assessment:\n{json.dumps(_payload())}\nHope this helps!"
        assert parse_payload(raw)["feedback_summary"].startswith("Solid")

    def test_braces_inside_strings_do_not_end_object(self):
        payload = _payload(feedback_summary="Use {} for empty dicts }")
        raw = f"Result: {json.dumps(payload)} done"
        assert parse_payload(raw)["feedback_summary"] == "Use {} for empty dicts }"

    def test_bytes_are_decoded(self):
        assert parse_payload(json.dumps(_payload()).encode())["total_score"] == 42

    def test_garbage_returns_none(self):
        assert parse_payload("not json at all") is None

    def test_non_text_returns_none(self):
        assert parse_payload(12345) is None

    def test_deeply_nested_reply_returns_none(self):
        assert parse_payload("[" * 100_000) is None

    def test_deeply_nested_embedded_object_returns_none(self):
        raw = "Here you go: " + '{"a": ' * 100_000 + "1" + "}" * 100_000
        assert parse_payload(raw) is None


# ---------------------------------------------------------------------------
# validate — success path
# ---------------------------------------------------------------------------


class TestValidateSuccess:
    def test_returns_score_record(self):
        record = validate(_payload())
        assert isinstance(record, ScoreRecord)
        assert record.rubric.functional_correctness == 8
        assert record.status is Verdict.APPROVED
        assert record.line_comments == (LineComment(3, "Rename `x`.", "info"),)
        assert record.diff_suggestions == (DiffSuggestion("x = 1", "count = 1", "Clearer name."),)

    def test_total_is_recomputed_not_trusted(self):
        record = validate(_payload(total_score=60))
        assert record.total_score == 42

    def test_total_matches_category_sum(self):
        record = validate(_payload(total_score=0))
        assert record.total_score == sum(record.rubric.as_dict().values())

    def test_accepts_text_payload(self):
        record = validate(json.dumps(_payload()))
        assert isinstance(record, ScoreRecord)

    def test_empty_remark_lists_are_valid(self):
        record = validate(_payload(line_comments=[], diff_suggestions=[]))
        assert record.line_comments == ()
        assert record.diff_suggestions == ()

    def test_integral_float_score_accepted(self):
        record = validate(_with_score("code_readability", 7.0))
        assert record.rubric.code_readability == 7
        assert isinstance(record.rubric.code_readability, int)

    def test_boundary_scores_accepted(self):
        payload = _payload()
        payload["rubric"] = {k: 10 for k in payload["rubric"]}
        assert validate(payload).total_score == 60
        payload["rubric"] = {k: 0 for k in payload["rubric"]}
        assert validate(payload).total_score == 0

    def test_wire_roundtrip_is_identical(self):
        record = validate(_payload())
        restored = validate(json.dumps(record.to_dict()))
        assert restored == record
        assert restored.to_dict() == record.to_dict()


# ---------------------------------------------------------------------------
# validate — failures, in check order
# ---------------------------------------------------------------------------


class TestValidateFailures:
    def test_unparseable_text_is_malformed(self):
        result = validate("I think this code is great!")
        assert isinstance(result, ValidationFailure)
        assert result.kind is FailureKind.MALFORMED_PAYLOAD

    def test_json_array_is_malformed(self):
        assert validate("[1, 2, 3]").kind is FailureKind.MALFORMED_PAYLOAD

    def test_deeply_nested_reply_is_malformed(self):
        assert validate("[" * 100_000).kind is FailureKind.MALFORMED_PAYLOAD

    def test_huge_integer_reply_is_a_failure(self):
        result = validate('{"total_score": ' + "1" * 5000 + "}")
        assert isinstance(result, ValidationFailure)

    def test_missing_total_score(self):
        payload = _payload()
        del payload["total_score"]
        result = validate(payload)
        assert result.kind is FailureKind.MISSING_FIELD
        assert result.field == "total_score"

    def test_non_numeric_total_score(self):
        assert validate(_payload(total_score="42")).kind is FailureKind.MISSING_FIELD

    def test_boolean_total_score(self):
        assert validate(_payload(total_score=True)).kind is FailureKind.MISSING_FIELD

    def test_category_above_range_names_category(self):
        result = validate(_with_score("security_practices", 11))
        assert result.kind is FailureKind.OUT_OF_RANGE_SCORE
        assert result.field == "security_practices"

    def test_negative_category(self):
        result = validate(_with_score("error_handling", -1))
        assert result.kind is FailureKind.OUT_OF_RANGE_SCORE
        assert result.field == "error_handling"

    def test_fractional_category(self):
        assert validate(_with_score("performance_efficiency", 7.5)).kind is FailureKind.OUT_OF_RANGE_SCORE

    def test_missing_category(self):
        payload = _payload()
        del payload["rubric"]["structure_modularity"]
        result = validate(payload)
        assert result.kind is FailureKind.OUT_OF_RANGE_SCORE
        assert result.field == "structure_modularity"

    def test_missing_rubric_names_first_category(self):
        payload = _payload()
        del payload["rubric"]
        result = validate(payload)
        assert result.kind is FailureKind.OUT_OF_RANGE_SCORE
        assert result.field == "functional_correctness"

    def test_invalid_status(self):
        result = validate(_payload(status="MAYBE"))
        assert result.kind is FailureKind.INVALID_VERDICT

    def test_missing_status(self):
        payload = _payload()
        del payload["status"]
        assert validate(payload).kind is FailureKind.INVALID_VERDICT

    def test_missing_feedback_summary(self):
        payload = _payload()
        del payload["feedback_summary"]
        result = validate(payload)
        assert result.kind is FailureKind.MISSING_FIELD
        assert result.field == "feedback_summary"

    def test_line_comments_not_a_list(self):
        result = validate(_payload(line_comments="none"))
        assert result.kind is FailureKind.MALFORMED_PAYLOAD
        assert result.field == "line_comments"

    def test_missing_diff_suggestions(self):
        payload = _payload()
        del payload["diff_suggestions"]
        result = validate(payload)
        assert result.kind is FailureKind.MALFORMED_PAYLOAD
        assert result.field == "diff_suggestions"

    def test_line_number_below_one(self):
        bad = [{"line_number": 0, "comment": "x", "severity": "info"}]
        assert validate(_payload(line_comments=bad)).kind is FailureKind.MALFORMED_PAYLOAD

    def test_unknown_severity(self):
        bad = [{"line_number": 2, "comment": "x", "severity": "critical"}]
        assert validate(_payload(line_comments=bad)).kind is FailureKind.MALFORMED_PAYLOAD

    def test_suggestion_missing_explanation(self):
        bad = [{"original": "a", "suggested": "b"}]
        result = validate(_payload(diff_suggestions=bad))
        assert result.kind is FailureKind.MALFORMED_PAYLOAD
        assert result.field == "diff_suggestions"

    def test_first_failing_check_wins(self):
        payload = _with_score("code_readability", 99)
        payload["total_score"] = None
        payload["status"] = "MAYBE"
        assert validate(payload).kind is FailureKind.MISSING_FIELD

    def test_category_checked_before_status(self):
        payload = _with_score("code_readability", 99)
        payload["status"] = "MAYBE"
        assert validate(payload).kind is FailureKind.OUT_OF_RANGE_SCORE

    def test_failure_str_includes_kind_and_field(self):
        text = str(validate(_with_score("security_practices", 11)))
        assert "OutOfRangeScore" in text
        assert "security_practices" in text


def test_rubric_total_property():
    assert Rubric(8, 7, 7, 7, 7, 6).total == 42
