from __future__ import annotations

import csv
import io
import json
from datetime import timedelta

from numsense_core.export import FIELDS, export_filename, to_csv, to_json
from numsense_core.types import DomainScores, ErrorPatternCounts, Result, ScoredAnswer, UserProfile
from tests.conftest import FIXED_NOW


def _result(rid: str = "r1", created=FIXED_NOW) -> Result:
    return Result(
        id=rid,
        user_id="u1",
        assessment_id="a1",
        answers=[
            ScoredAnswer(question_id="q1", selected_answer="4", response_time_ms=1500, attempts=1, is_correct=True),
            ScoredAnswer(question_id="q2", selected_answer=None, response_time_ms=1000, attempts=3, is_correct=False),
        ],
        scores=DomainScores(number_sense=0, arithmetic=100, spatial=0, memory=0, total=50),
        subtype_counts={"arithmetic": {"default": 1}, "number_sense": {"symbol_quantity": 1}},
        error_patterns=ErrorPatternCounts(number_reversal=1, symbol_confusion=2, sequencing_error=0),
        risk_level="moderate",
        confidence_score=49.5,
        created_at=created,
    )


USER = UserProfile(id="u1", name='Doe, "JJ"', email="jj@example.com")


def _parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_csv_round_trip_preserves_every_field():
    text = to_csv([_result()], {"u1": USER})
    rows = _parse(text)

    assert tuple(rows[0]) == FIELDS
    row = dict(zip(rows[0], rows[1]))
    assert row["resultId"] == "r1"
    assert row["assessmentId"] == "a1"
    assert row["userId"] == "u1"
    assert row["userName"] == 'Doe, "JJ"'
    assert row["userEmail"] == "jj@example.com"
    assert row["createdAt"] == FIXED_NOW.isoformat()
    assert row["totalScore"] == "50"
    assert row["number_sense"] == "0"
    assert row["arithmetic"] == "100"
    assert row["spatial"] == "0"
    assert row["memory"] == "0"
    assert row["totalTimeSeconds"] == "3"
    assert json.loads(row["perQuestionTimeSeconds"]) == [
        {"questionId": "q1", "timeSeconds": 2, "attempts": 1, "isCorrect": True},
        {"questionId": "q2", "timeSeconds": 1, "attempts": 3, "isCorrect": False},
    ]
    assert row["riskLevel"] == "moderate"
    assert row["confidenceScore"] == "50"
    assert row["numberReversal"] == "1"
    assert row["symbolConfusion"] == "2"
    assert row["sequencingError"] == "0"
    assert json.loads(row["subtypeCounts"]) == {"arithmetic": {"default": 1}, "number_sense": {"symbol_quantity": 1}}


def test_embedded_quotes_are_doubled():
    text = to_csv([_result()], {"u1": USER})
    line = text.splitlines()[1]
    assert '"Doe, ""JJ"""' in line
    assert '"[{""questionId"":""q1""' in line


def test_rows_follow_input_order_and_end_with_newline():
    newer = _result("r2", FIXED_NOW + timedelta(days=1))
    text = to_csv([newer, _result("r1")])
    rows = _parse(text)

    assert [r[0] for r in rows[1:]] == ["r2", "r1"]
    assert text.endswith("\n") and "\r" not in text
    assert text.count("\n") == 3


def test_missing_user_leaves_name_and_email_blank():
    rows = _parse(to_csv([_result()]))
    row = dict(zip(rows[0], rows[1]))
    assert row["userName"] == ""
    assert row["userEmail"] == ""


def test_empty_export_is_header_only():
    assert to_csv([]) == ",".join(FIELDS) + "\n"


def test_json_export_matches_csv_rows():
    payload = to_json([_result()], {"u1": USER})
    assert len(payload["rows"]) == 1
    assert payload["rows"][0]["userName"] == USER.name
    assert set(payload["rows"][0]) == set(FIELDS)


def test_export_filename():
    assert export_filename("abc") == "assessment_results_abc.csv"
