"""Helpers to export stored results in CSV/JSON formats."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional
import csv
import io
import json

from .scoring import round_half_up
from .types import Result, UserProfile, to_iso

FIELDS: tuple[str, ...] = (
    "resultId",
    "assessmentId",
    "userId",
    "userName",
    "userEmail",
    "createdAt",
    "totalScore",
    "number_sense",
    "arithmetic",
    "spatial",
    "memory",
    "totalTimeSeconds",
    "perQuestionTimeSeconds",
    "riskLevel",
    "confidenceScore",
    "numberReversal",
    "symbolConfusion",
    "sequencingError",
    "subtypeCounts",
)


def _compact(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def _per_question(result: Result) -> List[Dict[str, Any]]:
    return [
        {
            "questionId": a.question_id,
            "timeSeconds": round_half_up(a.response_time_ms / 1000),
            "attempts": a.attempts or 1,
            "isCorrect": a.is_correct,
        }
        for a in result.answers
    ]


def result_row(result: Result, user: Optional[UserProfile] = None) -> Dict[str, Any]:
    total_ms = sum(a.response_time_ms for a in result.answers)
    scores = result.scores
    patterns = result.error_patterns
    return {
        "resultId": result.id,
        "assessmentId": result.assessment_id,
        "userId": result.user_id,
        "userName": user.name if user else "",
        "userEmail": user.email if user else "",
        "createdAt": to_iso(result.created_at) or "",
        "totalScore": scores.total,
        "number_sense": scores.number_sense,
        "arithmetic": scores.arithmetic,
        "spatial": scores.spatial,
        "memory": scores.memory,
        "totalTimeSeconds": round_half_up(total_ms / 1000),
        "perQuestionTimeSeconds": _compact(_per_question(result)),
        "riskLevel": result.risk_level,
        "confidenceScore": round_half_up(result.confidence_score or 0),
        "numberReversal": patterns.number_reversal,
        "symbolConfusion": patterns.symbol_confusion,
        "sequencingError": patterns.sequencing_error,
        "subtypeCounts": _compact(result.subtype_counts),
    }


def _rows(results: Iterable[Result], users: Optional[Mapping[str, UserProfile]]) -> List[Dict[str, Any]]:
    lookup = users or {}
    return [result_row(r, lookup.get(r.user_id)) for r in results]


def to_json(results: Iterable[Result], users: Optional[Mapping[str, UserProfile]] = None) -> Dict[str, Any]:
    """Return a JSON-safe payload with the same rows as the CSV export."""

    return {"rows": _rows(results, users)}


def to_csv(results: Iterable[Result], users: Optional[Mapping[str, UserProfile]] = None) -> str:
    """Render results as CSV with a fixed header, one row per result in input order."""

    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=FIELDS, lineterminator="\n")
    writer.writeheader()
    for row in _rows(results, users):
        writer.writerow(row)
    return buf.getvalue()


def export_filename(user_id: str) -> str:
    return f"assessment_results_{user_id}.csv"


__all__ = ["FIELDS", "export_filename", "result_row", "to_csv", "to_json"]
