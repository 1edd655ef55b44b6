# numsense_core/trends.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence
from .scoring import round_half_up
from .types import Result


def _newest_first(results: Sequence[Result]) -> List[Result]:
    return sorted(results, key=lambda r: r.created_at, reverse=True)


def score_trend(results: Sequence[Result]) -> List[Dict[str, Any]]:
    """Oldest-first total score series for charting a learner's history."""
    return [
        {"resultId": r.id, "label": r.created_at.date().isoformat(), "value": int(r.scores.total)}
        for r in reversed(_newest_first(results))
    ]


def latest_summary(results: Sequence[Result]) -> Optional[Dict[str, Any]]:
    if not results:
        return None
    latest = _newest_first(results)[0]
    return {
        "resultId": latest.id,
        "riskLevel": latest.risk_level,
        "confidence": round_half_up(latest.confidence_score),
        "scores": latest.scores.to_dict(),
        "subtypeCounts": latest.subtype_counts,
        "errorPatterns": latest.error_patterns.to_dict(),
    }
