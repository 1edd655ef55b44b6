from __future__ import annotations

from datetime import timedelta

from numsense_core.aggregator import build_result
from numsense_core.trends import latest_summary, score_trend
from tests.conftest import FIXED_NOW, answer, build_question_set


def _history():
    questions = build_question_set()
    out = []
    for day, picks in enumerate([["4"], ["4", "21"], ["5", "5", "5"]]):
        answers = [answer("ar1", picks[0])] + [answer("ar2", p) for p in picks[1:]]
        out.append(build_result("u1", f"a{day}", questions, answers, now=FIXED_NOW + timedelta(days=day), result_id=f"r{day}"))
    return out


def test_trend_is_oldest_first_regardless_of_input_order():
    history = _history()
    points = score_trend(list(reversed(history)))

    assert [p["resultId"] for p in points] == ["r0", "r1", "r2"]
    assert [p["value"] for p in points] == [100, 100, 0]
    assert points[0]["label"] == "2024-03-01"


def test_latest_summary_uses_newest_result():
    summary = latest_summary(_history())
    assert summary["resultId"] == "r2"
    assert summary["riskLevel"] == "high"
    assert 0 <= summary["confidence"] <= 100
    assert summary["scores"]["total"] == 0


def test_latest_summary_empty():
    assert latest_summary([]) is None
    assert score_trend([]) == []
