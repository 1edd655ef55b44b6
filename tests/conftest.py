from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from numsense_core.types import Assessment, Option, Question, Result, SubmittedAnswer


def make_question(
    qid: str,
    domain: str = "arithmetic",
    correct: object = "4",
    text: str = "2 + 2 = ?",
    subtype: Optional[str] = None,
    difficulty: int = 1,
) -> Question:
    return Question(
        id=qid,
        domain=domain,
        text=text,
        options=[Option(text=str(correct), is_correct=True), Option(text="x", is_correct=False)],
        correct_answer=correct,
        difficulty=difficulty,
        subtype=subtype,
    )


def answer(qid: str, selected: object, ms: int = 1000, attempts: int = 1) -> SubmittedAnswer:
    return SubmittedAnswer(question_id=qid, selected_answer=selected, response_time_ms=ms, attempts=attempts)


def build_question_set() -> List[Question]:
    """Deterministic four-domain question set for tests and smoke runs."""

    return [
        make_question("ns1", "number_sense", ">", "7  ?  3", subtype="comparison"),
        make_question("ns2", "number_sense", "12", "How many apples are shown?", subtype="symbol_quantity"),
        make_question("ar1", "arithmetic", "4", "2 + 2 = ?"),
        make_question("ar2", "arithmetic", "21", "7 × 3 = ?", difficulty=3),
        make_question("sp1", "spatial", "3", "▲  x 3  = ?"),
        make_question("me1", "memory", "5", "Remember: 2 5 8  - What was item 2?"),
    ]


class MemoryStore:
    """In-memory stand-in for api.storage with switchable write failures."""

    def __init__(self, assessments: Optional[Dict[str, List[Question]]] = None) -> None:
        self.assessments: Dict[str, List[Question]] = dict(assessments or {})
        self.saved: List[Result] = []
        self.completed: Dict[str, datetime] = {}
        self.started: List[Assessment] = []
        self.fail_save = False
        self.fail_mark = False

    def get_question_set(self, assessment_id: str) -> Optional[List[Question]]:
        return self.assessments.get(assessment_id)

    def save_result(self, result: Result) -> Result:
        if self.fail_save:
            raise OSError("disk full")
        self.saved.append(result)
        return result

    def mark_assessment_completed(self, assessment_id: str, completed_at: datetime) -> None:
        if self.fail_mark:
            raise OSError("disk full")
        self.completed[assessment_id] = completed_at

    def save_assessment(self, assessment: Assessment) -> Assessment:
        self.started.append(assessment)
        self.assessments[assessment.id] = assessment.questions
        return assessment


FIXED_NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def question_set() -> List[Question]:
    return build_question_set()


@pytest.fixture
def memory_store(question_set) -> MemoryStore:
    return MemoryStore({"asm-1": question_set})
