from __future__ import annotations
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from .question_bank import DOMAINS
from .types import AnswerValue, DomainScores, Question, ScoredAnswer, SubmittedAnswer

Pair = Tuple[Question, ScoredAnswer]


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def percent(part: int, whole: int) -> int:
    if not whole:
        return 0
    return round_half_up(part / whole * 100)


def answer_text(value: AnswerValue) -> str:
    """String form used for every answer comparison.

    Integral floats drop the fraction so 4.0 and "4" compare equal; None
    (a timed-out question) is the empty string.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_correct(question: Optional[Question], selected: AnswerValue) -> bool:
    if question is None or selected is None:
        return False
    return answer_text(selected) == answer_text(question.correct_answer)


def _score_one(question: Optional[Question], ans: SubmittedAnswer) -> ScoredAnswer:
    return ScoredAnswer(
        question_id=ans.question_id,
        selected_answer=ans.selected_answer,
        response_time_ms=max(0, int(ans.response_time_ms or 0)),
        attempts=max(1, int(ans.attempts or 1)),
        is_correct=is_correct(question, ans.selected_answer),
    )


def score_answers(
    questions: Iterable[Question], answers: Sequence[SubmittedAnswer]
) -> Tuple[List[ScoredAnswer], List[Pair], DomainScores]:
    """
    Returns (scored answers in submission order, resolved pairs, scores).
    Unresolved answers are scored incorrect, stay out of the domain tallies
    and still count toward the total denominator.
    """
    by_id: Dict[str, Question] = {q.id: q for q in questions}
    totals = {d: 0 for d in DOMAINS}
    correct = {d: 0 for d in DOMAINS}
    correct_count = 0
    scored: List[ScoredAnswer] = []
    pairs: List[Pair] = []

    for ans in answers:
        q = by_id.get(ans.question_id)
        sa = _score_one(q, ans)
        scored.append(sa)
        if sa.is_correct:
            correct_count += 1
        if q is None:
            continue
        pairs.append((q, sa))
        if q.domain in totals:
            totals[q.domain] += 1
            if sa.is_correct:
                correct[q.domain] += 1

    total_questions = max(1, len(answers))
    scores = DomainScores(
        total=percent(correct_count, total_questions),
        **{d: percent(correct[d], totals[d]) for d in DOMAINS},
    )
    return scored, pairs, scores
