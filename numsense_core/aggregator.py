"""Turns one assessment's questions and submitted answers into a Result.

``build_result`` is pure.  ``submit_assessment`` validates a request payload,
builds the result and performs the two storage writes through a store object
exposing ``get_question_set``, ``save_result`` and
``mark_assessment_completed`` (``api.storage`` is the file-backed one).
"""
from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .confidence import confidence_score
from .errors import AuthenticationError, InternalError, NotFoundError, NumsenseError, ValidationError
from .patterns import detect_error_patterns
from .question_bank import DEFAULT_SUBTYPE, parse_questions
from .risk import risk_level
from .scoring import score_answers
from .types import Assessment, Identity, Question, Result, SubmittedAnswer, SubtypeCounts, utcnow

log = logging.getLogger(__name__)


def subtype_counts(questions: Iterable[Question]) -> SubtypeCounts:
    out: SubtypeCounts = {}
    for q in questions:
        subs = out.setdefault(q.domain or "unknown", {})
        key = q.subtype or DEFAULT_SUBTYPE
        subs[key] = subs.get(key, 0) + 1
    return out


def build_result(
    user_id: str,
    assessment_id: str,
    questions: Sequence[Question],
    answers: Sequence[SubmittedAnswer],
    *,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    result_id: Optional[str] = None,
) -> Result:
    scored, pairs, scores = score_answers(questions, answers)
    return Result(
        id=result_id or uuid.uuid4().hex,
        user_id=user_id,
        assessment_id=assessment_id,
        answers=scored,
        scores=scores,
        subtype_counts=subtype_counts(questions),
        error_patterns=detect_error_patterns(pairs),
        risk_level=risk_level(scores.total),
        confidence_score=confidence_score(scores, scored, rng=rng),
        created_at=now or utcnow(),
    )


def _int_field(raw: Dict[str, Any], key: str, default: int, minimum: int, idx: int) -> int:
    val = raw.get(key)
    if val is None:
        return default
    try:
        out = int(val)
    except (TypeError, ValueError):
        raise ValidationError(f"answers[{idx}].{key} must be an integer") from None
    if out < minimum:
        raise ValidationError(f"answers[{idx}].{key} must be >= {minimum}")
    return out


def parse_answers(raw: Any) -> List[SubmittedAnswer]:
    if not isinstance(raw, (list, tuple)):
        raise ValidationError("answers must be an array")
    out: List[SubmittedAnswer] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValidationError(f"answers[{idx}] must be an object")
        selected = item.get("selectedAnswer")
        if selected is not None and not isinstance(selected, (str, int, float)):
            raise ValidationError(f"answers[{idx}].selectedAnswer must be a string, number or null")
        out.append(
            SubmittedAnswer(
                question_id=str(item.get("questionId") or ""),
                selected_answer=selected,
                response_time_ms=_int_field(item, "responseTimeMs", 0, 0, idx),
                attempts=_int_field(item, "attempts", 1, 1, idx),
            )
        )
    return out


def submit_assessment(
    store: Any,
    identity: Optional[Identity],
    payload: Dict[str, Any],
    *,
    rng: Optional[random.Random] = None,
) -> Result:
    """
    Score and persist one submission.

    The result is saved before the assessment is marked completed; if the
    second write fails the result stays stored and the error still surfaces.
    """
    assessment_id = (payload or {}).get("assessmentId")
    if not assessment_id:
        raise ValidationError("assessmentId is required")
    answers = parse_answers((payload or {}).get("answers"))
    if identity is None or not identity.user_id:
        raise AuthenticationError("Not authorized")

    questions = store.get_question_set(str(assessment_id))
    if questions is None:
        raise NotFoundError("Assessment not found")

    result = build_result(identity.user_id, str(assessment_id), questions, answers, rng=rng)

    try:
        saved = store.save_result(result) or result
    except NumsenseError:
        raise
    except Exception as exc:
        log.exception("saving result for assessment %s failed", assessment_id)
        raise InternalError("Failed to save result") from exc

    try:
        store.mark_assessment_completed(str(assessment_id), result.created_at)
    except NumsenseError:
        raise
    except Exception as exc:
        log.exception("result %s saved but assessment %s was not marked completed", result.id, assessment_id)
        raise InternalError("Failed to update assessment status") from exc

    log.info(
        "submission user=%s assessment=%s answers=%d total=%d risk=%s",
        identity.user_id, assessment_id, len(answers), saved.scores.total, saved.risk_level,
    )
    return saved


def start_assessment(store: Any, identity: Optional[Identity], questions: Any) -> Assessment:
    if identity is None or not identity.user_id:
        raise AuthenticationError("Not authorized")
    if not isinstance(questions, (list, tuple)):
        raise ValidationError("questions must be an array")
    assessment = Assessment(id=uuid.uuid4().hex, user_id=identity.user_id, questions=parse_questions(questions))
    try:
        store.save_assessment(assessment)
    except NumsenseError:
        raise
    except Exception as exc:
        log.exception("saving assessment for user %s failed", identity.user_id)
        raise InternalError("Failed to start assessment") from exc
    log.info("assessment %s started for user=%s questions=%d", assessment.id, identity.user_id, len(assessment.questions))
    return assessment


__all__ = [
    "build_result",
    "parse_answers",
    "start_assessment",
    "submit_assessment",
    "subtype_counts",
]
