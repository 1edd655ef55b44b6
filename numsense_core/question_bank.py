from __future__ import annotations
import uuid
from typing import Any, Dict, Iterable, List
from .errors import ValidationError
from .types import Option, Question

DOMAINS = ["number_sense", "arithmetic", "spatial", "memory"]
DEFAULT_SUBTYPE = "default"


def _parse_options(raw: Any) -> List[Option]:
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise ValidationError("options must be an array")
    out: List[Option] = []
    for opt in raw:
        if isinstance(opt, dict):
            flag = opt.get("isCorrect")
            out.append(Option(text=str(opt.get("text", "")), is_correct=None if flag is None else bool(flag)))
        else:
            out.append(Option(text=str(opt)))
    return out


def parse_question(raw: Dict[str, Any], index: int = 0) -> Question:
    """Build a Question from its canonical dict form, assigning an id if absent."""

    if not isinstance(raw, dict):
        raise ValidationError(f"question {index} must be an object")
    domain = raw.get("domain")
    if domain not in DOMAINS:
        raise ValidationError(f"question {index} has unknown domain {domain!r}")
    try:
        difficulty = int(raw.get("difficulty") or 1)
    except (TypeError, ValueError):
        raise ValidationError(f"question {index} difficulty must be an integer") from None
    if not 1 <= difficulty <= 5:
        raise ValidationError(f"question {index} difficulty must be between 1 and 5")
    correct = raw.get("correctAnswer")
    if correct is None or isinstance(correct, bool) or not isinstance(correct, (str, int, float)):
        raise ValidationError(f"question {index} correctAnswer must be a string or number")
    subtype = raw.get("subtype")
    return Question(
        id=str(raw.get("id") or uuid.uuid4().hex),
        domain=domain,
        text=str(raw.get("text") or ""),
        options=_parse_options(raw.get("options")),
        correct_answer=correct,
        difficulty=difficulty,
        subtype=str(subtype) if subtype else None,
        extras=dict(raw.get("extras") or {}),
    )


def parse_questions(raw: Iterable[Dict[str, Any]]) -> List[Question]:
    questions = [parse_question(q, idx) for idx, q in enumerate(raw)]
    if not questions:
        raise ValidationError("questions must not be empty")
    return questions
