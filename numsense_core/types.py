from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union

Domain = Literal["number_sense", "arithmetic", "spatial", "memory"]
RiskLevel = Literal["low", "moderate", "high"]
Role = Literal["student", "parent", "teacher", "admin"]
Status = Literal["in_progress", "completed", "abandoned"]
AnswerValue = Union[str, int, float, None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts is not None else None


def from_iso(raw: Any) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw
    ts = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class Option:
    text: str
    is_correct: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"text": self.text}
        if self.is_correct is not None:
            out["isCorrect"] = self.is_correct
        return out


@dataclass(frozen=True)
class Question:
    id: str; domain: str; text: str
    options: List[Option] = field(default_factory=list)
    correct_answer: AnswerValue = None
    difficulty: int = 1
    subtype: Optional[str] = None
    # presentation-only payload (images, speechText); never scored
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "domain": self.domain,
            "text": self.text,
            "options": [o.to_dict() for o in self.options],
            "correctAnswer": self.correct_answer,
            "difficulty": self.difficulty,
            "subtype": self.subtype,
        }
        if self.extras:
            out["extras"] = dict(self.extras)
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Question":
        return cls(
            id=str(raw["id"]),
            domain=str(raw["domain"]),
            text=str(raw.get("text") or ""),
            options=[Option(text=str(o.get("text", "")), is_correct=o.get("isCorrect")) for o in raw.get("options") or []],
            correct_answer=raw.get("correctAnswer"),
            difficulty=int(raw.get("difficulty") or 1),
            subtype=raw.get("subtype"),
            extras=dict(raw.get("extras") or {}),
        )


@dataclass(frozen=True)
class SubmittedAnswer:
    question_id: str
    selected_answer: AnswerValue = None
    response_time_ms: int = 0
    attempts: int = 1


@dataclass(frozen=True)
class ScoredAnswer:
    question_id: str
    selected_answer: AnswerValue
    response_time_ms: int
    attempts: int
    is_correct: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "selectedAnswer": self.selected_answer,
            "responseTimeMs": self.response_time_ms,
            "attempts": self.attempts,
            "isCorrect": self.is_correct,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ScoredAnswer":
        return cls(
            question_id=str(raw.get("questionId") or ""),
            selected_answer=raw.get("selectedAnswer"),
            response_time_ms=int(raw.get("responseTimeMs") or 0),
            attempts=int(raw.get("attempts") or 1),
            is_correct=bool(raw.get("isCorrect")),
        )


@dataclass(frozen=True)
class DomainScores:
    number_sense: int = 0
    arithmetic: int = 0
    spatial: int = 0
    memory: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "number_sense": self.number_sense,
            "arithmetic": self.arithmetic,
            "spatial": self.spatial,
            "memory": self.memory,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DomainScores":
        return cls(**{k: int(raw.get(k) or 0) for k in ("number_sense", "arithmetic", "spatial", "memory", "total")})


@dataclass(frozen=True)
class ErrorPatternCounts:
    number_reversal: int = 0
    symbol_confusion: int = 0
    sequencing_error: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "numberReversal": self.number_reversal,
            "symbolConfusion": self.symbol_confusion,
            "sequencingError": self.sequencing_error,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ErrorPatternCounts":
        return cls(
            number_reversal=int(raw.get("numberReversal") or 0),
            symbol_confusion=int(raw.get("symbolConfusion") or 0),
            sequencing_error=int(raw.get("sequencingError") or 0),
        )


SubtypeCounts = Dict[str, Dict[str, int]]


@dataclass(frozen=True)
class Result:
    id: str
    user_id: str
    assessment_id: str
    answers: List[ScoredAnswer]
    scores: DomainScores
    subtype_counts: SubtypeCounts
    error_patterns: ErrorPatternCounts
    risk_level: RiskLevel
    confidence_score: float
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "assessmentId": self.assessment_id,
            "answers": [a.to_dict() for a in self.answers],
            "scores": self.scores.to_dict(),
            "subtypeCounts": {d: dict(subs) for d, subs in self.subtype_counts.items()},
            "errorPatterns": self.error_patterns.to_dict(),
            "riskLevel": self.risk_level,
            "confidenceScore": self.confidence_score,
            "createdAt": to_iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Result":
        return cls(
            id=str(raw["id"]),
            user_id=str(raw.get("userId") or ""),
            assessment_id=str(raw.get("assessmentId") or ""),
            answers=[ScoredAnswer.from_dict(a) for a in raw.get("answers") or []],
            scores=DomainScores.from_dict(raw.get("scores") or {}),
            subtype_counts={str(d): {str(k): int(v) for k, v in subs.items()} for d, subs in (raw.get("subtypeCounts") or {}).items()},
            error_patterns=ErrorPatternCounts.from_dict(raw.get("errorPatterns") or {}),
            risk_level=raw.get("riskLevel") or "low",
            confidence_score=float(raw.get("confidenceScore") or 0.0),
            created_at=from_iso(raw.get("createdAt")) or utcnow(),
        )


@dataclass
class Assessment:
    id: str
    user_id: str
    questions: List[Question]
    status: Status = "in_progress"
    started_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "questions": [q.to_dict() for q in self.questions],
            "status": self.status,
            "startedAt": to_iso(self.started_at),
            "completedAt": to_iso(self.completed_at),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Assessment":
        return cls(
            id=str(raw["id"]),
            user_id=str(raw.get("userId") or ""),
            questions=[Question.from_dict(q) for q in raw.get("questions") or []],
            status=raw.get("status") or "in_progress",
            started_at=from_iso(raw.get("startedAt")) or utcnow(),
            completed_at=from_iso(raw.get("completedAt")),
        )


@dataclass
class UserProfile:
    id: str; name: str; email: str
    role: Role = "student"
    guardian_id: Optional[str] = None
    age: Optional[int] = None
    grade: Optional[str] = None
    language: Optional[str] = None
    educational_board: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "guardianId": self.guardian_id,
            "age": self.age,
            "grade": self.grade,
            "language": self.language,
            "educationalBoard": self.educational_board,
            "createdAt": to_iso(self.created_at),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "UserProfile":
        return cls(
            id=str(raw["id"]),
            name=str(raw.get("name") or ""),
            email=str(raw.get("email") or ""),
            role=raw.get("role") or "student",
            guardian_id=raw.get("guardianId"),
            age=raw.get("age"),
            grade=raw.get("grade"),
            language=raw.get("language"),
            educational_board=raw.get("educationalBoard"),
            created_at=from_iso(raw.get("createdAt")) or utcnow(),
        )


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: Role = "student"
