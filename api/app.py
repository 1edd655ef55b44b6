from __future__ import annotations
from fastapi import Depends, FastAPI, Header, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
import logging, os, random, uuid, typing as t

from numsense_core import config
from numsense_core.access import STAFF_ROLES, can_access
from numsense_core.aggregator import start_assessment, submit_assessment
from numsense_core.errors import (
    AuthenticationError,
    AuthorizationError,
    InternalError,
    NotFoundError,
    NumsenseError,
    ValidationError,
)
from numsense_core.export import export_filename, to_csv
from numsense_core.generators import generate_set
from numsense_core.question_bank import DOMAINS
from numsense_core.trends import latest_summary, score_trend
from numsense_core.types import Identity, UserProfile
from . import storage
from .storage import find_user_by_email, list_results, list_users, load_user, save_user

log = logging.getLogger(__name__)

app = FastAPI(title="Numsense Screener API")


@app.get("/")
def root():
    return {"status": "ok", "service": "numsense-screener-api"}


ALLOWED_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


# ---- Error mapping ----
@app.exception_handler(NumsenseError)
async def _numsense_error(request: Request, exc: NumsenseError):
    if isinstance(exc, InternalError):
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc.__cause__)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def _request_invalid(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(status_code=400, content={"detail": "; ".join(parts) or "invalid request"})


@app.exception_handler(Exception)
async def _unexpected(request: Request, exc: Exception):
    log.exception("%s %s raised", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ---- Schemas ----
# legacy client keys are accepted here and nowhere else
class AnswerIn(BaseModel):
    model_config = ConfigDict(extra="ignore")
    question_id: str | None = Field(default=None, validation_alias=AliasChoices("questionId", "question_id"))
    # bool first so JSON true/false is not coerced to 1/0
    selected_answer: bool | str | int | float | None = Field(
        default=None, validation_alias=AliasChoices("selectedAnswer", "selected")
    )
    response_time_ms: int | None = Field(
        default=None, validation_alias=AliasChoices("responseTimeMs", "responseTime")
    )
    attempts: int | None = None

    def canonical(self) -> dict[str, t.Any]:
        return {
            "questionId": self.question_id,
            "selectedAnswer": self.selected_answer,
            "responseTimeMs": self.response_time_ms,
            "attempts": self.attempts,
        }


class SubmitReq(BaseModel):
    assessment_id: str | None = Field(default=None, validation_alias=AliasChoices("assessmentId", "assessment_id"))
    answers: list[AnswerIn] | None = None


class OptionIn(BaseModel):
    model_config = ConfigDict(extra="ignore")
    text: str = ""
    isCorrect: bool | None = None


class QuestionIn(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str | None = None
    domain: str | None = Field(default=None, validation_alias=AliasChoices("domain", "questionType"))
    text: str | None = Field(default=None, validation_alias=AliasChoices("text", "questionText"))
    options: list[OptionIn | str] = []
    correct_answer: str | int | float = Field(validation_alias=AliasChoices("correctAnswer", "correct_answer"))
    difficulty: int = 1
    subtype: str | None = Field(default=None, validation_alias=AliasChoices("subtype", "subType"))
    images: list[str] | None = None
    speech_text: str | None = Field(default=None, validation_alias=AliasChoices("speechText", "speech_text"))

    def canonical(self) -> dict[str, t.Any]:
        extras: dict[str, t.Any] = {}
        if self.images:
            extras["images"] = self.images
        if self.speech_text:
            extras["speechText"] = self.speech_text
        return {
            "id": self.id,
            "domain": self.domain,
            "text": self.text,
            "options": [o.model_dump(exclude_none=True) if isinstance(o, OptionIn) else {"text": o} for o in self.options],
            "correctAnswer": self.correct_answer,
            "difficulty": self.difficulty,
            "subtype": self.subtype,
            "extras": extras,
        }


class StartReq(BaseModel):
    questions: list[QuestionIn] | None = None
    domains: list[str] | None = None
    per_domain: int | None = Field(default=None, ge=1, le=50, validation_alias=AliasChoices("perDomain", "per_domain"))
    difficulty: int | None = Field(default=None, ge=1, le=5)
    subtype: str | None = None
    seed: int | None = None


class UserReq(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    role: t.Literal["student", "parent", "teacher", "admin"] = "student"
    age: int | None = None
    grade: str | None = None
    language: str | None = None
    educational_board: str | None = Field(default=None, validation_alias=AliasChoices("educationalBoard", "educational_board"))


class ProfileUpdateReq(BaseModel):
    model_config = ConfigDict(extra="ignore")
    name: str | None = Field(default=None, min_length=1)
    age: int | None = None
    grade: str | None = None
    language: str | None = None
    educational_board: str | None = Field(default=None, validation_alias=AliasChoices("educationalBoard", "educational_board"))


class LinkChildReq(BaseModel):
    child_id: str = Field(validation_alias=AliasChoices("childId", "child_id"))


# ---- Identity ----
def current_identity(x_user_id: str | None = Header(default=None)) -> Identity:
    """Resolve the caller from the X-User-Id header set by the auth proxy."""
    if not x_user_id:
        raise AuthenticationError("Not authorized")
    user = load_user(x_user_id)
    if user is None:
        raise AuthenticationError("Not authorized")
    return Identity(user_id=user.id, role=user.role)


# ---- Health ----
@app.get("/health")
def health():
    return {
        "status": "ok",
        "export_enabled": config.EXPORT_ENABLED,
        "data_dir": str(storage.DATA_ROOT),
    }


# ---- Users ----
@app.post("/api/users", status_code=201)
def create_user(req: UserReq):
    if find_user_by_email(req.email):
        raise ValidationError("email already registered")
    profile = UserProfile(
        id=uuid.uuid4().hex,
        name=req.name,
        email=req.email,
        role=req.role,
        age=req.age,
        grade=req.grade,
        language=req.language,
        educational_board=req.educational_board,
    )
    return save_user(profile).to_dict()


@app.get("/api/users/profile")
def get_profile(identity: Identity = Depends(current_identity)):
    user = load_user(identity.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user.to_dict()


@app.put("/api/users/profile")
def update_profile(req: ProfileUpdateReq, identity: Identity = Depends(current_identity)):
    user = load_user(identity.user_id)
    if user is None:
        raise NotFoundError("User not found")
    # only fields present in the body change; role, email and guardian link are fixed here
    for key, value in req.model_dump(exclude_none=True).items():
        setattr(user, key, value)
    return save_user(user).to_dict()


@app.get("/api/users/child/{child_id}")
def get_child(child_id: str, identity: Identity = Depends(current_identity)):
    child = load_user(child_id)
    if child is None:
        raise NotFoundError("Child not found")
    if not can_access(identity, child):
        raise AuthorizationError("Not authorized")
    return child.to_dict()


@app.post("/api/users/link-child")
def link_child(req: LinkChildReq, identity: Identity = Depends(current_identity)):
    child = load_user(req.child_id)
    if child is None:
        raise NotFoundError("Child not found")
    if identity.role != "parent":
        raise AuthorizationError("Only parents can link children")
    child.guardian_id = identity.user_id
    save_user(child)
    return {"message": "Child linked successfully", "childId": child.id}


@app.get("/api/users/students")
def students(identity: Identity = Depends(current_identity)):
    if identity.role not in STAFF_ROLES:
        raise AuthorizationError("Not authorized")
    return [u.to_dict() for u in list_users(role="student")]


# ---- Assessments ----
@app.post("/api/assessments/start", status_code=201)
def start(req: StartReq, identity: Identity = Depends(current_identity)):
    if req.questions is not None:
        raw = [q.canonical() for q in req.questions]
    else:
        domains = req.domains or list(DOMAINS)
        unknown = [d for d in domains if d not in DOMAINS]
        if unknown:
            raise ValidationError(f"unknown domain(s): {', '.join(unknown)}")
        rng = random.Random(req.seed) if req.seed is not None else None
        generated = generate_set(domains, req.per_domain, req.difficulty, req.subtype, rng=rng)
        raw = [q.to_dict() for q in generated]
    assessment = start_assessment(storage, identity, raw)
    return assessment.to_dict()


@app.post("/api/assessments/submit", status_code=201)
def submit(req: SubmitReq, identity: Identity = Depends(current_identity)):
    payload = {
        "assessmentId": req.assessment_id,
        "answers": None if req.answers is None else [a.canonical() for a in req.answers],
    }
    result = submit_assessment(storage, identity, payload)
    return result.to_dict()


@app.get("/api/assessments/results")
def results(identity: Identity = Depends(current_identity)):
    return [r.to_dict() for r in list_results(identity.user_id)]


@app.get("/api/assessments/trend")
def trend(identity: Identity = Depends(current_identity)):
    history = list_results(identity.user_id)
    return {"trend": score_trend(history), "latest": latest_summary(history)}


@app.get("/api/assessments/export")
def export_csv(
    user_id: str | None = Query(default=None, alias="userId"),
    identity: Identity = Depends(current_identity),
):
    if not config.EXPORT_ENABLED:
        raise NotFoundError("export disabled")

    target_id = user_id or identity.user_id
    if target_id != identity.user_id and identity.role not in (*STAFF_ROLES, "parent"):
        raise AuthorizationError("Not authorized")
    target = load_user(target_id)
    if target is None:
        raise NotFoundError("User not found")
    if not can_access(identity, target):
        raise AuthorizationError("Not authorized to export this child data")

    body = to_csv(list_results(target.id), {target.id: target})
    filename = export_filename(target.id)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )
