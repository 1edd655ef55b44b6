"""JSON-file persistence for users, assessments and results.

Everything lives under ``DATA_DIR``: one users file, one file per assessment
and per result, plus a result index keyed by id.  The module itself is the
store object handed to ``numsense_core.aggregator`` (``get_question_set``,
``save_result``, ``mark_assessment_completed``).

Record ids become file names, so only ids matching ``_SAFE_ID`` ever reach
the filesystem; anything else reads as missing.
"""

from __future__ import annotations

import json
import logging
import os
import re
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from numsense_core.types import Assessment, Question, Result, UserProfile, to_iso


DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
USERS_PATH = DATA_ROOT / "users.json"
ASSESSMENTS_DIR = DATA_ROOT / "assessments"
RESULTS_DIR = DATA_ROOT / "results"
RESULT_INDEX_PATH = DATA_ROOT / "results_index.json"

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]{1,128}$")

_LOCK = threading.Lock()

log = logging.getLogger(__name__)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        log.warning("unreadable store file %s", path, exc_info=True)
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


def _record_path(folder: Path, record_id: Any) -> Optional[Path]:
    rid = str(record_id or "")
    if not _SAFE_ID.match(rid):
        return None
    return folder / f"{rid}.json"


def _require_path(folder: Path, record_id: Any) -> Path:
    path = _record_path(folder, record_id)
    if path is None:
        raise ValueError(f"invalid record id {record_id!r}")
    return path


# ---- users ----
def save_user(profile: UserProfile) -> UserProfile:
    with _LOCK:
        users: Dict[str, Dict[str, Any]] = _read_json(USERS_PATH, {})
        users[profile.id] = profile.to_dict()
        _write_json(USERS_PATH, users)
    return profile


def load_user(user_id: str) -> Optional[UserProfile]:
    raw = _read_json(USERS_PATH, {}).get(str(user_id))
    return UserProfile.from_dict(raw) if raw else None


def find_user_by_email(email: str) -> Optional[UserProfile]:
    needle = (email or "").strip().lower()
    for raw in _read_json(USERS_PATH, {}).values():
        if str(raw.get("email", "")).lower() == needle:
            return UserProfile.from_dict(raw)
    return None


def list_users(role: Optional[str] = None) -> List[UserProfile]:
    users = [UserProfile.from_dict(raw) for raw in _read_json(USERS_PATH, {}).values()]
    if role:
        users = [u for u in users if u.role == role]
    users.sort(key=lambda u: u.created_at, reverse=True)
    return users


# ---- assessments ----
def save_assessment(assessment: Assessment) -> Assessment:
    _write_json(_require_path(ASSESSMENTS_DIR, assessment.id), assessment.to_dict())
    return assessment


def load_assessment(assessment_id: str) -> Optional[Assessment]:
    path = _record_path(ASSESSMENTS_DIR, assessment_id)
    if path is None:
        return None
    raw = _read_json(path, None)
    if not isinstance(raw, dict):
        return None
    try:
        return Assessment.from_dict(raw)
    except (KeyError, TypeError, ValueError):
        log.warning("malformed assessment file %s", path, exc_info=True)
        return None


def get_question_set(assessment_id: str) -> Optional[List[Question]]:
    assessment = load_assessment(assessment_id)
    return assessment.questions if assessment else None


def mark_assessment_completed(assessment_id: str, completed_at: datetime) -> bool:
    path = _record_path(ASSESSMENTS_DIR, assessment_id)
    if path is None:
        return False
    with _LOCK:
        raw = _read_json(path, None)
        if not isinstance(raw, dict):
            return False
        raw["status"] = "completed"
        raw["completedAt"] = to_iso(completed_at)
        _write_json(path, raw)
    return True


# ---- results ----
def save_result(result: Result) -> Result:
    """Persist the result JSON and its index metadata."""

    path = _require_path(RESULTS_DIR, result.id)
    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
        index[result.id] = {
            "userId": result.user_id,
            "assessmentId": result.assessment_id,
            "createdAt": to_iso(result.created_at),
        }
        _write_json(path, result.to_dict())
        _write_json(RESULT_INDEX_PATH, index)
    return result


def load_result(result_id: str) -> Optional[Result]:
    path = _record_path(RESULTS_DIR, result_id)
    if path is None:
        return None
    raw = _read_json(path, None)
    return Result.from_dict(raw) if isinstance(raw, dict) and raw else None


def list_results(user_id: str) -> List[Result]:
    """All results of one user, newest first."""

    index: Dict[str, Dict[str, Any]] = _read_json(RESULT_INDEX_PATH, {})
    out: List[Result] = []
    for rid, meta in index.items():
        if meta.get("userId") != str(user_id):
            continue
        result = load_result(rid)
        if result:
            out.append(result)
    out.sort(key=lambda r: r.created_at, reverse=True)
    return out
