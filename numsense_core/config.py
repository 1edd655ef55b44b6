from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_optional_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


# risk buckets: total < HIGH -> high, total < MODERATE -> moderate, else low
RISK_HIGH_BELOW: int = 40
RISK_MODERATE_BELOW: int = 60

MIN_DIFFICULTY: int = 1
MAX_DIFFICULTY: int = 5
START_DIFFICULTY: int = 1

QUESTIONS_PER_DOMAIN: int = 5
QUICK_RESPONSE_MS: int = 5000

# per-question timer, seconds
DOMAIN_TIME_LIMITS: dict[str, int] = {
    "number_sense": 12,
    "arithmetic": 15,
    "spatial": 18,
    "memory": 10,
}

EXPORT_ENABLED: bool = True

DEBUG_SEED: int | None = None

# deployment overrides
RISK_HIGH_BELOW = _env_int("RISK_HIGH_BELOW", RISK_HIGH_BELOW)
RISK_MODERATE_BELOW = _env_int("RISK_MODERATE_BELOW", RISK_MODERATE_BELOW)
QUESTIONS_PER_DOMAIN = _env_int("QUESTIONS_PER_DOMAIN", QUESTIONS_PER_DOMAIN)
START_DIFFICULTY = _env_int("START_DIFFICULTY", START_DIFFICULTY)
QUICK_RESPONSE_MS = _env_int("QUICK_RESPONSE_MS", QUICK_RESPONSE_MS)
EXPORT_ENABLED = _env_bool("EXPORT_ENABLED", EXPORT_ENABLED)
DEBUG_SEED = _env_optional_int("DEBUG_SEED")
