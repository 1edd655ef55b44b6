# numsense_core/risk.py
from __future__ import annotations
from . import config
from .types import RiskLevel


def risk_level(total_score: float) -> RiskLevel:
    # threshold heuristic only; not a diagnostic model
    s = float(total_score)
    if s < config.RISK_HIGH_BELOW: return "high"
    if s < config.RISK_MODERATE_BELOW: return "moderate"
    return "low"
