"""Placeholder confidence value attached to every result.

The number is not produced by any model and carries no diagnostic meaning.
Swap ``confidence_score`` for a real estimator; nothing else reads its inputs.
"""
from __future__ import annotations

import random
from typing import Optional, Sequence

from .types import DomainScores, ScoredAnswer


def confidence_score(
    scores: Optional[DomainScores] = None,
    answers: Optional[Sequence[ScoredAnswer]] = None,
    rng: Optional[random.Random] = None,
) -> float:
    """Uniform draw in [0, 100)."""

    r = rng or random
    return r.random() * 100.0


__all__ = ["confidence_score"]
