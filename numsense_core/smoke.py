from __future__ import annotations

import argparse
import logging
import random
from typing import List, Optional

from . import config
from .aggregator import build_result
from .generators import generate_question, next_difficulty
from .question_bank import DOMAINS
from .scoring import is_correct
from .types import Question, Result, SubmittedAnswer
from .trends import latest_summary


def _auto_answer(question: Question, rng: random.Random, accuracy: float) -> SubmittedAnswer:
    if rng.random() < accuracy:
        selected = question.correct_answer
    else:
        wrong = [o.text for o in question.options if o.text != str(question.correct_answer)]
        selected = rng.choice(wrong) if wrong else None
    limit_ms = config.DOMAIN_TIME_LIMITS.get(question.domain, 15) * 1000
    return SubmittedAnswer(question_id=question.id, selected_answer=selected, response_time_ms=rng.randint(800, limit_ms))


def run_smoke_session(seed: Optional[int] = None, accuracy: float = 0.7, per_domain: Optional[int] = None) -> Result:
    """Play one adaptive screening with a simulated learner and score it."""

    rng = random.Random(config.DEBUG_SEED if seed is None else seed)
    count = config.QUESTIONS_PER_DOMAIN if per_domain is None else per_domain
    questions: List[Question] = []
    answers: List[SubmittedAnswer] = []

    for domain in DOMAINS:
        difficulty = config.START_DIFFICULTY
        for idx in range(count):
            q = generate_question(domain, difficulty, idx, rng=rng)
            ans = _auto_answer(q, rng, accuracy)
            questions.append(q)
            answers.append(ans)
            difficulty = next_difficulty(
                difficulty, is_correct(q, ans.selected_answer), ans.response_time_ms, config.QUICK_RESPONSE_MS
            )
        logging.info("Domain %s finished at difficulty %d", domain, difficulty)

    return build_result("smoke-user", "smoke-assessment", questions, answers, rng=rng)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Synthetic screening run")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--accuracy", type=float, default=0.7)
    ap.add_argument("--per-domain", type=int, default=None)
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    logging.info("Starting synthetic screening with seed=%s accuracy=%.2f", args.seed, args.accuracy)
    result = run_smoke_session(args.seed, args.accuracy, args.per_domain)
    summary = latest_summary([result]) or {}
    logging.info("Scores: %s", summary.get("scores"))
    logging.info("Risk: %s confidence=%s", summary.get("riskLevel"), summary.get("confidence"))
    logging.info("Error patterns: %s", summary.get("errorPatterns"))
    logging.info("Subtypes: %s", summary.get("subtypeCounts"))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
