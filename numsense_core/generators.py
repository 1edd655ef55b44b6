"""Question generators for the four screening domains.

Each generator takes a difficulty (1..5), the question's position in the
subtest and a ``random.Random`` so runs can be replayed from a seed.  Options
hold four distinct values, exactly one flagged correct; symbol comparisons
offer only the three relations ``>``, ``<`` and ``=``.
"""
from __future__ import annotations

import random
from typing import Callable, Dict, Iterable, List, Optional

from . import config
from .question_bank import DOMAINS
from .types import Option, Question

SYMBOL_QUANTITY = "symbol_quantity"
FRUITS = ["apple", "banana", "orange", "grapes"]
SHAPES = ["▲", "■", "●", "◆"]

_ONES = [
    "zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine", "ten",
    "eleven", "twelve", "thirteen", "fourteen", "fifteen", "sixteen", "seventeen", "eighteen", "nineteen",
]
_TENS = ["", "", "twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety"]


def number_to_words(n: int) -> str:
    """English words for 0..999."""
    n = int(n)
    if n < 20:
        return _ONES[n]
    if n < 100:
        t, r = divmod(n, 10)
        return _TENS[t] + (" " + _ONES[r] if r else "")
    h, rem = divmod(n, 100)
    return _ONES[h] + " hundred" + (" " + number_to_words(rem) if rem else "")


def _clamp(difficulty: int) -> int:
    return max(config.MIN_DIFFICULTY, min(config.MAX_DIFFICULTY, int(difficulty)))


def _qid(prefix: str, idx: int, rng: random.Random) -> str:
    return f"{prefix}-{idx}-{rng.getrandbits(32):08x}"


def _options(values: Iterable[str], correct: str) -> List[Option]:
    return [Option(text=v, is_correct=(v == correct)) for v in values]


def _fill(seed: Iterable[str], make: Callable[[], str], count: int = 4) -> List[str]:
    # insertion-ordered set
    vals: Dict[str, None] = dict.fromkeys(seed)
    while len(vals) < count:
        vals[make()] = None
    return list(vals)


def numeric_options(correct: int, rng: random.Random, count: int = 4) -> List[Option]:
    """Distractors built from transposition and place-value slips, then small offsets."""
    n = int(correct)
    vals: Dict[str, None] = {str(n): None}
    digits = str(abs(n))
    sign = -1 if n < 0 else 1
    if len(digits) == 2:
        vals[str(int(digits[::-1]) * sign)] = None
    vals[str(n + 10)] = None
    vals[str(max(0, n - 10))] = None
    vals[str(n + 100)] = None
    if len(digits) >= 3:
        swapped = list(digits)
        swapped[1], swapped[2] = swapped[2], swapped[1]
        vals[str(int("".join(swapped)) * sign)] = None

    spread = max(1, round(abs(n) / 3))

    def offset() -> str:
        delta = rng.randint(1, spread)
        return str(max(0, n + (delta if rng.random() > 0.5 else -delta)))

    picked = _fill(vals, offset, count)[:count]
    return _options(picked, str(n))


def _symbol_quantity(difficulty: int, idx: int, rng: random.Random) -> Question:
    pick = rng.random()
    top = min(999, 10 ** min(3, difficulty + 1) - 1)
    if pick < 0.35:
        val = rng.randint(0, top)
        return Question(
            id=_qid("sq-audio", idx, rng), domain="number_sense",
            text="Listen and choose the numeral that matches the spoken number.",
            options=numeric_options(val, rng), correct_answer=str(val), difficulty=difficulty,
            subtype=SYMBOL_QUANTITY, extras={"speechText": number_to_words(val)},
        )
    if pick < 0.7:
        n = rng.randint(1, min(8, difficulty * 3))
        fruit = FRUITS[idx % len(FRUITS)]
        text = f"How many {fruit}s are shown?"
        return Question(
            id=_qid("sq-pic", idx, rng), domain="number_sense", text=text,
            options=numeric_options(n, rng), correct_answer=str(n), difficulty=difficulty,
            subtype=SYMBOL_QUANTITY, extras={"images": [f"/images/{fruit}.svg"] * n, "speechText": text},
        )
    val = rng.randint(0, top)
    words = number_to_words(val)
    if rng.random() > 0.5:
        return Question(
            id=_qid("sq-read", idx, rng), domain="number_sense", text=f'Which numeral matches: "{words}"?',
            options=numeric_options(val, rng), correct_answer=str(val), difficulty=difficulty,
            subtype=SYMBOL_QUANTITY, extras={"speechText": words},
        )
    nearby = [number_to_words(min(999, val + 10)), number_to_words(max(0, val - 10)), number_to_words(min(999, val + 1))]

    def near_word() -> str:
        delta = rng.randint(1, 20)
        return number_to_words(min(999, max(0, val + (delta if rng.random() > 0.5 else -delta))))

    return Question(
        id=_qid("sq-read", idx, rng), domain="number_sense", text=f"Which word matches the numeral: {val}?",
        options=_options(_fill([words, *nearby], near_word), words), correct_answer=words,
        difficulty=difficulty, subtype=SYMBOL_QUANTITY, extras={"speechText": words},
    )


def gen_number_sense(difficulty: int, idx: int, rng: random.Random, subtype: Optional[str] = None) -> Question:
    if subtype == SYMBOL_QUANTITY:
        return _symbol_quantity(difficulty, idx, rng)
    a = rng.randint(1, 10 ** difficulty)
    b = rng.randint(1, 10 ** difficulty)
    if rng.random() > 0.5:
        correct = ">" if a > b else ("<" if a < b else "=")
        return Question(
            id=_qid("n", idx, rng), domain="number_sense", text=f"{a}  ?  {b}",
            options=_options([">", "<", "="], correct), correct_answer=correct,
            difficulty=difficulty, subtype=subtype,
        )
    missing = rng.randint(1, max(3, a // 2 + 1))
    total = a + missing
    correct = str(missing)
    values = _fill([correct], lambda: str(rng.randint(0, max(3, total // 2))))
    return Question(
        id=_qid("n", idx, rng), domain="number_sense", text=f"{a} + ? = {total}",
        options=_options(values, correct), correct_answer=correct, difficulty=difficulty, subtype=subtype,
    )


def gen_arithmetic(difficulty: int, idx: int, rng: random.Random, subtype: Optional[str] = None) -> Question:
    a = rng.randint(1, max(4, 10 ** (difficulty - 1)))
    b = rng.randint(1, max(3, 10 ** max(0, difficulty - 2)))
    op = "+" if difficulty < 3 else ("×" if difficulty < 5 else "+")
    correct = a + b if op == "+" else a * b

    def near() -> str:
        delta = rng.randint(1, 3)
        return str(max(0, correct + (delta if rng.random() > 0.5 else -delta)))

    values = _fill([str(correct)], near)
    rng.shuffle(values)
    return Question(
        id=_qid("a", idx, rng), domain="arithmetic", text=f"{a} {op} {b} = ?",
        options=_options(values, str(correct)), correct_answer=str(correct), difficulty=difficulty, subtype=subtype,
    )


def gen_spatial(difficulty: int, idx: int, rng: random.Random, subtype: Optional[str] = None) -> Question:
    shape = rng.choice(SHAPES)
    count = rng.randint(1, min(9, difficulty * 3))
    correct = str(count)
    values = _fill([correct], lambda: str(rng.randint(0, max(3, count + 3))))
    return Question(
        id=_qid("s", idx, rng), domain="spatial", text=f"{shape}  x {count}  = ?",
        options=_options(values, correct), correct_answer=correct, difficulty=difficulty, subtype=subtype,
    )


def gen_memory(difficulty: int, idx: int, rng: random.Random, subtype: Optional[str] = None) -> Question:
    length = min(6, 2 + difficulty)
    seq = [str(rng.randint(0, 9)) for _ in range(length)]
    pos = rng.randint(1, length)
    correct = seq[pos - 1]
    values = _fill([correct], lambda: str(rng.randint(0, 9)))
    return Question(
        id=_qid("m", idx, rng), domain="memory", text=f"Remember: {' '.join(seq)}  - What was item {pos}?",
        options=_options(values, correct), correct_answer=correct, difficulty=difficulty, subtype=subtype,
    )


GENERATORS: Dict[str, Callable[..., Question]] = {
    "number_sense": gen_number_sense,
    "arithmetic": gen_arithmetic,
    "spatial": gen_spatial,
    "memory": gen_memory,
}


def generate_question(
    domain: str,
    difficulty: int = 1,
    idx: int = 0,
    subtype: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> Question:
    gen = GENERATORS.get(domain)
    if gen is None:
        raise KeyError(f"unknown domain {domain!r}")
    return gen(_clamp(difficulty), idx, rng or random.Random(), subtype)


def generate_set(
    domains: Optional[Iterable[str]] = None,
    per_domain: Optional[int] = None,
    difficulty: Optional[int] = None,
    subtype: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> List[Question]:
    r = rng or random.Random(config.DEBUG_SEED)
    count = config.QUESTIONS_PER_DOMAIN if per_domain is None else int(per_domain)
    level = config.START_DIFFICULTY if difficulty is None else int(difficulty)
    out: List[Question] = []
    for domain in list(domains or DOMAINS):
        for idx in range(count):
            out.append(generate_question(domain, level, idx, subtype, r))
    return out


def next_difficulty(
    difficulty: int,
    was_correct: bool,
    response_time_ms: Optional[int] = None,
    quick_ms: Optional[int] = None,
) -> int:
    """
    One step up after a correct answer, one down after a wrong one.
    With ``quick_ms`` the step up also needs a response faster than it.
    """
    step = 0
    if was_correct:
        quick = quick_ms is None or (response_time_ms is not None and response_time_ms < quick_ms)
        step = 1 if quick else 0
    else:
        step = -1
    return _clamp(int(difficulty) + step)
