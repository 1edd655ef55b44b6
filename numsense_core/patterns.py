# numsense_core/patterns.py
from __future__ import annotations
import re
from typing import Iterable, Optional, Tuple
from .scoring import answer_text
from .types import ErrorPatternCounts, Question, ScoredAnswer

_SYMBOL_RX      = re.compile(r"[<>=]")
_DIGIT_RX       = re.compile(r"\d")
# "7 ? 3": the relation between two numbers is the blank
_PLACEHOLDER_RX = re.compile(r"\d\s*\?\s*\d")
# plain decimal notation only; float() alone would also take "1_0", "nan" and "inf"
_NUMBER_RX      = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def _as_number(text: str) -> Optional[float]:
    t = text.strip()
    if not _NUMBER_RX.match(t): return None
    try:
        return float(t)
    except ValueError:
        return None


def is_comparison_context(question: Question) -> bool:
    text = question.text or ""
    return bool(_SYMBOL_RX.search(text) or _PLACEHOLDER_RX.search(text))


def is_number_reversal(question: Question, answer: ScoredAnswer) -> bool:
    if answer.is_correct: return False
    corr = answer_text(question.correct_answer)
    sel = answer_text(answer.selected_answer)
    return bool(corr) and len(sel) == len(corr) and sel[::-1] == corr


def is_symbol_confusion(question: Question, answer: ScoredAnswer) -> bool:
    sel = answer_text(answer.selected_answer)
    return is_comparison_context(question) and bool(_DIGIT_RX.search(sel)) and not _SYMBOL_RX.search(sel)


def is_sequencing_error(question: Question, answer: ScoredAnswer) -> bool:
    if "memory" not in str(question.domain or "").lower(): return False
    corr = _as_number(answer_text(question.correct_answer))
    sel = _as_number(answer_text(answer.selected_answer))
    if corr is None or sel is None: return False
    return abs(corr - sel) == 1


def detect_error_patterns(pairs: Iterable[Tuple[Question, ScoredAnswer]]) -> ErrorPatternCounts:
    reversal = symbol = sequencing = 0
    for question, answer in pairs:
        if is_number_reversal(question, answer): reversal += 1
        if is_symbol_confusion(question, answer): symbol += 1
        if is_sequencing_error(question, answer): sequencing += 1
    return ErrorPatternCounts(number_reversal=reversal, symbol_confusion=symbol, sequencing_error=sequencing)
