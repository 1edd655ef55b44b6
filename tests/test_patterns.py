from __future__ import annotations

from numsense_core.patterns import detect_error_patterns, is_comparison_context
from numsense_core.scoring import score_answers
from tests.conftest import answer, make_question


def _patterns(questions, answers):
    _, pairs, _ = score_answers(questions, answers)
    return detect_error_patterns(pairs)


def test_reversed_digits_count_once():
    q = make_question("q", correct="12", text="How many apples are shown?", domain="number_sense")
    counts = _patterns([q], [answer("q", "21")])
    assert counts.number_reversal == 1


def test_correct_answers_are_not_reversals():
    # a correct answer is never a reversal, palindromes included
    q1 = make_question("q1", correct="12", text="How many apples are shown?", domain="number_sense")
    q2 = make_question("q2", correct="11", text="How many apples are shown?", domain="number_sense")
    counts = _patterns([q1, q2], [answer("q1", "12"), answer("q2", "11")])
    assert counts.number_reversal == 0


def test_reversal_needs_equal_length():
    q = make_question("q", correct="12", text="How many apples are shown?", domain="number_sense")
    assert _patterns([q], [answer("q", "210")]).number_reversal == 0
    assert _patterns([q], [answer("q", None)]).number_reversal == 0


def test_number_for_comparison_blank_is_symbol_confusion():
    q = make_question("q", domain="number_sense", correct=">", text="7 ? 3")
    assert is_comparison_context(q)
    assert _patterns([q], [answer("q", "10")]).symbol_confusion == 1
    assert _patterns([q], [answer("q", ">")]).symbol_confusion == 0
    assert _patterns([q], [answer("q", "<")]).symbol_confusion == 0


def test_symbol_confusion_needs_comparison_context():
    q = make_question("q", domain="number_sense", correct="5", text="How many dots?")
    assert not is_comparison_context(q)
    assert _patterns([q], [answer("q", "10")]).symbol_confusion == 0


def test_symbol_in_text_is_comparison_context():
    q = make_question("q", domain="number_sense", correct="<", text="3 < 7 or 3 > 7?")
    assert _patterns([q], [answer("q", "3")]).symbol_confusion == 1


def test_off_by_one_memory_recall_is_sequencing_error():
    q = make_question("q", domain="memory", correct="5", text="Remember: 2 5 8  - What was item 2?")
    assert _patterns([q], [answer("q", "4")]).sequencing_error == 1
    assert _patterns([q], [answer("q", "6")]).sequencing_error == 1
    assert _patterns([q], [answer("q", "3")]).sequencing_error == 0
    assert _patterns([q], [answer("q", None)]).sequencing_error == 0


def test_sequencing_only_applies_to_memory():
    q = make_question("q", domain="arithmetic", correct="5", text="2 + 3")
    assert _patterns([q], [answer("q", "4")]).sequencing_error == 0


def test_predicates_are_independent_and_accumulate():
    both = make_question("a", domain="number_sense", correct="12", text="12 = ?")
    again = make_question("b", domain="number_sense", correct="34", text="How many apples are shown?")
    counts = _patterns([both, again], [answer("a", "21"), answer("b", "43")])

    assert counts.number_reversal == 2
    assert counts.symbol_confusion == 1
    assert counts.sequencing_error == 0


def test_unmatched_answers_are_ignored():
    q = make_question("q", domain="memory", correct="5", text="Remember: 5")
    counts = _patterns([q], [answer("missing", "4")])
    assert counts.to_dict() == {"numberReversal": 0, "symbolConfusion": 0, "sequencingError": 0}


def test_sequencing_reads_plain_numbers_only():
    q = make_question("q", domain="memory", correct="11", text="Remember: 7 11 3  - What was item 2?")
    assert _patterns([q], [answer("q", "1e1")]).sequencing_error == 1
    assert _patterns([q], [answer("q", " 12 ")]).sequencing_error == 1
    for odd in ("1_0", "1_2", "nan", "inf", "0x0c"):
        assert _patterns([q], [answer("q", odd)]).sequencing_error == 0, odd
