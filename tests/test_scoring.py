from __future__ import annotations

import random

from numsense_core.scoring import answer_text, percent, round_half_up, score_answers
from tests.conftest import answer, build_question_set, make_question


def test_all_correct_scores_full_marks(question_set):
    answers = [answer(q.id, q.correct_answer) for q in question_set]
    scored, pairs, scores = score_answers(question_set, answers)

    assert all(a.is_correct for a in scored)
    assert len(pairs) == len(question_set)
    assert scores.total == 100
    assert scores.number_sense == 100
    assert scores.arithmetic == 100
    assert scores.spatial == 100
    assert scores.memory == 100


def test_domain_without_answers_scores_zero(question_set):
    answers = [answer("ar1", "4"), answer("ar2", "21")]
    _, _, scores = score_answers(question_set, answers)

    assert scores.arithmetic == 100
    assert scores.total == 100
    assert scores.number_sense == 0
    assert scores.spatial == 0
    assert scores.memory == 0


def test_empty_answers_score_zero_everywhere(question_set):
    scored, pairs, scores = score_answers(question_set, [])

    assert scored == [] and pairs == []
    assert scores.to_dict() == {"number_sense": 0, "arithmetic": 0, "spatial": 0, "memory": 0, "total": 0}


def test_unknown_question_counts_in_total_only(question_set):
    answers = [answer("ar1", "4"), answer("does-not-exist", "4")]
    scored, pairs, scores = score_answers(question_set, answers)

    assert [a.is_correct for a in scored] == [True, False]
    assert len(pairs) == 1
    assert scores.total == 50
    assert scores.arithmetic == 100
    assert scores.memory == 0


def test_timeout_is_always_wrong():
    q = make_question("q", correct=None, text="How many dots?")
    scored, _, scores = score_answers([q], [answer("q", None)])

    assert scored[0].is_correct is False
    assert scores.total == 0


def test_comparison_is_exact_string_match():
    questions = [
        make_question("a", correct=4),
        make_question("b", correct="4"),
        make_question("c", domain="spatial", correct="Red", text="What color are the shapes?"),
    ]
    answers = [answer("a", "4"), answer("b", 4.0), answer("c", "red")]
    scored, _, _ = score_answers(questions, answers)

    assert [a.is_correct for a in scored] == [True, True, False]


def test_percent_rounds_half_up():
    questions = [make_question(f"q{i}") for i in range(8)]
    answers = [answer("q0", "4")] + [answer(f"q{i}", "5") for i in range(1, 8)]
    _, _, scores = score_answers(questions, answers)

    assert scores.total == 13
    assert scores.arithmetic == 13
    assert round_half_up(2.5) == 3
    assert percent(1, 0) == 0


def test_scores_stay_within_bounds_for_mixed_submissions():
    rng = random.Random(11)
    questions = build_question_set()
    ids = [q.id for q in questions] + ["ghost"]
    for _ in range(50):
        answers = [answer(rng.choice(ids), rng.choice(["4", "21", ">", "5", "3", "12", None])) for _ in range(rng.randint(0, 12))]
        scored, _, scores = score_answers(questions, answers)
        for value in scores.to_dict().values():
            assert 0 <= value <= 100
        correct = sum(1 for a in scored if a.is_correct)
        assert scores.total == percent(correct, max(1, len(answers)))


def test_answer_text_coercion():
    assert answer_text(None) == ""
    assert answer_text(7.0) == "7"
    assert answer_text(7.5) == "7.5"
    assert answer_text(True) == "true"
    assert answer_text(">") == ">"


def test_response_time_and_attempts_are_normalised(question_set):
    scored, _, _ = score_answers(question_set, [answer("ar1", "4", ms=-5, attempts=0)])
    assert scored[0].response_time_ms == 0
    assert scored[0].attempts == 1
