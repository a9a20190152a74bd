import math

import pytest

from quiz_miniapp.domain.errors import InvalidInputError
from quiz_miniapp.domain.model import Question
from quiz_miniapp.domain.scoring import calculate_score, clamp_percentage, performance_label

KEY = [0, 1, 2, 3, 0]


def test_mixed_answers_with_negative_marking():
    res = calculate_score(KEY, [0, 1, 0, -1, 3], 0.25)
    assert (res.correct, res.incorrect, res.unanswered) == (2, 2, 1)
    assert res.final_score == pytest.approx(1.5)
    assert res.score_percentage == pytest.approx(30.0)


def test_all_unanswered():
    res = calculate_score(KEY, [-1] * 5, 0.25)
    assert (res.correct, res.incorrect, res.unanswered) == (0, 0, 5)
    assert res.final_score == 0
    assert res.score_percentage == 0


def test_all_correct_without_negative_marking():
    res = calculate_score(KEY, list(KEY))
    assert res.correct == 5
    assert res.score_percentage == pytest.approx(100.0)


def test_score_can_go_negative_and_is_not_clamped():
    res = calculate_score(KEY, [1, 0, 0, 0, 1], 1.0)
    assert res.incorrect == 5
    assert res.final_score == -5
    assert res.score_percentage == pytest.approx(-100.0)
    assert clamp_percentage(res.score_percentage) == 0.0


def test_per_question_breakdown():
    res = calculate_score([1, 2], [1, -1])
    assert [(a.question_index, a.user_answer, a.correct_answer, a.is_correct) for a in res.answers] == [
        (0, 1, 1, True),
        (1, -1, 2, False),
    ]


def test_accepts_rows_and_question_objects():
    rows = [{"correct_answer": 1}, {"correctAnswer": 0}]
    assert calculate_score(rows, [1, 0]).correct == 2
    questions = [Question("q", ["a", "b"], 1, 0)]
    assert calculate_score(questions, [1]).correct == 1


def test_empty_quiz_is_rejected():
    with pytest.raises(InvalidInputError):
        calculate_score([], [])


def test_length_mismatch_is_rejected():
    with pytest.raises(InvalidInputError):
        calculate_score(KEY, [0, 1])


def test_negative_coefficient_is_rejected():
    with pytest.raises(InvalidInputError):
        calculate_score(KEY, [0] * 5, -0.5)


def test_extreme_coefficient_still_returns_a_number():
    res = calculate_score([0], [1], 1e6)
    assert math.isfinite(res.score_percentage)


@pytest.mark.parametrize(
    "pct,label",
    [(95, "Outstanding!"), (70, "Great Job!"), (50, "Good Effort!"), (-20, "Keep Practicing!")],
)
def test_performance_label(pct, label):
    assert performance_label(pct) == label


def test_clamp_percentage_upper_bound():
    assert clamp_percentage(120.0) == 100.0
    assert clamp_percentage(42.5) == 42.5
