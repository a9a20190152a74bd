from typing import Any, Mapping, Sequence, Union

from .errors import InvalidInputError
from .model import UNANSWERED, AnswerRecord, ScoreResult

KeyItem = Union[int, Mapping[str, Any], Any]


def _correct_index(item: KeyItem) -> int:
    if isinstance(item, int):
        return item
    if isinstance(item, Mapping):
        if "correct_answer" in item:
            return int(item["correct_answer"])
        return int(item["correctAnswer"])
    return int(item.correct_answer)


def calculate_score(
    answer_key: Sequence[KeyItem],
    selected: Sequence[int],
    negative_marking: float = 0.0,
) -> ScoreResult:
    """
    Score one play-through.

    answer_key: correct option index per question (plain ints, rows or
    question objects). selected: chosen index per question, -1 for
    unanswered. The result is never clamped: negative marking may push
    final_score and score_percentage below zero.
    """
    total = len(answer_key)
    if total == 0:
        raise InvalidInputError("Cannot score a quiz with no questions")
    if len(selected) != total:
        raise InvalidInputError(
            f"Expected {total} answers, got {len(selected)}"
        )
    if negative_marking < 0:
        raise InvalidInputError("negative_marking must be >= 0")

    correct = 0
    incorrect = 0
    answers: list[AnswerRecord] = []
    for idx, (item, choice) in enumerate(zip(answer_key, selected)):
        expected = _correct_index(item)
        is_correct = choice != UNANSWERED and choice == expected
        if is_correct:
            correct += 1
        elif choice != UNANSWERED:
            incorrect += 1
        answers.append(
            AnswerRecord(
                question_index=idx,
                user_answer=choice,
                correct_answer=expected,
                is_correct=is_correct,
            )
        )

    final_score = correct - incorrect * negative_marking
    return ScoreResult(
        correct=correct,
        incorrect=incorrect,
        unanswered=total - correct - incorrect,
        final_score=final_score,
        score_percentage=final_score * 100 / total,
        answers=answers,
    )


def clamp_percentage(value: float) -> float:
    # display only, never feed back into stored results
    return max(0.0, min(100.0, value))


def performance_label(score_percentage: float) -> str:
    if score_percentage >= 90:
        return "Outstanding!"
    if score_percentage >= 70:
        return "Great Job!"
    if score_percentage >= 50:
        return "Good Effort!"
    return "Keep Practicing!"
