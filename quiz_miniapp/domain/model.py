from dataclasses import dataclass, field
from typing import List

UNANSWERED = -1


@dataclass(frozen=True)
class Question:
    question: str
    options: list[str]
    correct_answer: int
    position: int


@dataclass(frozen=True)
class Quiz:
    id: str
    title: str
    timer: int
    negative_marking: float
    questions: List[Question]


@dataclass(frozen=True)
class ParsedQuestion:
    question: str
    options: list[str]
    correct_answer: int = 0
    # False when correct_answer is only the fallback first option
    answer_marked: bool = False


@dataclass(frozen=True)
class AnswerRecord:
    question_index: int
    user_answer: int
    correct_answer: int
    is_correct: bool


@dataclass(frozen=True)
class ScoreResult:
    correct: int
    incorrect: int
    unanswered: int
    final_score: float
    score_percentage: float
    answers: List[AnswerRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.correct + self.incorrect + self.unanswered
