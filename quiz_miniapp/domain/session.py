import time
from enum import Enum
from typing import Callable, Optional, Sequence

from .errors import InvalidInputError, SessionStateError
from .model import UNANSWERED, ScoreResult
from .scoring import calculate_score


class Phase(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"


class TickEvent(str, Enum):
    COUNTDOWN = "countdown"
    ADVANCED = "advanced"
    SUBMITTED = "submitted"


class PlaySession:
    """
    One user taking one quiz.

    NOT_STARTED -> IN_PROGRESS(current_index, answers) -> SUBMITTED.
    Every question gets its own countdown of ``timer`` seconds, restarted
    whenever current_index changes. The countdown itself is driven from
    outside by calling tick() once per second.
    """

    def __init__(
        self,
        correct_answers: Sequence[int],
        options_count: Sequence[int],
        timer: int,
        negative_marking: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not correct_answers:
            raise InvalidInputError("Quiz has no questions")
        if len(options_count) != len(correct_answers):
            raise InvalidInputError("options_count must match the question count")
        if timer <= 0:
            raise InvalidInputError("timer must be positive")

        self.correct_answers = list(correct_answers)
        self.options_count = list(options_count)
        self.timer = timer
        self.negative_marking = negative_marking
        self._clock = clock

        self.phase = Phase.NOT_STARTED
        self.current_index = 0
        self.answers: list[int] = []
        self.time_left: Optional[int] = None
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None

    @property
    def question_count(self) -> int:
        return len(self.correct_answers)

    @property
    def is_last(self) -> bool:
        return self.current_index == self.question_count - 1

    def _require(self, phase: Phase) -> None:
        if self.phase != phase:
            raise SessionStateError(f"Session is {self.phase.value}, expected {phase.value}")

    def _move_to(self, index: int) -> None:
        self.current_index = index
        self.time_left = self.timer

    def start(self) -> None:
        self._require(Phase.NOT_STARTED)
        self.phase = Phase.IN_PROGRESS
        self.answers = [UNANSWERED] * self.question_count
        self.started_at = self._clock()
        self._move_to(0)

    def select(self, option_index: int) -> None:
        """Overwrite the answer for the current question; does not advance."""
        self._require(Phase.IN_PROGRESS)
        if not 0 <= option_index < self.options_count[self.current_index]:
            raise InvalidInputError(f"Option {option_index} does not exist")
        self.answers[self.current_index] = option_index

    def next(self) -> None:
        self._require(Phase.IN_PROGRESS)
        if self.answers[self.current_index] == UNANSWERED:
            raise InvalidInputError("Select an answer before continuing")
        if self.is_last:
            self.submit()
        else:
            self._move_to(self.current_index + 1)

    def previous(self) -> None:
        self._require(Phase.IN_PROGRESS)
        if self.current_index > 0:
            self._move_to(self.current_index - 1)

    def submit(self) -> None:
        self._require(Phase.IN_PROGRESS)
        if not self.is_last:
            raise SessionStateError("Quiz can only be submitted from the last question")
        self.phase = Phase.SUBMITTED
        self.finished_at = self._clock()
        self.time_left = None

    def tick(self) -> TickEvent:
        """Advance the countdown by one second."""
        self._require(Phase.IN_PROGRESS)
        self.time_left -= 1
        if self.time_left > 0:
            return TickEvent.COUNTDOWN
        if self.is_last:
            self.submit()
            return TickEvent.SUBMITTED
        # slot keeps whatever it held, usually UNANSWERED
        self._move_to(self.current_index + 1)
        return TickEvent.ADVANCED

    @property
    def time_taken(self) -> int:
        if self.started_at is None:
            return 0
        end = self.finished_at if self.finished_at is not None else self._clock()
        return int(end - self.started_at)

    def result(self) -> ScoreResult:
        self._require(Phase.SUBMITTED)
        return calculate_score(self.correct_answers, self.answers, self.negative_marking)

    def snapshot(self) -> dict:
        return {
            "phase": self.phase.value,
            "currentIndex": self.current_index,
            "questionCount": self.question_count,
            "answers": list(self.answers),
            "timeLeft": self.time_left,
            "timer": self.timer,
        }
