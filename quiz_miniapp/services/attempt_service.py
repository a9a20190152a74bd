import logging
from datetime import date
from typing import Callable, Sequence

from .typing import to_iso, as_float
from ..domain.errors import NotFoundError
from ..domain.model import ScoreResult
from ..domain.profile import apply_attempt
from ..domain.scoring import calculate_score
from ..repositories.attempt_repository import AttemptRepository
from ..repositories.quiz_repository import QuizRepository
from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def attempt_out(row: dict) -> dict:
    return {
        "id": row.get("id"),
        "userId": row["user_id"],
        "quizId": row["quiz_id"],
        "quizTitle": row.get("quiz_title"),
        "score": as_float(row["score"]),
        "totalQuestions": row["total_questions"],
        "correctAnswers": row["correct_answers"],
        "incorrectAnswers": row["incorrect_answers"],
        "unanswered": row.get("unanswered", 0),
        "scorePercentage": as_float(row["score_percentage"]),
        "timeTaken": row.get("time_taken") or 0,
        "negativeMarking": as_float(row.get("negative_marking")),
        "answers": row.get("answers") or [],
        "createdAt": to_iso(row.get("created_at")),
    }


class AttemptService:
    def __init__(
        self,
        quizzes: QuizRepository,
        attempts: AttemptRepository,
        users: UserRepository,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.quizzes = quizzes
        self.attempts = attempts
        self.users = users
        self.today = today

    def submit(self, user_id: str, quiz_id: str, selected: Sequence[int], time_taken: int = 0) -> dict:
        """Score the submitted selections against the stored answer key and record them."""
        res = self.quizzes.get_quiz_with_questions(quiz_id)
        if not res:
            raise NotFoundError("Quiz", quiz_id)
        quiz, questions = res
        result = calculate_score(questions, selected, as_float(quiz.get("negative_marking")))
        return self.record(user_id, quiz, result, time_taken)

    def record(self, user_id: str, quiz: dict, result: ScoreResult, time_taken: int) -> dict:
        row = self.attempts.insert_attempt(
            {
                "user_id": user_id,
                "quiz_id": quiz["id"],
                "quiz_title": quiz["title"],
                "score": result.final_score,
                "total_questions": result.total,
                "correct_answers": result.correct,
                "incorrect_answers": result.incorrect,
                "unanswered": result.unanswered,
                "score_percentage": result.score_percentage,
                "time_taken": time_taken,
                "negative_marking": as_float(quiz.get("negative_marking")),
                "answers": [
                    {
                        "question_index": a.question_index,
                        "user_answer": a.user_answer,
                        "correct_answer": a.correct_answer,
                        "is_correct": a.is_correct,
                    }
                    for a in result.answers
                ],
            }
        )
        logger.info(
            "Attempt recorded: user=%s quiz=%s score=%.2f (%d/%d)",
            user_id,
            quiz["id"],
            result.final_score,
            result.correct,
            result.total,
        )

        profile = self.users.get_user(user_id)
        if profile is not None:
            self.users.update_profile(user_id, apply_attempt(profile, result, self.today()))
        else:
            logger.info("No profile for user %s, counters not updated", user_id)

        self.quizzes.increment_participants(quiz["id"])
        return attempt_out(row)

    def history(self, user_id: str) -> list[dict]:
        return [attempt_out(r) for r in self.attempts.list_by_user(user_id)]

    def leaderboard(self, quiz_id: str, limit: int) -> list[dict]:
        rows = self.attempts.leaderboard(quiz_id, limit)
        return [
            {
                "rank": rank,
                "userId": r["user_id"],
                "score": as_float(r["score"]),
                "scorePercentage": as_float(r["score_percentage"]),
                "totalQuestions": r["total_questions"],
                "timeTaken": r.get("time_taken") or 0,
            }
            for rank, r in enumerate(rows, start=1)
        ]
