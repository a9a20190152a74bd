import logging
from typing import Optional, Tuple

from .typing import to_iso, as_float
from ..domain.profile import earned_achievements
from ..repositories.quiz_repository import QuizRepository
from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def user_out(row: dict) -> dict:
    return {
        "id": row["user_id"],
        "telegramId": row["user_id"],
        "username": row.get("username"),
        "firstName": row.get("first_name"),
        "lastName": row.get("last_name"),
        "createdAt": to_iso(row.get("created_at")),
    }


class UserService:
    def __init__(self, users: UserRepository, quizzes: QuizRepository) -> None:
        self.users = users
        self.quizzes = quizzes

    def get_user(self, telegram_id: str) -> Optional[dict]:
        row = self.users.get_user(telegram_id)
        return user_out(row) if row else None

    def ensure_user(
        self,
        telegram_id: str,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> Tuple[dict, bool]:
        """Return (user, created). Registering an existing Telegram id is a no-op."""
        existing = self.users.get_user(telegram_id)
        if existing:
            return user_out(existing), False
        row = self.users.create_user(
            {
                "user_id": telegram_id,
                "username": username,
                "first_name": first_name,
                "last_name": last_name,
                "total_quizzes": 0,
                "total_questions_answered": 0,
                "total_correct_answers": 0,
                "total_incorrect_answers": 0,
                "avg_score_percentage": 0,
                "streak_current": 0,
                "streak_best": 0,
                "last_quiz_date": None,
                "is_premium": False,
            }
        )
        logger.info("Registered Telegram user %s", telegram_id)
        return user_out(row), True

    def get_profile(self, telegram_id: str) -> Optional[dict]:
        row = self.users.get_user(telegram_id)
        if not row:
            return None
        created = len(self.quizzes.list_quizzes_by_user(telegram_id))
        return {
            **user_out(row),
            "totalQuizzes": row.get("total_quizzes") or 0,
            "totalQuestionsAnswered": row.get("total_questions_answered") or 0,
            "totalCorrectAnswers": row.get("total_correct_answers") or 0,
            "totalIncorrectAnswers": row.get("total_incorrect_answers") or 0,
            "avgScorePercentage": as_float(row.get("avg_score_percentage")),
            "streak": {
                "current": row.get("streak_current") or 0,
                "best": row.get("streak_best") or 0,
                "lastQuizDate": to_iso(row.get("last_quiz_date")),
            },
            "isPremium": bool(row.get("is_premium")),
            "achievements": earned_achievements(row, created),
        }

    def is_premium(self, telegram_id: str) -> bool:
        row = self.users.get_user(telegram_id)
        return bool(row and row.get("is_premium"))
