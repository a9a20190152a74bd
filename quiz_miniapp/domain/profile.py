from datetime import date, timedelta
from typing import Optional

from .model import ScoreResult

ACHIEVEMENTS = (
    "first_quiz",
    "quiz_master",
    "high_scorer",
    "brain_power",
    "streak_master",
    "perfectionist",
)


def _as_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    # Supabase returns ISO strings
    return date.fromisoformat(str(value)[:10])


def next_streak(current: int, best: int, last_quiz_date, today: date) -> tuple[int, int]:
    """Daily streak: same day keeps it, the following day extends it, any gap resets it."""
    last = _as_date(last_quiz_date)
    if last == today:
        current = max(current, 1)
    elif last is not None and last == today - timedelta(days=1):
        current += 1
    else:
        current = 1
    return current, max(best, current)


def apply_attempt(profile: dict, result: ScoreResult, today: date) -> dict:
    """
    Return the profile columns changed by one more attempt.

    avg_score_percentage is accuracy over every question ever answered,
    not the mean of per-quiz percentages.
    """
    total_answered = (profile.get("total_questions_answered") or 0) + result.total
    total_correct = (profile.get("total_correct_answers") or 0) + result.correct
    total_incorrect = (profile.get("total_incorrect_answers") or 0) + result.incorrect

    current, best = next_streak(
        profile.get("streak_current") or 0,
        profile.get("streak_best") or 0,
        profile.get("last_quiz_date"),
        today,
    )

    patch = {
        "total_quizzes": (profile.get("total_quizzes") or 0) + 1,
        "total_questions_answered": total_answered,
        "total_correct_answers": total_correct,
        "total_incorrect_answers": total_incorrect,
        "avg_score_percentage": profile.get("avg_score_percentage") or 0.0,
        "streak_current": current,
        "streak_best": best,
        "last_quiz_date": today.isoformat(),
    }
    if total_answered > 0:
        patch["avg_score_percentage"] = total_correct / total_answered * 100
    return patch


def earned_achievements(profile: dict, quizzes_created: int) -> list[str]:
    avg = profile.get("avg_score_percentage") or 0
    checks = {
        "first_quiz": quizzes_created >= 1,
        "quiz_master": quizzes_created >= 10,
        "high_scorer": avg >= 80,
        "brain_power": (profile.get("total_questions_answered") or 0) >= 100,
        "streak_master": (profile.get("streak_best") or 0) >= 7,
        "perfectionist": avg >= 95,
    }
    return [name for name in ACHIEVEMENTS if checks[name]]
