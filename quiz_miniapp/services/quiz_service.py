import logging
from typing import List, Optional, Tuple

from .typing import to_iso, as_float
from ..domain.errors import InvalidInputError, NotFoundError
from ..domain.model import ParsedQuestion
from ..domain.parser import parse_quiz_text
from ..repositories.quiz_repository import QuizRepository

logger = logging.getLogger(__name__)


def question_out(q: dict) -> dict:
    return {
        "id": q["id"],
        "quizId": q["quiz_id"],
        "question": q["question"],
        "options": q["options"],
        "correctAnswer": q["correct_answer"],
        "order": q["position"],
    }


def quiz_out(quiz: dict) -> dict:
    return {
        "id": quiz["id"],
        "userId": quiz["user_id"],
        "title": quiz["title"],
        "description": quiz.get("description"),
        "isPaid": bool(quiz.get("is_paid")),
        "price": quiz.get("price") or 0,
        "timer": quiz["timer"],
        "negativeMarking": as_float(quiz.get("negative_marking")),
        "participants": quiz.get("participants") or 0,
        "createdAt": to_iso(quiz.get("created_at")),
        "updatedAt": to_iso(quiz.get("updated_at")),
    }


def playable(parsed: List[ParsedQuestion]) -> Tuple[List[ParsedQuestion], int]:
    """Keep parsed questions that can be stored: two or more non-empty options."""
    kept = [q for q in parsed if len(q.options) >= 2 and all(q.options)]
    dropped = len(parsed) - len(kept)
    if dropped:
        logger.warning(
            "Dropped %d of %d parsed questions with fewer than two options or an empty option",
            dropped,
            len(parsed),
        )
    return kept, dropped


class QuizService:
    def __init__(self, repo: QuizRepository) -> None:
        self.repo = repo

    def list_quizzes(self, user_id: str) -> list[dict]:
        items = self.repo.list_quizzes_by_user(user_id)
        counts = self.repo.count_questions([i["id"] for i in items])
        logger.info("Found %d quizzes for user %s", len(items), user_id)
        return [{**quiz_out(i), "questionCount": counts.get(i["id"], 0)} for i in items]

    def get_quiz(self, quiz_id: str) -> Optional[dict]:
        res = self.repo.get_quiz_with_questions(quiz_id)
        if not res:
            return None
        quiz, questions = res
        return {**quiz_out(quiz), "questions": [question_out(q) for q in questions]}

    def create_quiz(self, fields: dict, questions: Optional[List[dict]] = None) -> dict:
        quiz = self.repo.create_quiz(fields)
        rows = self.repo.add_questions(quiz["id"], questions or [])
        logger.info("Created quiz %s with %d questions", quiz["id"], len(rows))
        return {**quiz_out(quiz), "questions": [question_out(q) for q in rows]}

    def update_quiz(self, quiz_id: str, patch: dict) -> Optional[dict]:
        if "is_paid" in patch and not patch["is_paid"]:
            patch = {**patch, "price": 0}
        quiz = self.repo.update_quiz(quiz_id, patch)
        return quiz_out(quiz) if quiz else None

    def delete_quiz(self, quiz_id: str) -> bool:
        return self.repo.delete_quiz(quiz_id)

    def list_questions(self, quiz_id: str) -> list[dict]:
        if self.repo.get_quiz(quiz_id) is None:
            raise NotFoundError("Quiz", quiz_id)
        return [question_out(q) for q in self.repo.list_questions(quiz_id)]

    def add_question(self, quiz_id: str, question: dict) -> dict:
        if self.repo.get_quiz(quiz_id) is None:
            raise NotFoundError("Quiz", quiz_id)
        position = len(self.repo.list_questions(quiz_id))
        rows = self.repo.add_questions(quiz_id, [question], start_position=position)
        return question_out(rows[0])

    def preview_text(self, text: str) -> dict:
        parsed, dropped = playable(parse_quiz_text(text))
        return {
            "questions": [
                {
                    "question": q.question,
                    "options": q.options,
                    "correctAnswer": q.correct_answer,
                    "answerMarked": q.answer_marked,
                }
                for q in parsed
            ],
            "questionCount": len(parsed),
            "unmarkedCount": sum(1 for q in parsed if not q.answer_marked),
            "droppedCount": dropped,
        }

    def import_text(self, text: str, fields: dict) -> dict:
        """Create a quiz from an uploaded text file; rejects files with no usable question."""
        parsed, dropped = playable(parse_quiz_text(text))
        if not parsed:
            raise InvalidInputError("No valid questions found in file")

        unmarked = sum(1 for q in parsed if not q.answer_marked)
        if unmarked:
            logger.warning(
                "%d of %d imported questions have no marked answer; option A assumed",
                unmarked,
                len(parsed),
            )

        fields = {
            "description": f"Imported quiz with {len(parsed)} questions",
            **fields,
        }
        quiz = self.create_quiz(
            fields,
            [
                {"question": q.question, "options": q.options, "correct_answer": q.correct_answer}
                for q in parsed
            ],
        )
        return {
            "quiz": quiz,
            "questionCount": len(parsed),
            "unmarkedCount": unmarked,
            "droppedCount": dropped,
        }

    def stats(self, user_id: str) -> dict:
        quizzes = self.repo.list_quizzes_by_user(user_id)
        paid = sum(1 for q in quizzes if q.get("is_paid"))
        return {
            "totalQuizzes": len(quizzes),
            "freeQuizzes": len(quizzes) - paid,
            "paidQuizzes": paid,
            "engagement": sum(q.get("participants") or 0 for q in quizzes),
        }
