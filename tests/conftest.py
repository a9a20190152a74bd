import os
import uuid
from datetime import date, datetime, timezone

os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

import pytest
from fastapi.testclient import TestClient

from quiz_miniapp.api.deps import get_attempt_service, get_quiz_service, get_user_service
from quiz_miniapp.main import app
from quiz_miniapp.services.attempt_service import AttemptService
from quiz_miniapp.services.quiz_service import QuizService
from quiz_miniapp.services.user_service import UserService


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MemoryQuizRepository:
    """Same surface as QuizRepository, backed by dicts."""

    def __init__(self):
        self.quizzes: dict[str, dict] = {}
        self.questions: list[dict] = []

    def list_quizzes_by_user(self, user_id):
        rows = [q for q in self.quizzes.values() if q["user_id"] == user_id]
        return sorted(rows, key=lambda q: q["created_at"], reverse=True)

    def get_quiz(self, quiz_id):
        return self.quizzes.get(quiz_id)

    def list_questions(self, quiz_id):
        rows = [q for q in self.questions if q["quiz_id"] == quiz_id]
        return sorted(rows, key=lambda q: q["position"])

    def get_quiz_with_questions(self, quiz_id):
        quiz = self.get_quiz(quiz_id)
        if quiz is None:
            return None
        return quiz, self.list_questions(quiz_id)

    def count_questions(self, quiz_ids):
        return {qid: len(self.list_questions(qid)) for qid in quiz_ids}

    def create_quiz(self, fields):
        row = {
            "id": str(uuid.uuid4()),
            "description": None,
            "is_paid": False,
            "price": 0,
            "timer": 30,
            "negative_marking": 0,
            **fields,
            "participants": 0,
            "created_at": _now(),
            "updated_at": _now(),
        }
        self.quizzes[row["id"]] = row
        return row

    def add_questions(self, quiz_id, questions, start_position=0):
        rows = []
        for idx, q in enumerate(questions):
            row = {
                "id": str(uuid.uuid4()),
                "quiz_id": quiz_id,
                "question": q["question"],
                "options": list(q["options"]),
                "correct_answer": q["correct_answer"],
                "position": start_position + idx,
            }
            self.questions.append(row)
            rows.append(row)
        return rows

    def update_quiz(self, quiz_id, patch):
        quiz = self.quizzes.get(quiz_id)
        if quiz is None:
            return None
        quiz.update(patch, updated_at=_now())
        return quiz

    def increment_participants(self, quiz_id):
        quiz = self.quizzes.get(quiz_id)
        if quiz is not None:
            quiz["participants"] += 1

    def delete_quiz(self, quiz_id):
        if self.quizzes.pop(quiz_id, None) is None:
            return False
        self.questions = [q for q in self.questions if q["quiz_id"] != quiz_id]
        return True


class MemoryAttemptRepository:
    def __init__(self):
        self.rows: list[dict] = []

    def insert_attempt(self, row):
        stored = {**row, "id": str(uuid.uuid4()), "created_at": _now()}
        self.rows.append(stored)
        return stored

    def list_by_user(self, user_id):
        return [r for r in reversed(self.rows) if r["user_id"] == user_id]

    def leaderboard(self, quiz_id, limit):
        rows = [r for r in self.rows if r["quiz_id"] == quiz_id]
        rows.sort(key=lambda r: (-r["score"], r["time_taken"]))
        return rows[:limit]


class MemoryUserRepository:
    def __init__(self):
        self.rows: dict[str, dict] = {}

    def get_user(self, telegram_id):
        return self.rows.get(telegram_id)

    def create_user(self, row):
        stored = {**row, "created_at": _now()}
        self.rows[row["user_id"]] = stored
        return stored

    def update_profile(self, telegram_id, patch):
        row = self.rows.get(telegram_id)
        if row is None:
            return None
        row.update(patch)
        return row


class FakeRedis:
    """The handful of redis.asyncio calls the play sessions make."""

    def __init__(self):
        self.store: dict[str, str] = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def get(self, key):
        return self.store.get(key)

    async def delete(self, *keys):
        return sum(1 for k in keys if self.store.pop(k, None) is not None)


@pytest.fixture
def quiz_repo():
    return MemoryQuizRepository()


@pytest.fixture
def attempt_repo():
    return MemoryAttemptRepository()


@pytest.fixture
def user_repo():
    return MemoryUserRepository()


@pytest.fixture
def today():
    return date(2026, 10, 19)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(quiz_repo, attempt_repo, user_repo, today):
    app.dependency_overrides[get_quiz_service] = lambda: QuizService(quiz_repo)
    app.dependency_overrides[get_attempt_service] = lambda: AttemptService(
        quiz_repo, attempt_repo, user_repo, today=lambda: today
    )
    app.dependency_overrides[get_user_service] = lambda: UserService(user_repo, quiz_repo)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_quiz(quiz_repo):
    def _make(questions, timer=30, negative_marking=0.0, user_id="1001", title="Capitals"):
        quiz = quiz_repo.create_quiz(
            {
                "user_id": user_id,
                "title": title,
                "timer": timer,
                "negative_marking": negative_marking,
            }
        )
        quiz_repo.add_questions(
            quiz["id"],
            [
                {"question": text, "options": options, "correct_answer": correct}
                for text, options, correct in questions
            ],
        )
        return quiz

    return _make
