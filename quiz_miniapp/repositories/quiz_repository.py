from datetime import datetime, timezone
from typing import List, Optional, Tuple
from supabase import Client

QUIZ_COLUMNS = (
    "id,user_id,title,description,is_paid,price,timer,negative_marking,"
    "participants,created_at,updated_at"
)


class QuizRepository:
    def __init__(self, client: Client) -> None:
        self.client = client

    def list_quizzes_by_user(self, user_id: str) -> List[dict]:
        res = (
            self.client.table("quizzes")
            .select(QUIZ_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return res.data or []

    def get_quiz(self, quiz_id: str) -> Optional[dict]:
        # .single() raises on zero rows, so take the first row of a limited select
        res = (
            self.client.table("quizzes")
            .select(QUIZ_COLUMNS)
            .eq("id", quiz_id)
            .limit(1)
            .execute()
        )
        return res.data[0] if res.data else None

    def list_questions(self, quiz_id: str) -> List[dict]:
        res = (
            self.client.table("questions")
            .select("id,quiz_id,question,options,correct_answer,position")
            .eq("quiz_id", quiz_id)
            .order("position", desc=False)
            .execute()
        )
        return res.data or []

    def get_quiz_with_questions(self, quiz_id: str) -> Optional[Tuple[dict, List[dict]]]:
        quiz = self.get_quiz(quiz_id)
        if quiz is None:
            return None
        return quiz, self.list_questions(quiz_id)

    def count_questions(self, quiz_ids: List[str]) -> dict[str, int]:
        counts = {quiz_id: 0 for quiz_id in quiz_ids}
        if not quiz_ids:
            return counts
        res = (
            self.client.table("questions")
            .select("quiz_id")
            .in_("quiz_id", quiz_ids)
            .execute()
        )
        for row in res.data or []:
            counts[row["quiz_id"]] = counts.get(row["quiz_id"], 0) + 1
        return counts

    def create_quiz(self, fields: dict) -> dict:
        # no .select()/.single() after insert: the representation comes back in data
        res = self.client.table("quizzes").insert({**fields, "participants": 0}).execute()
        if not res.data or not isinstance(res.data, list) or "id" not in res.data[0]:
            raise RuntimeError("Insert quizzes failed: no returned id")
        return res.data[0]

    def add_questions(self, quiz_id: str, questions: List[dict], start_position: int = 0) -> List[dict]:
        """Append questions keeping their order after start_position."""
        rows = [
            {
                "quiz_id": quiz_id,
                "question": q["question"],
                "options": q["options"],
                "correct_answer": q["correct_answer"],
                "position": start_position + idx,
            }
            for idx, q in enumerate(questions)
        ]
        if not rows:
            return []
        res = self.client.table("questions").insert(rows).execute()
        if not res.data:
            raise RuntimeError("Insert questions failed: no rows returned")
        return res.data

    def update_quiz(self, quiz_id: str, patch: dict) -> Optional[dict]:
        patch = {**patch, "updated_at": datetime.now(timezone.utc).isoformat()}
        res = self.client.table("quizzes").update(patch).eq("id", quiz_id).execute()
        return res.data[0] if res.data else None

    def increment_participants(self, quiz_id: str) -> None:
        # read-modify-write; concurrent attempts may undercount
        quiz = self.get_quiz(quiz_id)
        if quiz is None:
            return
        self.update_quiz(quiz_id, {"participants": (quiz.get("participants") or 0) + 1})

    def delete_quiz(self, quiz_id: str) -> bool:
        res = self.client.table("quizzes").delete().eq("id", quiz_id).execute()
        if not res.data:
            return False
        # questions go second; a failure here leaves orphans, not a half-deleted quiz
        self.client.table("questions").delete().eq("quiz_id", quiz_id).execute()
        return True
