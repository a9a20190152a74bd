from typing import List
from supabase import Client


class AttemptRepository:
    """Append-only store of finished play-throughs."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def insert_attempt(self, row: dict) -> dict:
        res = self.client.table("quiz_attempts").insert(row).execute()
        if not res.data:
            raise RuntimeError("Insert quiz_attempts failed: no row returned")
        return res.data[0]

    def list_by_user(self, user_id: str) -> List[dict]:
        res = (
            self.client.table("quiz_attempts")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return res.data or []

    def leaderboard(self, quiz_id: str, limit: int) -> List[dict]:
        # ties go to the faster attempt
        res = (
            self.client.table("quiz_attempts")
            .select("user_id,score,score_percentage,total_questions,time_taken,created_at")
            .eq("quiz_id", quiz_id)
            .order("score", desc=True)
            .order("time_taken", desc=False)
            .limit(limit)
            .execute()
        )
        return res.data or []
