from typing import Optional
from supabase import Client


class UserRepository:
    """Telegram users and their running quiz statistics (table user_profiles)."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def get_user(self, telegram_id: str) -> Optional[dict]:
        res = (
            self.client.table("user_profiles")
            .select("*")
            .eq("user_id", telegram_id)
            .limit(1)
            .execute()
        )
        return res.data[0] if res.data else None

    def create_user(self, row: dict) -> dict:
        res = self.client.table("user_profiles").insert(row).execute()
        if not res.data:
            raise RuntimeError("Insert user_profiles failed: no row returned")
        return res.data[0]

    def update_profile(self, telegram_id: str, patch: dict) -> Optional[dict]:
        res = (
            self.client.table("user_profiles")
            .update(patch)
            .eq("user_id", telegram_id)
            .execute()
        )
        return res.data[0] if res.data else None
