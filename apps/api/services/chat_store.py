"""
Persistence for chat sessions, messages and profiles (Supabase tables).

  chat_sessions(id, user_id, title, created_at)
  chat_messages(id, session_id, user_id, content, role, suggestions, created_at)
  profiles(user_id, past_emotions, last_activity)

Calls are synchronous (supabase-py); async callers wrap them in
asyncio.to_thread.
"""
from datetime import datetime, timezone
from typing import List, Optional

from supabase import Client

from models import SuggestionCard
MAX_PAST_EMOTIONS = 10


class ChatStore:
    def __init__(self, client: Client):
        self.client = client

    def create_session(self, user_id: str, title: str) -> dict:
        res = self.client.table("chat_sessions").insert({
            "user_id": user_id,
            "title": title,
        }).execute()
        if not res.data:
            raise RuntimeError(f"chat_sessions insert returned no row for user {user_id}")
        return res.data[0]

    def latest_session(self, user_id: str) -> Optional[dict]:
        res = self.client.table("chat_sessions")\
            .select("*")\
            .eq("user_id", user_id)\
            .order("created_at", desc=True)\
            .limit(1)\
            .execute()
        return res.data[0] if res.data else None

    def list_messages(self, session_id: str) -> List[dict]:
        res = self.client.table("chat_messages")\
            .select("id, content, role, suggestions, created_at")\
            .eq("session_id", session_id)\
            .order("created_at", desc=False)\
            .execute()
        return res.data or []

    def insert_message(self, session_id: str, user_id: str, content: str, role: str,
                       suggestions: Optional[List[dict]] = None) -> dict:
        row = {
            "session_id": session_id,
            "user_id": user_id,
            "content": content,
            "role": role,
        }
        if suggestions is not None:
            row["suggestions"] = suggestions
        res = self.client.table("chat_messages").insert(row).execute()
        return res.data[0] if res.data else row

    def get_profile(self, user_id: str) -> Optional[dict]:
        res = self.client.table("profiles")\
            .select("*")\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return res.data[0] if res.data else None

    def record_emotions(self, user_id: str, emotions: List[str]) -> Optional[List[str]]:
        """
        Append detected emotion tags to the profile's rolling list, keeping the
        most recent MAX_PAST_EMOTIONS. Returns the stored list, or None when the
        user has no profile row.
        """
        if not emotions:
            return None
        profile = self.get_profile(user_id)
        if profile is None:
            return None
        current = profile.get("past_emotions") or []
        updated = (list(current) + list(emotions))[-MAX_PAST_EMOTIONS:]
        self.client.table("profiles").update({
            "past_emotions": updated,
            "last_activity": datetime.now(timezone.utc).isoformat(),
        }).eq("user_id", user_id).execute()
        return updated


def card_to_row(card: SuggestionCard) -> dict:
    # "route" is the column shape the web client reads
    return {
        "title": card.title,
        "icon": card.icon,
        "route": card.target,
        "description": card.description,
    }


def card_from_row(row: dict) -> Optional[SuggestionCard]:
    if not isinstance(row, dict):
        return None
    target = row.get("route") or row.get("target")
    if not row.get("title") or not target:
        return None
    return SuggestionCard(
        title=row["title"],
        icon=row.get("icon") or "✨",
        target=target,
        description=row.get("description") or "",
    )
