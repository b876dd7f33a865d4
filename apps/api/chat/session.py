"""
Session identity bootstrap and history replay.

A chat page is usable the moment it mounts: a local, non-persisted session
is issued synchronously. Upgrading to an authenticated, persisted session
happens afterwards and never surfaces an error to the user.
"""
import asyncio
import traceback
import uuid
from typing import List, Optional

import config
from models import ChatTurn, Session, Speaker
from services.chat_store import card_from_row
from .rules import WELCOME_BACK_TEXT, WELCOME_CARDS, WELCOME_TEXT


def welcome_turn() -> ChatTurn:
    return ChatTurn(text=WELCOME_TEXT, speaker=Speaker.ASSISTANT, suggestions=list(WELCOME_CARDS))


def welcome_back_turn() -> ChatTurn:
    return ChatTurn(text=WELCOME_BACK_TEXT, speaker=Speaker.ASSISTANT, suggestions=list(WELCOME_CARDS))


def new_local_session() -> Session:
    return Session(
        session_id=str(uuid.uuid4()),
        user_id=f"anonymous_{uuid.uuid4().hex}",
        persisted=False,
    )


class HistoryLoader:
    def __init__(self, store):
        self.store = store

    @staticmethod
    def _turn_from_row(row: dict) -> ChatTurn:
        cards = [c for c in (card_from_row(s) for s in (row.get("suggestions") or [])) if c is not None]
        kwargs = {}
        if row.get("id") is not None:
            kwargs["id"] = str(row["id"])
        if row.get("created_at"):
            kwargs["created_at"] = row["created_at"]
        return ChatTurn(
            text=row.get("content") or "",
            speaker=Speaker.USER if row.get("role") == "user" else Speaker.ASSISTANT,
            suggestions=cards,
            **kwargs,
        )

    async def load(self, session_id: str) -> List[ChatTurn]:
        """Prior turns oldest first; never empty, never raises."""
        if self.store is None:
            return [welcome_back_turn()]
        try:
            rows = await asyncio.to_thread(self.store.list_messages, session_id)
            turns = [self._turn_from_row(r) for r in rows]
        except Exception as e:
            print(f"[history] Failed to load messages for session {session_id}: {e}")
            return [welcome_back_turn()]
        if not turns:
            return [welcome_back_turn()]
        return turns


class SessionBootstrapper:
    """
    Tries to swap a local session for a persisted one:
    auth.get_current_user() -> store.create_session() (or the user's latest
    session when resume_latest is on).
    """

    def __init__(self, auth, store, title: str = config.SESSION_TITLE,
                 resume_latest: bool = config.RESUME_LATEST_SESSION):
        self.auth = auth
        self.store = store
        self.title = title
        self.resume_latest = resume_latest

    def local_session(self) -> Session:
        return new_local_session()

    async def upgrade(self, local: Session) -> Optional[Session]:
        """Server-issued persisted session, or None to stay local."""
        if self.auth is None or self.store is None:
            return None
        try:
            identity = await asyncio.to_thread(self.auth.get_current_user)
            if identity is None:
                print(f"[bootstrap] No authenticated user; keeping local session {local.session_id}")
                return None

            record = None
            if self.resume_latest:
                record = await asyncio.to_thread(self.store.latest_session, identity.user_id)
            if record is None:
                record = await asyncio.to_thread(self.store.create_session, identity.user_id, self.title)

            return Session(session_id=str(record["id"]), user_id=identity.user_id, persisted=True)
        except Exception as e:
            print(f"[bootstrap] Session upgrade failed, staying local: {e}")
            traceback.print_exc()
            return None
