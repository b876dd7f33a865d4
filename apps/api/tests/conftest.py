import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK
from websockets.frames import Close

from chat.controller import ChatSessionController
from chat.session import HistoryLoader, SessionBootstrapper
from services.auth import Identity

HANG = object()


def closed(code=1000, reason=""):
    if code is None:
        return ConnectionClosedError(None, None)
    if code == 1000:
        return ConnectionClosedOK(Close(code, reason), None)
    return ConnectionClosedError(Close(code, reason), None)


class FakeChannel:
    """Scripted websocket: recv() yields strings, raises exceptions, or hangs on HANG."""

    def __init__(self, *script):
        self.script = list(script)
        self.sent = []
        self.closed = False

    async def send(self, frame):
        if self.closed:
            raise closed(1000)
        self.sent.append(frame)

    async def recv(self):
        if self.closed:
            raise closed(1000)
        if not self.script:
            raise closed(1000)
        item = self.script.pop(0)
        if item is HANG:
            await asyncio.sleep(3600)
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self):
        self.closed = True


class FakeConnector:
    def __init__(self, *channels, error=None):
        self.channels = list(channels)
        self.error = error
        self.opened = []

    async def __call__(self):
        if self.error is not None:
            raise self.error
        channel = self.channels.pop(0)
        self.opened.append(channel)
        return channel


class FakeAuth:
    def __init__(self, identity=None, error=None):
        self.identity = identity
        self.error = error
        self.calls = 0

    def get_current_user(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.identity


class FakeStore:
    def __init__(self, messages=None, fail_create=False, fail_list=False, fail_insert=False, profile=None):
        self.messages = list(messages or [])
        self.fail_create = fail_create
        self.fail_list = fail_list
        self.fail_insert = fail_insert
        self.profile = profile
        self.sessions = []
        self.inserted = []
        self.emotions = []

    def create_session(self, user_id, title):
        if self.fail_create:
            raise RuntimeError("insert into chat_sessions failed")
        row = {"id": f"server-{len(self.sessions) + 1}", "user_id": user_id, "title": title}
        self.sessions.append(row)
        return row

    def latest_session(self, user_id):
        rows = [s for s in self.sessions if s["user_id"] == user_id]
        return rows[-1] if rows else None

    def list_messages(self, session_id):
        if self.fail_list:
            raise RuntimeError("select from chat_messages failed")
        return list(self.messages)

    def insert_message(self, session_id, user_id, content, role, suggestions=None):
        if self.fail_insert:
            raise RuntimeError("insert into chat_messages failed")
        row = {"session_id": session_id, "user_id": user_id, "content": content,
               "role": role, "suggestions": suggestions}
        self.inserted.append(row)
        return row

    def record_emotions(self, user_id, emotions):
        self.emotions.append((user_id, list(emotions)))
        return emotions


def history_rows(*pairs):
    start = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)
    return [
        {"id": i, "role": role, "content": content, "suggestions": [],
         "created_at": (start + timedelta(minutes=i)).isoformat()}
        for i, (role, content) in enumerate(pairs)
    ]


def make_controller(auth=None, store=None, connector=None, **options):
    return ChatSessionController(
        SessionBootstrapper(auth, store, title="Zen Chat", resume_latest=options.pop("resume_latest", False)),
        HistoryLoader(store),
        store=store,
        connect=connector or FakeConnector(),
        idle_timeout=options.pop("idle_timeout", 1.0),
        **options,
    )


@pytest.fixture
def alice():
    return Identity(user_id="user-alice", email="alice@example.com")


@pytest.fixture
def client():
    from main import app
    with TestClient(app) as c:
        yield c
