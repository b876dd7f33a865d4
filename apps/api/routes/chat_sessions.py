"""
Chat session endpoints. One ChatSessionController per mounted chat page,
addressed by its handle (the local session id issued at mount, which stays
stable even after the session is upgraded to a persisted one).
"""
import time
from collections import OrderedDict
from typing import Dict, Optional

from fastapi import APIRouter, Header, HTTPException

import config
from chat.controller import ChatBusyError, ChatSessionController
from chat.session import HistoryLoader, SessionBootstrapper
from models import SendMessageRequest, SessionView, WellnessReturnRequest
from services.auth import SupabaseAuth, bearer_token
from services.chat_store import ChatStore
from services.supabase_client import get_supabase_client

router = APIRouter()

MAX_SESSIONS = config.MAX_CHAT_SESSIONS
IDLE_TTL = config.CHAT_SESSION_IDLE_TTL

# handle -> controller, least recently used first
_controllers: "OrderedDict[str, ChatSessionController]" = OrderedDict()
_last_seen: Dict[str, float] = {}


def build_controller(authorization: Optional[str]) -> ChatSessionController:
    sb = get_supabase_client()
    store = ChatStore(sb) if sb else None
    auth = SupabaseAuth(sb, bearer_token(authorization))
    return ChatSessionController(
        SessionBootstrapper(auth, store),
        HistoryLoader(store),
        store=store,
    )


def _touch(handle: str) -> None:
    _last_seen[handle] = time.monotonic()
    _controllers.move_to_end(handle)


async def _evict(handle: str, reason: str) -> None:
    controller = _controllers.pop(handle, None)
    _last_seen.pop(handle, None)
    if controller is None:
        return
    print(f"[sessions] Closing session {handle} ({reason})")
    await controller.aclose()


async def _sweep() -> None:
    """Close idle sessions, then the least recently used ones while over capacity."""
    now = time.monotonic()
    idle = [h for h, seen in _last_seen.items() if now - seen > IDLE_TTL and not _controllers[h].loading]
    for handle in idle:
        await _evict(handle, "idle")
    while _controllers and len(_controllers) >= MAX_SESSIONS:
        await _evict(next(iter(_controllers)), "capacity")


async def close_all() -> None:
    for handle in list(_controllers):
        await _evict(handle, "shutdown")


def _get(handle: str) -> ChatSessionController:
    controller = _controllers.get(handle)
    if controller is None:
        raise HTTPException(status_code=404, detail="Chat session not found")
    _touch(handle)
    return controller


def _view(controller: ChatSessionController, state: Optional[str] = None) -> SessionView:
    return SessionView(
        handle=controller.handle,
        session=controller.session,
        loading=controller.loading,
        initialized=controller.initialized,
        exchange_count=controller.exchange_count,
        turns=list(controller.turns),
        state=state,
    )


@router.post("/chat/sessions", response_model=SessionView, status_code=201)
async def open_session(authorization: Optional[str] = Header(None)):
    await _sweep()
    controller = build_controller(authorization)
    controller.start()
    _controllers[controller.handle] = controller
    _touch(controller.handle)
    return _view(controller)


@router.get("/chat/sessions/{handle}", response_model=SessionView)
async def get_session(handle: str):
    return _view(_get(handle))


@router.post("/chat/sessions/{handle}/messages", response_model=SessionView)
async def send_message(handle: str, request: SendMessageRequest):
    controller = _get(handle)
    if not request.message.strip():
        raise HTTPException(status_code=422, detail="Message is empty")
    try:
        state = await controller.send_user_message(request.message)
    except ChatBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _view(controller, state.value if state else None)


@router.post("/chat/sessions/{handle}/clear", response_model=SessionView)
async def clear_session(handle: str):
    controller = _get(handle)
    await controller.clear_session()
    return _view(controller)


@router.post("/chat/sessions/{handle}/wellness-return", response_model=SessionView)
async def wellness_return(handle: str, request: WellnessReturnRequest):
    controller = _get(handle)
    if request.from_wellness:
        controller.return_from_wellness(request.session_type)
    return _view(controller)


@router.delete("/chat/sessions/{handle}", status_code=204)
async def close_session(handle: str):
    if handle not in _controllers:
        raise HTTPException(status_code=404, detail="Chat session not found")
    await _evict(handle, "deleted")
