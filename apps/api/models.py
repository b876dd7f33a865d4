import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Speaker(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SuggestionCard(BaseModel):
    """Actionable shortcut shown under an assistant turn."""
    model_config = ConfigDict(frozen=True)

    title: str
    icon: str
    target: str  # "/meditation", "https://...", "tel:988"
    description: str

    @property
    def kind(self) -> str:
        if self.target.startswith("tel:"):
            return "telephone"
        if self.target.startswith("http"):
            return "external"
        return "route"


class ChatTurn(BaseModel):
    id: str = Field(default_factory=_new_id)
    text: str
    speaker: Speaker
    created_at: datetime = Field(default_factory=_now)
    suggestions: List[SuggestionCard] = []

    @property
    def is_user(self) -> bool:
        return self.speaker == Speaker.USER


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    session_id: str
    user_id: str
    persisted: bool = False


# --- HTTP bodies ---

class SendMessageRequest(BaseModel):
    message: str = Field(..., min_length=1)


class WellnessReturnRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_wellness: bool = Field(False, alias="fromWellness")
    session_type: Optional[str] = Field(None, alias="sessionType")


class SessionView(BaseModel):
    handle: str
    session: Session
    loading: bool
    initialized: bool
    exchange_count: int
    turns: List[ChatTurn]
    state: Optional[str] = None  # final stream state of the last send
