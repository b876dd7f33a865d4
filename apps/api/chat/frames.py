"""
Wire frames for the streaming chat backend.

Outbound: one JSON request frame per exchange.
Inbound: either a JSON envelope {"type": ..., "message"|"content": ...}
or a raw text chunk. parse_frame() turns both into a tagged variant.
"""
import json
from dataclasses import dataclass
from typing import Any, Optional, Union

DONE_SENTINEL = "[DONE]"

ERROR_TYPE = "error"
DONE_TYPE = "done"


@dataclass(frozen=True)
class StructuredFrame:
    type: str
    payload: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.type == ERROR_TYPE

    @property
    def is_done(self) -> bool:
        return self.type == DONE_TYPE


@dataclass(frozen=True)
class RawFrame:
    text: str

    @property
    def is_done(self) -> bool:
        return self.text.strip() == DONE_SENTINEL


Frame = Union[StructuredFrame, RawFrame]


def _try_parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def _payload_text(data: dict) -> Optional[str]:
    value = data.get("message")
    if value is None:
        value = data.get("content")
    if value is None:
        return None
    return value if isinstance(value, str) else json.dumps(value)


def parse_frame(raw: Union[str, bytes]) -> Frame:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    data = _try_parse_json(raw)
    if isinstance(data, dict) and isinstance(data.get("type"), str):
        return StructuredFrame(type=data["type"].lower(), payload=_payload_text(data))
    # Anything else (plain text, bare JSON strings/numbers, envelopes without a
    # type) is content as-is
    return RawFrame(text=raw)


def build_request_frame(conversation_id: str, app_id: str, system_prompt: str, message: str) -> str:
    return json.dumps({
        "conversationId": conversation_id,
        "appId": app_id,
        "systemPrompt": system_prompt,
        "message": message,
    }, ensure_ascii=False)
