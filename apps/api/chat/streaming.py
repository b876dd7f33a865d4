"""
Streaming response cycle for one outgoing user message.

    IDLE -> CONNECTING -> STREAMING -> FINALIZED | FAILED
    IDLE -> FINALIZED                  (rule intercept, no network)

Fragments arriving on the channel are coalesced into a single assistant
turn. At most one channel is open per responder; opening a new one closes
the previous one.
"""
import asyncio
import traceback
from enum import Enum
from typing import Awaitable, Callable, List, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

import config
from models import ChatTurn, Speaker
from .classifier import MessageClassifier
from .frames import RawFrame, StructuredFrame, build_request_frame, parse_frame
from .log import ChatLog
from .normalizer import normalize
from .rules import APOLOGY_TEXT, INTERRUPTED_TEXT, SYSTEM_DIRECTIVE, TIMEOUT_TEXT
from .suggestions import SuggestionEngine

NORMAL_CLOSE_CODES = frozenset([1000])
# websockets reports a connection lost without a close frame as 1006
NO_CLOSE_FRAME_CODE = 1006


class StreamState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    FINALIZED = "finalized"
    FAILED = "failed"


TERMINAL_STATES = frozenset([StreamState.FINALIZED, StreamState.FAILED])

TRANSITIONS = {
    StreamState.IDLE: frozenset([StreamState.CONNECTING, StreamState.FINALIZED]),
    StreamState.CONNECTING: frozenset([StreamState.STREAMING, StreamState.FAILED]),
    StreamState.STREAMING: frozenset([StreamState.FINALIZED, StreamState.FAILED]),
    StreamState.FINALIZED: frozenset([StreamState.IDLE]),
    StreamState.FAILED: frozenset([StreamState.IDLE]),
}


class InvalidTransition(Exception):
    pass


def close_code(exc: ConnectionClosed) -> int:
    rcvd = getattr(exc, "rcvd", None)
    return rcvd.code if rcvd is not None else NO_CLOSE_FRAME_CODE


def websocket_connector(url: str) -> Callable[[], Awaitable]:
    async def connect():
        if not url:
            raise ConnectionError("STREAM_URL is not configured")
        return await websockets.connect(url, ping_interval=30, ping_timeout=10)
    return connect


class StreamingResponder:
    def __init__(
        self,
        log: ChatLog,
        classifier: MessageClassifier,
        suggestions: SuggestionEngine,
        connect: Optional[Callable[[], Awaitable]] = None,
        app_id: str = config.STREAM_APP_ID,
        system_prompt: str = SYSTEM_DIRECTIVE,
        idle_timeout: float = config.STREAM_IDLE_TIMEOUT,
    ):
        self.log = log
        self.classifier = classifier
        self.suggestions = suggestions
        self.connect = connect or websocket_connector(config.STREAM_URL)
        self.app_id = app_id
        self.system_prompt = system_prompt
        self.idle_timeout = idle_timeout

        self.state = StreamState.IDLE
        self.cycle_turns: List[ChatTurn] = []
        self._channel = None
        self._live_turn: Optional[ChatTurn] = None
        self._buffer = ""

    # --------------- state ---------------

    def _transition(self, target: StreamState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {target.value}")
        self.state = target

    def _reset(self) -> None:
        if self.state in TERMINAL_STATES:
            self._transition(StreamState.IDLE)
        elif self.state != StreamState.IDLE:
            raise InvalidTransition(f"cycle already in progress ({self.state.value})")
        self.cycle_turns = []
        self._live_turn = None
        self._buffer = ""

    def _append(self, text: str, suggestions=None) -> ChatTurn:
        turn = self.log.add(text, Speaker.ASSISTANT, suggestions)
        self.cycle_turns.append(turn)
        return turn

    def _fail(self, text: str) -> StreamState:
        self._append(text)
        self._transition(StreamState.FAILED)
        return self.state

    # --------------- channel ---------------

    async def close(self) -> None:
        channel, self._channel = self._channel, None
        if channel is None:
            return
        try:
            await channel.close()
        except (OSError, WebSocketException) as e:
            print(f"[stream] Error while closing channel: {e}")

    # --------------- cycle ---------------

    async def respond(self, text: str, conversation_id: str, exchange_count: int) -> StreamState:
        self._reset()

        intercept = self.classifier.classify(text)
        if intercept is not None:
            reply = normalize(intercept.response)
            self._append(reply, self.suggestions.suggest(text, reply, exchange_count))
            self._transition(StreamState.FINALIZED)
            return self.state

        await self.close()
        self._transition(StreamState.CONNECTING)
        try:
            self._channel = await asyncio.wait_for(self.connect(), timeout=self.idle_timeout)
        except (OSError, WebSocketException, asyncio.TimeoutError) as e:
            print(f"[stream] Could not open channel: {e}")
            return self._fail(APOLOGY_TEXT)

        self._transition(StreamState.STREAMING)
        try:
            await self._channel.send(build_request_frame(conversation_id, self.app_id, self.system_prompt, text))
        except (OSError, WebSocketException) as e:
            print(f"[stream] Could not send request frame: {e}")
            await self.close()
            return self._fail(APOLOGY_TEXT)

        try:
            return await self._pump(text, exchange_count)
        except Exception as e:
            print(f"[stream] Unexpected error while streaming: {e!r}")
            traceback.print_exc()
            await self.close()
            if self.state in TERMINAL_STATES:
                return self.state
            return self._fail(APOLOGY_TEXT)

    async def _pump(self, user_text: str, exchange_count: int) -> StreamState:
        channel = self._channel
        while True:
            try:
                raw = await asyncio.wait_for(channel.recv(), timeout=self.idle_timeout)
            except asyncio.TimeoutError:
                print(f"[stream] No data for {self.idle_timeout}s, giving up")
                await self.close()
                return self._fail(TIMEOUT_TEXT)
            except ConnectionClosed as e:
                self._channel = None
                code = close_code(e)
                if code not in NORMAL_CLOSE_CODES:
                    print(f"[stream] Channel closed abnormally (code {code})")
                    self._append(INTERRUPTED_TEXT)
                self._transition(StreamState.FINALIZED)
                return self.state
            except (OSError, WebSocketException) as e:
                print(f"[stream] Transport error: {e}")
                await self.close()
                return self._fail(APOLOGY_TEXT)

            frame = parse_frame(raw)
            if frame.is_done:
                await self.close()
                self._transition(StreamState.FINALIZED)
                return self.state

            if isinstance(frame, StructuredFrame):
                if frame.is_error:
                    print(f"[stream] Backend error frame: {frame.payload}")
                    await self.close()
                    return self._fail(APOLOGY_TEXT)
                if frame.payload is None:
                    print(f"[stream] Ignoring '{frame.type}' frame without text")
                    continue
                self._absorb(frame.payload, user_text, exchange_count)
            elif isinstance(frame, RawFrame):
                self._absorb(frame.text, user_text, exchange_count)

    def _absorb(self, fragment: str, user_text: str, exchange_count: int) -> None:
        """Merge a fragment into the live assistant turn, or start one."""
        if self._live_turn is not None and self.log.last() is not self._live_turn:
            # something else was appended meanwhile; start a fresh turn
            self._live_turn = None
            self._buffer = ""

        self._buffer += fragment
        text = normalize(self._buffer)
        if not text:
            return
        cards = self.suggestions.suggest(user_text, text, exchange_count)
        if self._live_turn is None:
            self._live_turn = self._append(text, cards)
        else:
            self.log.rewrite_last(text, cards)
