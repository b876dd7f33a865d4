import asyncio
from typing import List, Optional, Tuple

from models import ChatTurn, Session, Speaker, SuggestionCard
from services.chat_store import card_to_row
from .classifier import MessageClassifier
from .log import ChatLog
from .rules import MEDITATION, WELLNESS_PAGES, WELLNESS_RETURN_TEXT
from .session import HistoryLoader, SessionBootstrapper, welcome_turn
from .streaming import StreamingResponder, StreamState
from .suggestions import SuggestionEngine


class ChatBusyError(Exception):
    """A response cycle is already pending for this session."""


class ChatSessionController:
    """
    One chat page's session: owns the turn log, the loading flag and the
    exchange counter, and wires user input through the classifier,
    the streaming responder and the suggestion engine.
    """

    def __init__(
        self,
        bootstrapper: SessionBootstrapper,
        history: HistoryLoader,
        store=None,
        classifier: Optional[MessageClassifier] = None,
        suggestions: Optional[SuggestionEngine] = None,
        connect=None,
        **responder_options,
    ):
        self.bootstrapper = bootstrapper
        self.history = history
        self.store = store
        self.classifier = classifier or MessageClassifier()
        self.suggestions = suggestions or SuggestionEngine(classifier=self.classifier)
        self.log = ChatLog()
        self.responder = StreamingResponder(
            self.log, self.classifier, self.suggestions, connect=connect, **responder_options
        )

        self.session: Optional[Session] = None
        self.handle: Optional[str] = None
        self.loading = False
        self.initialized = False
        self.exchange_count = 0
        self._bootstrap_task: Optional[asyncio.Task] = None
        # set by clear_session; a cleared log is never replaced by history
        self._cleared = False

    @property
    def turns(self) -> Tuple[ChatTurn, ...]:
        return self.log.turns

    # --------------- mount ---------------

    def start(self) -> Session:
        """Issue the local session and welcome turn; upgrade runs in the background."""
        if self.session is not None:
            return self.session
        self.session = self.bootstrapper.local_session()
        self.handle = self.session.session_id
        self.log.append(welcome_turn())
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync caller): stay local-only
            self.initialized = True
            return self.session
        self._bootstrap_task = loop.create_task(self._complete_bootstrap())
        return self.session

    async def wait_initialized(self) -> None:
        if self._bootstrap_task is not None:
            await self._bootstrap_task

    async def _complete_bootstrap(self) -> None:
        try:
            upgraded = await self.bootstrapper.upgrade(self.session)
            if upgraded is None:
                return
            self.session = upgraded
            print(f"[bootstrap] Session {self.handle} upgraded to persisted session {upgraded.session_id}")
            if not self._history_replayable():
                print(f"[bootstrap] Keeping local log for {upgraded.session_id}; history replay skipped")
                return
            turns = await self.history.load(upgraded.session_id)
            if self._history_replayable():
                self.log.replace_all(turns)
        finally:
            self.initialized = True

    def _history_replayable(self) -> bool:
        # user already talking, or started a new chat; don't clobber the log
        return not self._cleared and self.log.user_turn_count() == 0

    # --------------- messages ---------------

    async def send_user_message(self, text: str) -> Optional[StreamState]:
        if not text or not text.strip():
            return None
        if self.loading:
            raise ChatBusyError("A response is still in progress")
        if self.session is None:
            self.start()

        self.exchange_count += 1
        user_turn = self.log.add(text, Speaker.USER)
        self.loading = True
        session = self.session
        try:
            await self._persist(session, [user_turn])
            state = await self.responder.respond(text, session.session_id, self.exchange_count)
            await self._persist(session, self.responder.cycle_turns)
            await self._record_emotions(session, text)
            return state
        finally:
            self.loading = False

    async def clear_session(self) -> None:
        """New chat: one fresh welcome turn, counter back to zero. Nothing is persisted."""
        await self.responder.close()
        self.log.replace_all([welcome_turn()])
        self.exchange_count = 0
        self._cleared = True

    def return_from_wellness(self, session_type: Optional[str]) -> ChatTurn:
        label = (session_type or "").strip() or "wellness"
        page = label.lower()
        route = f"/{page}" if page in WELLNESS_PAGES else MEDITATION
        cards: List[SuggestionCard] = [
            SuggestionCard(title="Try Another Session", icon="🔄", target=route,
                           description="Continue your practice"),
            SuggestionCard(title="Explore Different Practice", icon="✨", target=MEDITATION,
                           description="Try something new"),
        ]
        return self.log.add(WELLNESS_RETURN_TEXT.format(session_type=label), Speaker.ASSISTANT, cards)

    async def aclose(self) -> None:
        await self.responder.close()

    # --------------- persistence (best-effort) ---------------

    async def _persist(self, session: Session, turns: List[ChatTurn]) -> None:
        if self.store is None or not session.persisted:
            return
        for turn in turns:
            try:
                await asyncio.to_thread(
                    self.store.insert_message,
                    session.session_id,
                    session.user_id,
                    turn.text,
                    turn.speaker.value,
                    [card_to_row(c) for c in turn.suggestions] if turn.speaker == Speaker.ASSISTANT else None,
                )
            except Exception as e:
                print(f"[persist] Failed to save {turn.speaker.value} turn for session {session.session_id}: {e}")

    async def _record_emotions(self, session: Session, text: str) -> None:
        if self.store is None or not session.persisted:
            return
        tags = self.suggestions.detect_topics(text)
        if not tags:
            return
        try:
            await asyncio.to_thread(self.store.record_emotions, session.user_id, tags)
        except Exception as e:
            print(f"[persist] Failed to update emotions for user {session.user_id}: {e}")
