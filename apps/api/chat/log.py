from typing import Iterable, List, Optional, Tuple

from models import ChatTurn, Speaker, SuggestionCard


class ChatLog:
    """
    Ordered turn log of one session. Append-only, except that the most recent
    assistant turn may be rewritten while a stream is still filling it.
    """

    def __init__(self, turns: Optional[Iterable[ChatTurn]] = None):
        self._turns: List[ChatTurn] = list(turns or [])

    def __len__(self) -> int:
        return len(self._turns)

    @property
    def turns(self) -> Tuple[ChatTurn, ...]:
        return tuple(self._turns)

    def last(self) -> Optional[ChatTurn]:
        return self._turns[-1] if self._turns else None

    def append(self, turn: ChatTurn) -> ChatTurn:
        last = self.last()
        # keep created_at non-decreasing even if the clock steps back
        if last is not None and turn.created_at < last.created_at:
            turn.created_at = last.created_at
        self._turns.append(turn)
        return turn

    def add(self, text: str, speaker: Speaker, suggestions: Optional[Iterable[SuggestionCard]] = None) -> ChatTurn:
        return self.append(ChatTurn(text=text, speaker=speaker, suggestions=list(suggestions or [])))

    def rewrite_last(self, text: str, suggestions: Iterable[SuggestionCard]) -> ChatTurn:
        last = self.last()
        if last is None or last.speaker != Speaker.ASSISTANT:
            raise ValueError("only the trailing assistant turn can be rewritten")
        last.text = text
        last.suggestions = list(suggestions)
        return last

    def replace_all(self, turns: Iterable[ChatTurn]) -> None:
        self._turns = list(turns)

    def user_turn_count(self) -> int:
        return sum(1 for t in self._turns if t.is_user)
