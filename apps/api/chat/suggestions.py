from typing import FrozenSet, List, Optional, Tuple

from models import SuggestionCard
from .classifier import MessageClassifier
from .rules import CRISIS_CARDS, TOPIC_RULES, Category, TopicRule

# Crisis cards resurface every N exchanges once the conversation is past N
HOTLINE_EVERY = 10
MAX_SUGGESTIONS = 3


def _contains_any(keywords: FrozenSet[str], *texts: str) -> bool:
    return any(kw in text for text in texts for kw in keywords)


class SuggestionEngine:
    """
    Maps (user text, assistant text, exchange count) to at most three
    follow-up cards. Returns an empty list when nothing in the conversation
    earns a suggestion.
    """

    def __init__(
        self,
        topics: Tuple[TopicRule, ...] = TOPIC_RULES,
        crisis_cards: Tuple[SuggestionCard, ...] = CRISIS_CARDS,
        classifier: Optional[MessageClassifier] = None,
    ):
        self.topics = topics
        self.crisis_cards = crisis_cards
        # distress detection follows the classifier's matching mode
        self.classifier = classifier or MessageClassifier()

    @staticmethod
    def hotline_due(exchange_count: int) -> bool:
        return exchange_count > HOTLINE_EVERY and exchange_count % HOTLINE_EVERY == 0

    def suggest(self, user_text: Optional[str], assistant_text: Optional[str], exchange_count: int) -> List[SuggestionCard]:
        user = (user_text or "").lower()
        assistant = (assistant_text or "").lower()

        if self.classifier.matches(Category.DISTRESS, user, assistant) or self.hotline_due(exchange_count):
            return list(self.crisis_cards[:MAX_SUGGESTIONS])

        for topic in self.topics:
            if _contains_any(topic.keywords, user, assistant):
                return list(topic.cards[:MAX_SUGGESTIONS])

        return []

    def detect_topics(self, text: Optional[str]) -> List[str]:
        """Every topical tag whose keywords appear in the text, in table order."""
        lowered = (text or "").lower()
        return [t.tag for t in self.topics if _contains_any(t.keywords, lowered)]
