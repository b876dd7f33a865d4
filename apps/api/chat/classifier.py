import re
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from .rules import CLASSIFIER_RULES, Category, ClassifierRule


@dataclass(frozen=True)
class Intercept:
    """A rule hit: the canned response replaces the AI backend for this turn."""
    category: Category
    keyword: str
    response: str


def _boundary_pattern(keyword: str) -> re.Pattern:
    # \b is meaningless next to non-word chars such as the "++" in "c++"
    head = r"\b" if re.match(r"\w", keyword) else ""
    tail = r"\b" if re.search(r"\w$", keyword) else ""
    return re.compile(head + re.escape(keyword) + tail)


class MessageClassifier:
    """
    Keyword rule table evaluated in priority order (distress, technical,
    general knowledge). First match wins.

    Matching is plain substring by default, so "dysfunctional" hits the
    "function" keyword. word_boundaries=True opts into boundary-aware matching.
    """

    def __init__(self, rules: Tuple[ClassifierRule, ...] = CLASSIFIER_RULES, word_boundaries: bool = False):
        self.rules = rules
        self.word_boundaries = word_boundaries
        self._patterns: Dict[str, re.Pattern] = {}
        if word_boundaries:
            for rule in rules:
                for kw in rule.keywords:
                    self._patterns[kw] = _boundary_pattern(kw)

    def _first_hit(self, keywords: Iterable[str], lowered: str) -> Optional[str]:
        # sorted() keeps the reported keyword stable across runs
        for kw in sorted(keywords):
            if self.word_boundaries:
                if self._patterns[kw].search(lowered):
                    return kw
            elif kw in lowered:
                return kw
        return None

    def classify(self, text: Optional[str]) -> Optional[Intercept]:
        lowered = (text or "").lower()
        if not lowered.strip():
            return None
        for rule in self.rules:
            kw = self._first_hit(rule.keywords, lowered)
            if kw is not None:
                return Intercept(category=rule.category, keyword=kw, response=rule.response)
        return None

    def matches(self, category: Category, *texts: Optional[str]) -> bool:
        """True if any of the texts contains a keyword of the given category."""
        for rule in self.rules:
            if rule.category != category:
                continue
            for text in texts:
                if self._first_hit(rule.keywords, (text or "").lower()) is not None:
                    return True
        return False
