"""Rule-based intent classification.

The classifier evaluates an ordered list of (predicate, builder) rules
against the trigger-stripped text. The first rule whose predicate holds
builds the intent; the final rule always holds, so classification is total.

Rule order:
1. Earnings phrasing ("how much have i earned", "my earnings", ...)
2. Empty text -> NoIntent
3. Anything else -> SearchIntent

Earnings rules run first, so "search my earnings" is an earnings query.
"""

from __future__ import annotations

import re
from collections.abc import Callable

import structlog

from mylo_assistant.core.extractors import extract_month, extract_search_phrase
from mylo_assistant.models.intent import EarningsIntent, Intent, NoIntent, SearchIntent

log = structlog.get_logger()

Rule = tuple[Callable[[str], bool], Callable[[str], Intent]]


class IntentClassifier:
    """Maps trigger-stripped text to exactly one Intent.

    Example:
        classifier = IntentClassifier()
        classifier.classify("what have i made in May")
        # EarningsIntent(month="may")
    """

    EARNINGS_PATTERNS: tuple[re.Pattern[str], ...] = (
        re.compile(r"how much (?:have )?i (?:earned|made)"),
        re.compile(r"my earnings"),
        re.compile(r"what (?:have )?i (?:earned|made)"),
        re.compile(r"total earnings"),
    )

    def __init__(self) -> None:
        self._rules: list[Rule] = [
            (self.is_earnings_query, self._build_earnings),
            (self._is_blank, self._build_none),
            (lambda _text: True, self._build_search),
        ]

    def classify(self, remainder: str) -> Intent:
        """Classify the text that followed the activation phrase.

        Args:
            remainder: Trigger-stripped message text, original casing.

        Returns:
            NoIntent, SearchIntent or EarningsIntent.
        """
        remainder = remainder or ""
        for predicate, build in self._rules:
            if predicate(remainder):
                intent = build(remainder)
                log.debug("intent_classified", intent=type(intent).__name__)
                return intent

        # Unreachable: the last rule always matches
        return self._build_search(remainder)

    def is_earnings_query(self, remainder: str) -> bool:
        """Check whether the text asks about earnings."""
        text = remainder.lower()
        return any(pattern.search(text) for pattern in self.EARNINGS_PATTERNS)

    @staticmethod
    def _is_blank(remainder: str) -> bool:
        return not remainder.strip()

    @staticmethod
    def _build_earnings(remainder: str) -> Intent:
        return EarningsIntent(month=extract_month(remainder))

    @staticmethod
    def _build_none(_remainder: str) -> Intent:
        return NoIntent()

    @staticmethod
    def _build_search(remainder: str) -> Intent:
        phrase = extract_search_phrase(remainder) or remainder.strip()
        return SearchIntent(phrase=phrase)
