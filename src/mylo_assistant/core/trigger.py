"""Activation phrase detection."""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_ACTIVATION_PHRASE = "hey mylo"


@dataclass(frozen=True)
class TriggerMatch:
    """Result of checking a message for the activation phrase."""

    triggered: bool
    remainder: str | None = None  # None when not triggered


class TriggerDetector:
    """Recognizes the activation phrase at the start of a message.

    The phrase is matched case-insensitively and must be the first thing in
    the text. Any commas and whitespace that follow it are dropped, and the
    rest of the message is returned as the remainder.

    Example:
        detector = TriggerDetector()
        detector.detect("Hey Mylo, search for docs")
        # TriggerMatch(triggered=True, remainder="search for docs")
    """

    def __init__(self, phrase: str = DEFAULT_ACTIVATION_PHRASE) -> None:
        words = phrase.split()
        if not words:
            raise ValueError("Activation phrase cannot be empty")
        self._phrase = " ".join(words)
        body = r"\s+".join(re.escape(word) for word in words)
        self._pattern = re.compile(rf"^{body}\b[,\s]*", re.IGNORECASE)

    @property
    def phrase(self) -> str:
        return self._phrase

    def detect(self, raw_text: str) -> TriggerMatch:
        """Check whether ``raw_text`` starts with the activation phrase.

        Args:
            raw_text: The inbound message text, unmodified.

        Returns:
            TriggerMatch with the trimmed remainder when triggered.
        """
        if not raw_text:
            return TriggerMatch(triggered=False)

        match = self._pattern.match(raw_text)
        if not match:
            return TriggerMatch(triggered=False)

        return TriggerMatch(triggered=True, remainder=raw_text[match.end() :].strip())


_default_detector = TriggerDetector()


def detect(raw_text: str) -> TriggerMatch:
    """Detect the default activation phrase ("hey mylo")."""
    return _default_detector.detect(raw_text)
