"""Parameter extraction for classified intents.

Two extractors live here:
- extract_search_phrase(): pulls the search subject out of phrasings such as
  "can you find the Q3 roadmap" while preserving the user's casing
- extract_month(): finds "in may" / "for june" / "during july" style month
  qualifiers for earnings queries

Both walk an ordered list of patterns and stop at the first hit. Order, not
match length, decides ties.
"""

from __future__ import annotations

import re

MONTHS: tuple[str, ...] = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

_MONTH_GROUP = "|".join(MONTHS)

# Tried against the original-cased remainder; the last one always matches a
# single-line remainder
SEARCH_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(?:can you\s+)?(?:search|find|look)\s+(?:for\s+)?(.+)$", re.IGNORECASE),
    re.compile(r"^(?:please\s+)?(?:search|find|look)\s+(?:for\s+)?(.+)$", re.IGNORECASE),
    re.compile(r"^(?:i\s+)?(?:need|want)\s+(?:to\s+find\s+)?(.+)$", re.IGNORECASE),
    re.compile(r"^(?:help\s+me\s+)?(?:find|search)\s+(?:for\s+)?(.+)$", re.IGNORECASE),
    re.compile(r"^(.+)$"),
)

MONTH_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"\bin\s+({_MONTH_GROUP})"),
    re.compile(rf"\bfor\s+({_MONTH_GROUP})"),
    re.compile(rf"\bduring\s+({_MONTH_GROUP})"),
)


def extract_search_phrase(remainder: str) -> str | None:
    """Extract the search subject from a trigger-stripped message.

    Args:
        remainder: Message text after the activation phrase, original casing.

    Returns:
        The trimmed search phrase, or None if no pattern captured anything
        (empty or whitespace-only input, or a multi-line remainder).
    """
    text = remainder.strip()
    if not text:
        return None

    for pattern in SEARCH_PATTERNS:
        match = pattern.match(text)
        if match and match.group(1).strip():
            return match.group(1).strip()

    return None


def extract_month(remainder: str) -> str | None:
    """Find a month qualifier in an earnings query.

    Args:
        remainder: Message text after the activation phrase.

    Returns:
        Lower-case English month name, or None meaning "all time".
    """
    text = remainder.lower()
    for pattern in MONTH_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None
