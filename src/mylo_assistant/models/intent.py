"""Intent variants produced by the classifier."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NoIntent:
    """The activation phrase was present but nothing followed it."""


@dataclass(frozen=True)
class SearchIntent:
    """Search the document store for ``phrase``."""

    phrase: str


@dataclass(frozen=True)
class EarningsIntent:
    """Report the sender's earnings, optionally for a single month."""

    month: str | None = None  # lower-case English month name, None = all time


Intent = NoIntent | SearchIntent | EarningsIntent
