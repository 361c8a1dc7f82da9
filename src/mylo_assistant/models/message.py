"""Data models for chat messages."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class InboundMessage:
    """An incoming message from a chat platform."""

    chat_id: str
    message_id: str
    raw_text: str
    sender_handle: str | None  # None if the sender has no public username
    timestamp: datetime

    # Bot command, if the message was one (e.g. "page" for "/page <id>")
    command: str | None = None
    command_args: tuple[str, ...] = ()

    # Platform-specific metadata
    raw_event: dict[str, Any] = field(default_factory=dict)


class ProcessingResult(Enum):
    """Outcome of processing a message."""

    NOT_TRIGGERED = "not_triggered"
    HELP_SENT = "help_sent"
    SEARCH_ANSWERED = "search_answered"
    EARNINGS_ANSWERED = "earnings_answered"
    PAGE_SENT = "page_sent"
    ERROR = "error"
