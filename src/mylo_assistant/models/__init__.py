"""Data models and transfer objects."""

from .document import DocumentPage
from .earnings import TOKEN, USDC, EarningsRecord, EarningsResult, ErrorKind, LedgerRecord
from .intent import EarningsIntent, Intent, NoIntent, SearchIntent
from .message import InboundMessage, ProcessingResult

__all__ = [
    # Message models
    "InboundMessage",
    "ProcessingResult",
    # Intent models
    "Intent",
    "NoIntent",
    "SearchIntent",
    "EarningsIntent",
    # Ledger / earnings models
    "LedgerRecord",
    "EarningsRecord",
    "EarningsResult",
    "ErrorKind",
    "USDC",
    "TOKEN",
    # Document models
    "DocumentPage",
]
