"""Concrete implementations of provider interfaces."""

from .chat.telegram import TelegramAdapter
from .documents.notion import NotionAdapter
from .ledger.airtable import AirtableAdapter

__all__ = [
    "AirtableAdapter",
    "NotionAdapter",
    "TelegramAdapter",
]
