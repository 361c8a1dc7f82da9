"""Protocol definitions for pluggable adapters."""

from .chat import ChatProvider
from .documents import DocumentProvider
from .ledger import LedgerProvider

__all__ = ["ChatProvider", "DocumentProvider", "LedgerProvider"]
