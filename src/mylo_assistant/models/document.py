"""Data models for document-store pages."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DocumentPage:
    """A page returned by the document store search."""

    id: str
    title: str
    url: str
    last_edited_at: datetime
