"""Shared test fixtures for the Mylo assistant."""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import UTC, datetime

import pytest

from mylo_assistant.config.schema import (
    AirtableConfig,
    AssistantConfig,
    ChatConfig,
    DocumentsConfig,
    LedgerConfig,
    NotionConfig,
    TelegramConfig,
)
from mylo_assistant.models.document import DocumentPage
from mylo_assistant.models.earnings import LedgerRecord
from mylo_assistant.models.message import InboundMessage
from mylo_assistant.utils.errors import SourceUnavailableError

TELEGRAM_TOKEN = "123456789:AAFakeTokenForTestsOnlyNotReal_0123"
NOTION_TOKEN = "secret_FakeNotionTokenForTests0123456789abcdef"
AIRTABLE_KEY = "patFAKEtest0123456.0123456789abcdef"


class FakeLedger:
    """In-memory LedgerProvider."""

    def __init__(
        self,
        records: list[LedgerRecord] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.records = list(records or [])
        self.error = error
        self.calls: list[tuple[str, int]] = []

    async def fetch_records(self, table_name: str, max_records: int = 1000) -> list[LedgerRecord]:
        self.calls.append((table_name, max_records))
        if self.error is not None:
            raise self.error
        return self.records[:max_records]


class FakeDocuments:
    """In-memory DocumentProvider."""

    def __init__(
        self,
        pages: list[DocumentPage] | None = None,
        contents: dict[str, str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.pages = list(pages or [])
        self.contents = dict(contents or {})
        self.error = error
        self.queries: list[str] = []

    async def search_pages(self, query: str) -> list[DocumentPage]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.pages)

    async def get_page_content(self, page_id: str) -> str:
        if self.error is not None:
            raise self.error
        if page_id not in self.contents:
            raise SourceUnavailableError(f"Unknown page {page_id}", source="fake")
        return self.contents[page_id]


class FakeChat:
    """In-memory ChatProvider that records replies."""

    def __init__(self, messages: list[InboundMessage] | None = None) -> None:
        self.messages = list(messages or [])
        self.sent: list[tuple[str, str, str | None]] = []
        self.connected = False

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def listen(self) -> AsyncIterator[InboundMessage]:
        for message in self.messages:
            yield message

    async def send_reply(self, chat_id: str, text: str, reply_to: str | None = None) -> str:
        self.sent.append((chat_id, text, reply_to))
        return str(len(self.sent))


def ledger_row(
    identifier: object,
    amount: object,
    currency: object,
    paid_out: object = None,
    record_id: str = "rec",
) -> LedgerRecord:
    """Build a ledger record using the default column names."""
    fields = {
        "Telegram": identifier,
        "Payout": amount,
        "Currency": currency,
    }
    if paid_out is not None:
        fields["Paid out"] = paid_out
    return LedgerRecord(id=record_id, fields=fields)


def make_page(index: int) -> DocumentPage:
    return DocumentPage(
        id=f"page{index}",
        title=f"Page {index}",
        url=f"https://notion.so/page{index}",
        last_edited_at=datetime(2025, 5, index, tzinfo=UTC),
    )


def make_message(
    text: str,
    handle: str | None = "bob",
    command: str | None = None,
    args: tuple[str, ...] = (),
) -> InboundMessage:
    return InboundMessage(
        chat_id="-100123",
        message_id="42",
        raw_text=text,
        sender_handle=handle,
        timestamp=datetime.now(UTC),
        command=command,
        command_args=args,
    )


@pytest.fixture
def bob_ledger() -> FakeLedger:
    """Ledger with one May USDC payout and one June TOKEN payout for @bob."""
    return FakeLedger(
        [
            ledger_row("@bob", "100", "USDC", "May 25", record_id="rec1"),
            ledger_row("@bob", "50", "TOKEN", "June 25", record_id="rec2"),
        ]
    )


@pytest.fixture
def assistant_config() -> AssistantConfig:
    """Create a full test configuration."""
    return AssistantConfig(
        chat=ChatConfig(
            provider="telegram",
            telegram=TelegramConfig(bot_token=TELEGRAM_TOKEN),
        ),
        documents=DocumentsConfig(
            provider="notion",
            notion=NotionConfig(token=NOTION_TOKEN),
        ),
        ledger=LedgerConfig(
            provider="airtable",
            airtable=AirtableConfig(api_key=AIRTABLE_KEY, base_id="appTEST123"),
        ),
    )
