"""Reply text rendering and size-bounded splitting.

All user-facing wording lives in ReplyFormatter so the dispatch code in
MessageHandler only decides *which* reply to send. split_message() enforces
the chat platform's maximum message size on every outbound block.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from mylo_assistant.models.document import DocumentPage
from mylo_assistant.models.earnings import EarningsResult, ErrorKind

DEFAULT_MAX_MESSAGE_LENGTH = 4000
PART_HEADER = "📄 Part {index}/{total}:\n\n"


def chunk_text(text: str, max_length: int = DEFAULT_MAX_MESSAGE_LENGTH) -> list[str]:
    """Slice text into pieces of at most ``max_length`` characters.

    Cuts fall on hard character boundaries, not words or paragraphs, so
    ``"".join(chunk_text(text))`` always equals ``text``.
    """
    if max_length < 1:
        raise ValueError("max_length must be positive")
    if len(text) <= max_length:
        return [text]
    return [text[i : i + max_length] for i in range(0, len(text), max_length)]


def split_message(text: str, max_length: int = DEFAULT_MAX_MESSAGE_LENGTH) -> list[str]:
    """Split an outbound block into numbered parts if it is too long.

    Args:
        text: Reply body
        max_length: Maximum length of a single part, header included

    Returns:
        ``[text]`` when it fits, otherwise parts prefixed "📄 Part i/N:"

    Example:
        >>> len(split_message("x" * 9000))
        3
    """
    if len(text) <= max_length:
        return [text]

    # The header widens with the part count, so grow the guess until the
    # bodies fit under the widest header
    total = 2
    while True:
        header_length = len(PART_HEADER.format(index=total, total=total))
        chunks = chunk_text(text, max_length - header_length)
        if len(chunks) <= total:
            break
        total = len(chunks)

    total = len(chunks)
    return [
        PART_HEADER.format(index=index, total=total) + chunk
        for index, chunk in enumerate(chunks, start=1)
    ]


def _money(amount: Decimal) -> str:
    return f"{amount:.2f}"


class ReplyFormatter:
    """Builds the text blocks the assistant sends back.

    Example:
        formatter = ReplyFormatter(max_search_results=5)
        text = formatter.search_results("roadmap", pages)
    """

    def __init__(self, max_search_results: int = 5) -> None:
        self._max_search_results = max_search_results

    # ------------------------------------------------------------------
    # General
    # ------------------------------------------------------------------

    def help_message(self) -> str:
        """Fixed reply for a bare activation phrase."""
        return (
            "👋 Hey there! I'm Mylo, your assistant.\n\n"
            "You can ask me to:\n"
            '• Search Notion: "Hey Mylo, search for project proposals"\n'
            '• Check earnings: "Hey Mylo, how much have I earned?"\n'
            '• Check monthly earnings: "Hey Mylo, how much have I earned in May?"\n\n'
            "What would you like me to help you with?"
        )

    def generic_error(self) -> str:
        return (
            "❌ Sorry, I encountered an error while processing your request. "
            "Please try again later."
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def searching(self, phrase: str) -> str:
        return f'🔍 Searching Notion for: "{phrase}"...'

    def search_unavailable(self) -> str:
        return "❌ Sorry, I couldn't reach Notion right now. Please try again later."

    def no_pages_found(self, phrase: str) -> str:
        return (
            f'📄 No pages found for "{phrase}".\n\n'
            "Try rephrasing your search or using different keywords."
        )

    def search_results(self, phrase: str, pages: Sequence[DocumentPage]) -> str:
        """Render a numbered list of the first few pages.

        Pages are listed in the order the document store returned them.
        """
        if not pages:
            return self.no_pages_found(phrase)

        lines = [f'📚 Found {len(pages)} page(s) for "{phrase}":\n']
        for number, page in enumerate(pages[: self._max_search_results], start=1):
            lines.append(
                f"{number}. {page.title or 'Untitled'}\n"
                f"📅 Last edited: {page.last_edited_at:%Y-%m-%d}\n"
                f"🔗 {page.url}\n"
                f"📄 Use /page {page.id} to get content\n"
            )

        remaining = len(pages) - self._max_search_results
        if remaining > 0:
            lines.append(f"... and {remaining} more pages.")

        return "\n".join(lines).rstrip("\n")

    # ------------------------------------------------------------------
    # Page content
    # ------------------------------------------------------------------

    def page_usage(self) -> str:
        return "📄 Please provide a page ID.\n\nExample: /page abc123def456"

    def retrieving_page(self) -> str:
        return "📖 Retrieving page content..."

    def page_empty(self) -> str:
        return "📄 This page appears to be empty or contains unsupported content types."

    def page_unavailable(self) -> str:
        return "❌ Sorry, I couldn't retrieve that page. Please try again later."

    # ------------------------------------------------------------------
    # Earnings
    # ------------------------------------------------------------------

    def calculating(self, month: str | None) -> str:
        month_text = f" for {month}" if month else ""
        return f"💰 Calculating your earnings{month_text}..."

    def missing_handle(self) -> str:
        return (
            "❌ Could not determine your Telegram handle. "
            "Please make sure you have a username set."
        )

    def earnings_unavailable(self) -> str:
        return "💰 Earnings service is not available. Please check the Airtable configuration."

    def earnings_source_error(self) -> str:
        return (
            "❌ Sorry, I couldn't reach the treasury records right now. "
            "Please try again later."
        )

    def earnings_summary(self, result: EarningsResult, handle: str) -> str:
        """Render an EarningsResult for ``handle``.

        Only nonzero currency buckets get a line. A query with no matching
        records gets a "no earnings found" message instead of a summary.
        """
        handle = handle.lstrip("@")

        if result.failure is ErrorKind.MISSING_IDENTIFIER:
            return self.missing_handle()
        if result.failure is ErrorKind.SOURCE_UNAVAILABLE:
            return self.earnings_source_error()

        month_text = f" for {result.month}" if result.month else ""

        if result.matched_record_count == 0:
            return f"💰 No earnings found for @{handle}{month_text}."

        lines = [f"💰 Earnings Summary for @{handle}{month_text}", ""]

        if result.usdc_total > 0:
            lines.append(f"💵 USDC: ${_money(result.usdc_total)}")
        if result.token_total > 0:
            lines.append(f"🪙 Tokens: {_money(result.token_total)}")

        if not result.has_payouts:
            lines.append(
                f"📊 Found {result.matched_record_count} record(s) but no valid payouts."
            )
        else:
            lines.append("")
            lines.append(f"📊 Based on {result.matched_record_count} payout record(s)")

        return "\n".join(lines)
