"""Message processing pipeline orchestrator.

This module implements the MessageHandler class that coordinates the
free-text pipeline:
1. Detect the activation phrase
2. Classify the remainder into an intent
3. Dispatch to document search or the earnings engine
4. Render reply blocks
5. Split oversized blocks and send them

It also answers the "/page <id>" command that search results point to.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from mylo_assistant.config.schema import AssistantSettings
from mylo_assistant.core.intent_classifier import IntentClassifier
from mylo_assistant.core.replies import ReplyFormatter, split_message
from mylo_assistant.core.trigger import TriggerDetector
from mylo_assistant.models.intent import EarningsIntent, Intent, NoIntent, SearchIntent
from mylo_assistant.models.message import InboundMessage, ProcessingResult
from mylo_assistant.utils.errors import SourceUnavailableError
from mylo_assistant.utils.security import sanitize_for_logging

if TYPE_CHECKING:
    from mylo_assistant.core.earnings import EarningsEngine
    from mylo_assistant.interfaces.chat import ChatProvider
    from mylo_assistant.interfaces.documents import DocumentProvider

log = structlog.get_logger()

PAGE_COMMAND = "page"


@dataclass(frozen=True)
class DispatchOutcome:
    """Reply blocks produced by one pipeline pass."""

    result: ProcessingResult
    blocks: tuple[str, ...] = ()


class MessageHandler:
    """Orchestrates the message processing pipeline.

    Responsibilities:
    - Detect triggered messages and classify them
    - Dispatch search and earnings intents to their collaborators
    - Turn every outcome, including failures, into friendly reply text
    - Keep every outbound block under the platform size limit

    Example:
        handler = MessageHandler(chat, documents, earnings, settings)
        result = await handler.handle(message)

        # Without a chat provider, e.g. from another host:
        blocks = await handler.handle_triggered_message("hey mylo find docs", "alice")
    """

    def __init__(
        self,
        chat: ChatProvider | None,
        documents: DocumentProvider,
        earnings: EarningsEngine | None,
        settings: AssistantSettings | None = None,
        detector: TriggerDetector | None = None,
        classifier: IntentClassifier | None = None,
        formatter: ReplyFormatter | None = None,
    ) -> None:
        """Initialize the MessageHandler.

        Args:
            chat: Chat provider for sending replies (None for text-only use)
            documents: Document provider for page search and content
            earnings: Earnings engine, None if no ledger is configured
            settings: Assistant settings (activation phrase, size limits)
            detector: Trigger detector override
            classifier: Intent classifier override
            formatter: Reply formatter override
        """
        self._chat = chat
        self._documents = documents
        self._earnings = earnings
        self._settings = settings or AssistantSettings()
        self._detector = detector or TriggerDetector(self._settings.activation_phrase)
        self._classifier = classifier or IntentClassifier()
        self._formatter = formatter or ReplyFormatter(self._settings.max_search_results)

    async def handle(self, message: InboundMessage) -> ProcessingResult:
        """Process a chat message and send any replies.

        Args:
            message: Incoming chat message

        Returns:
            ProcessingResult indicating what action was taken
        """
        start_time = time.time()

        if message.command == PAGE_COMMAND:
            page_id = message.command_args[0] if message.command_args else ""
            outcome = await self.dispatch_page_request(page_id)
        else:
            outcome = await self.dispatch(message.raw_text, message.sender_handle)

        if outcome.result is ProcessingResult.NOT_TRIGGERED:
            return outcome.result

        log.info(
            "processing_message",
            chat_id=message.chat_id,
            message_id=message.message_id,
            user=message.sender_handle,
        )

        for block in outcome.blocks:
            await self._send_reply(message.chat_id, block, message.message_id)

        self._log_completion(start_time, outcome.result)
        return outcome.result

    async def handle_triggered_message(
        self,
        raw_text: str,
        sender_handle: str | None,
    ) -> list[str]:
        """Run one pipeline pass and return the outbound text blocks.

        Args:
            raw_text: Inbound message text including the activation phrase
            sender_handle: Sender's chat handle, None if unknown

        Returns:
            Reply blocks, each within the configured size limit including the
            "Part i/N" header split blocks carry. Empty if not triggered.
        """
        outcome = await self.dispatch(raw_text, sender_handle)
        return list(outcome.blocks)

    async def handle_page_request(self, page_id: str) -> list[str]:
        """Return the blocks answering a "/page <id>" request."""
        outcome = await self.dispatch_page_request(page_id)
        return list(outcome.blocks)

    async def dispatch(self, raw_text: str, sender_handle: str | None) -> DispatchOutcome:
        """Detect, classify and answer a message without sending anything.

        All failures are caught here and turned into a single apology block.
        """
        match = self._detector.detect(raw_text)
        if not match.triggered:
            return DispatchOutcome(ProcessingResult.NOT_TRIGGERED)

        try:
            intent = self._classifier.classify(match.remainder or "")
            result, texts = await self._answer(intent, sender_handle)
        except Exception as e:
            log.exception("message_processing_failed", error=str(e))
            result, texts = ProcessingResult.ERROR, [self._formatter.generic_error()]

        return DispatchOutcome(result, self._bound(texts))

    async def dispatch_page_request(self, page_id: str) -> DispatchOutcome:
        """Fetch a page's content and return it as sized blocks."""
        page_id = page_id.strip()
        if not page_id:
            return DispatchOutcome(
                ProcessingResult.PAGE_SENT, self._bound([self._formatter.page_usage()])
            )

        texts = [self._formatter.retrieving_page()]
        try:
            content = await self._documents.get_page_content(page_id)
        except SourceUnavailableError as e:
            log.warning("page_fetch_failed", page_id=page_id, error=str(e))
            texts.append(self._formatter.page_unavailable())
            return DispatchOutcome(ProcessingResult.ERROR, self._bound(texts))
        except Exception as e:
            log.exception("page_request_failed", page_id=page_id, error=str(e))
            texts.append(self._formatter.generic_error())
            return DispatchOutcome(ProcessingResult.ERROR, self._bound(texts))

        texts.append(content if content.strip() else self._formatter.page_empty())
        return DispatchOutcome(ProcessingResult.PAGE_SENT, self._bound(texts))

    async def _answer(
        self,
        intent: Intent,
        sender_handle: str | None,
    ) -> tuple[ProcessingResult, list[str]]:
        if isinstance(intent, EarningsIntent):
            return await self._answer_earnings(intent, sender_handle)

        if isinstance(intent, SearchIntent):
            return await self._answer_search(intent)

        if isinstance(intent, NoIntent):
            return ProcessingResult.HELP_SENT, [self._formatter.help_message()]

        raise TypeError(f"Unhandled intent: {intent!r}")

    async def _answer_search(self, intent: SearchIntent) -> tuple[ProcessingResult, list[str]]:
        log.info("document_search_start", phrase=sanitize_for_logging(intent.phrase))
        texts = [self._formatter.searching(intent.phrase)]

        try:
            pages = await self._documents.search_pages(intent.phrase)
        except SourceUnavailableError as e:
            log.warning("document_search_failed", error=str(e))
            texts.append(self._formatter.search_unavailable())
            return ProcessingResult.ERROR, texts

        log.info("document_search_complete", results=len(pages))
        if not pages:
            texts.append(self._formatter.no_pages_found(intent.phrase))
        else:
            texts.append(self._formatter.search_results(intent.phrase, pages))
        return ProcessingResult.SEARCH_ANSWERED, texts

    async def _answer_earnings(
        self,
        intent: EarningsIntent,
        sender_handle: str | None,
    ) -> tuple[ProcessingResult, list[str]]:
        if self._earnings is None:
            return ProcessingResult.ERROR, [self._formatter.earnings_unavailable()]

        handle = (sender_handle or "").strip().lstrip("@")
        if not handle:
            log.info("earnings_missing_handle")
            return ProcessingResult.EARNINGS_ANSWERED, [self._formatter.missing_handle()]

        result = await self._earnings.compute_earnings(handle, intent.month)
        outcome = (
            ProcessingResult.ERROR if result.failure else ProcessingResult.EARNINGS_ANSWERED
        )
        return outcome, [
            self._formatter.calculating(intent.month),
            self._formatter.earnings_summary(result, handle),
        ]

    def _bound(self, texts: list[str]) -> tuple[str, ...]:
        """Apply the size limit to every block."""
        limit = self._settings.max_message_length
        return tuple(part for text in texts for part in split_message(text, limit))

    async def _send_reply(self, chat_id: str, text: str, reply_to: str | None) -> None:
        """Send one reply block (with error handling)."""
        if self._chat is None:
            return

        try:
            await self._chat.send_reply(chat_id=chat_id, text=text, reply_to=reply_to)
        except Exception as e:
            log.error("send_reply_failed", chat_id=chat_id, error=str(e))

    def _log_completion(self, start_time: float, result: ProcessingResult) -> None:
        duration = time.time() - start_time
        log.info(
            "message_processing_complete",
            result=result.value,
            duration_seconds=round(duration, 2),
        )
