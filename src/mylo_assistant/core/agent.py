"""Main Agent orchestrator that coordinates all components.

This module implements the Agent class that serves as the host for the
assistant pipeline. It:
- Manages adapter lifecycle (connect, disconnect)
- Runs each inbound message in its own task with concurrency control
- Handles graceful shutdown on signals (SIGTERM, SIGINT)
- Keeps a simple count of messages seen
"""

from __future__ import annotations

import asyncio
import contextlib
import signal
from typing import TYPE_CHECKING

import structlog

from mylo_assistant.config.schema import AssistantConfig
from mylo_assistant.core.earnings import EarningsEngine
from mylo_assistant.core.message_handler import MessageHandler
from mylo_assistant.models.message import InboundMessage, ProcessingResult
from mylo_assistant.utils.errors import ConfigurationError
from mylo_assistant.utils.logging import bind_context, unbind_context

if TYPE_CHECKING:
    from mylo_assistant.interfaces.chat import ChatProvider
    from mylo_assistant.interfaces.documents import DocumentProvider
    from mylo_assistant.interfaces.ledger import LedgerProvider

log = structlog.get_logger()


class AgentError(Exception):
    """Base exception for agent errors."""


class StartupError(AgentError):
    """Failed to start the agent."""


class Agent:
    """Main orchestrator that coordinates all components.

    Responsibilities:
    - Route incoming messages through the MessageHandler
    - Handle graceful startup and shutdown
    - Bound concurrent message processing

    Message passes share no mutable state; the only shared values are the
    counters reported by ``stats``.

    Example:
        agent = Agent(config, chat, documents, ledger)
        await agent.start()  # Blocks until shutdown signal
    """

    def __init__(
        self,
        config: AssistantConfig,
        chat: ChatProvider,
        documents: DocumentProvider,
        ledger: LedgerProvider | None = None,
    ) -> None:
        """Initialize the Agent.

        Args:
            config: Application configuration
            chat: Chat provider adapter
            documents: Document store adapter
            ledger: Ledger adapter, None to disable earnings queries
        """
        self._config = config
        self._chat = chat
        self._documents = documents
        self._ledger = ledger

        earnings = None
        if ledger is not None:
            earnings_config = config.ledger.earnings if config.ledger else None
            earnings = EarningsEngine(ledger, earnings_config)

        self._handler = MessageHandler(
            chat,
            documents,
            earnings,
            config.assistant,
        )

        # Concurrency control
        self._max_concurrent = config.runtime.max_concurrent
        self._semaphore: asyncio.Semaphore | None = None
        self._active_tasks: set[asyncio.Task[ProcessingResult]] = set()

        # Lifecycle state
        self._running = False
        self._shutdown_event: asyncio.Event | None = None

        # Statistics
        self._messages_seen = 0
        self._messages_answered = 0
        self._errors_count = 0

    @property
    def is_running(self) -> bool:
        """Return True if the agent is currently running."""
        return self._running

    @property
    def handler(self) -> MessageHandler:
        return self._handler

    @property
    def stats(self) -> dict[str, int]:
        """Return processing statistics."""
        return {
            "messages_seen": self._messages_seen,
            "messages_answered": self._messages_answered,
            "errors_count": self._errors_count,
            "active_tasks": len(self._active_tasks),
        }

    async def start(self) -> None:
        """Start the agent and begin processing messages.

        Blocks until the chat provider stops yielding messages or a
        shutdown signal arrives.

        Raises:
            StartupError: If startup fails
        """
        if self._running:
            log.warning("agent_already_running")
            return

        log.info("agent_starting", config=self._config.model_dump(include={"assistant", "runtime"}))

        try:
            self._semaphore = asyncio.Semaphore(self._max_concurrent)
            self._shutdown_event = asyncio.Event()

            await self._chat.connect()
            log.info("chat_provider_connected")

            self._setup_signal_handlers()

            self._running = True
            log.info("agent_started")

        except Exception as e:
            log.exception("agent_startup_failed", error=str(e))
            await self._cleanup()
            raise StartupError(f"Failed to start agent: {e}") from e

        await self._listen_for_messages()

    async def stop(self) -> None:
        """Gracefully stop the agent, draining in-flight messages."""
        if not self._running:
            log.warning("agent_not_running")
            return

        log.info("agent_stopping", active_tasks=len(self._active_tasks))

        if self._shutdown_event:
            self._shutdown_event.set()

        await self._wait_for_tasks()
        await self._cleanup()

        self._running = False
        log.info("agent_stopped", **self.stats)

    async def process_message(self, message: InboundMessage) -> ProcessingResult:
        """Process a single message through the pipeline.

        Args:
            message: Message to process

        Returns:
            ProcessingResult indicating what action was taken
        """
        if not self._semaphore:
            self._semaphore = asyncio.Semaphore(self._max_concurrent)

        self._messages_seen += 1
        bind_context(chat_id=message.chat_id, message_id=message.message_id)

        async with self._semaphore:
            try:
                result = await self._handler.handle(message)
            except Exception as e:
                log.exception("message_processing_error", error=str(e))
                self._errors_count += 1
                return ProcessingResult.ERROR
            finally:
                unbind_context("chat_id", "message_id")

        if result is ProcessingResult.ERROR:
            self._errors_count += 1
        elif result is not ProcessingResult.NOT_TRIGGERED:
            self._messages_answered += 1

        return result

    async def _listen_for_messages(self) -> None:
        """Listen for incoming messages and process them."""
        log.info("starting_message_listener")

        try:
            async for message in self._chat.listen():
                if self._shutdown_event and self._shutdown_event.is_set():
                    log.info("shutdown_signal_received_stopping_listener")
                    break

                task = asyncio.create_task(
                    self.process_message(message),
                    name=f"process_{message.message_id}",
                )
                self._active_tasks.add(task)
                task.add_done_callback(self._active_tasks.discard)

        except asyncio.CancelledError:
            log.info("message_listener_cancelled")
        except Exception as e:
            log.exception("message_listener_error", error=str(e))
            raise

    async def _wait_for_tasks(self) -> None:
        """Wait for active tasks to complete with timeout."""
        if not self._active_tasks:
            return

        log.info("waiting_for_active_tasks", count=len(self._active_tasks))

        done, pending = await asyncio.wait(
            self._active_tasks,
            timeout=self._config.runtime.shutdown_timeout,
        )

        if pending:
            log.warning("cancelling_pending_tasks", count=len(pending))
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        log.info("tasks_completed", completed=len(done), cancelled=len(pending))

    async def _cleanup(self) -> None:
        """Clean up resources."""
        try:
            await self._chat.disconnect()
            log.info("chat_provider_disconnected")
        except Exception as e:
            log.warning("chat_disconnect_error", error=str(e))

        # HTTP adapters hold a connection pool
        for adapter in (self._documents, self._ledger):
            close = getattr(adapter, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                log.warning("adapter_close_error", adapter=type(adapter).__name__, error=str(e))

        self._active_tasks.clear()

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(
                    sig,
                    lambda s: asyncio.create_task(self._handle_signal(s)),
                    sig,
                )

    async def _handle_signal(self, sig: signal.Signals) -> None:
        log.info("received_signal", signal=sig.name)
        await self.stop()


async def create_agent(config: AssistantConfig) -> Agent:
    """Factory function to create an Agent with all dependencies.

    Args:
        config: Application configuration

    Returns:
        Configured Agent instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    chat = _create_chat_adapter(config)
    documents = _create_document_adapter(config)
    ledger = _create_ledger_adapter(config)

    return Agent(config, chat, documents, ledger)


def _create_chat_adapter(config: AssistantConfig) -> ChatProvider:
    provider = config.chat.provider

    if provider == "telegram":
        if not config.chat.telegram:
            raise ConfigurationError(
                "Telegram configuration required when provider is 'telegram'"
            )
        # Import here to avoid loading unnecessary dependencies
        from mylo_assistant.adapters.chat.telegram import TelegramAdapter

        return TelegramAdapter(config.chat.telegram)

    raise ConfigurationError(f"Unsupported chat provider: {provider}")


def _create_document_adapter(config: AssistantConfig) -> DocumentProvider:
    provider = config.documents.provider

    if provider == "notion":
        if not config.documents.notion:
            raise ConfigurationError(
                "Notion configuration required when provider is 'notion'"
            )
        from mylo_assistant.adapters.documents.notion import NotionAdapter

        return NotionAdapter(config.documents.notion)

    raise ConfigurationError(f"Unsupported document provider: {provider}")


def _create_ledger_adapter(config: AssistantConfig) -> LedgerProvider | None:
    if config.ledger is None:
        log.info("ledger_not_configured_earnings_disabled")
        return None

    provider = config.ledger.provider

    if provider == "airtable":
        if not config.ledger.airtable:
            raise ConfigurationError(
                "Airtable configuration required when provider is 'airtable'"
            )
        from mylo_assistant.adapters.ledger.airtable import AirtableAdapter

        return AirtableAdapter(config.ledger.airtable)

    raise ConfigurationError(f"Unsupported ledger provider: {provider}")
