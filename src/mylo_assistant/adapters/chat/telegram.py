"""Telegram chat adapter using python-telegram-bot.

This module implements the ChatProvider protocol for Telegram using the
python-telegram-bot Application with long polling.

Features:
- Plain text messages and the /page command are queued for the agent
- Optional chat allowlist
- Replies threaded to the triggering message
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog
from telegram import ReplyParameters
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler, MessageHandler, filters

from ...config.schema import TelegramConfig
from ...models.message import InboundMessage

if TYPE_CHECKING:
    from telegram import Update
    from telegram.ext import ContextTypes


log = structlog.get_logger()


class TelegramAdapterError(Exception):
    """Base exception for Telegram adapter errors."""


class ConnectionError(TelegramAdapterError):
    """Raised when connection to Telegram fails."""


class SendError(TelegramAdapterError):
    """Raised when sending a message fails."""


class TelegramAdapter:
    """Telegram chat adapter implementing the ChatProvider protocol.

    Example:
        config = TelegramConfig(bot_token="123456:ABC-DEF")
        adapter = TelegramAdapter(config)

        await adapter.connect()
        async for message in adapter.listen():
            print(f"Received: {message.raw_text}")
        await adapter.disconnect()
    """

    def __init__(self, config: TelegramConfig) -> None:
        """Initialize the Telegram adapter.

        Args:
            config: Telegram-specific configuration.
        """
        self._config = config
        self._connected = False

        self._app = Application.builder().token(config.bot_token).build()

        # Message queue for incoming messages
        self._message_queue: asyncio.Queue[InboundMessage] = asyncio.Queue()
        self._disconnect_event = asyncio.Event()

        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register update handlers with the Telegram application."""
        self._app.add_handler(CommandHandler("page", self._on_page_command))
        self._app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self._on_text))

    async def _on_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._enqueue(update)

    async def _on_page_command(
        self,
        update: Update,
        context: ContextTypes.DEFAULT_TYPE,
    ) -> None:
        await self._enqueue(update, command="page", args=tuple(context.args or ()))

    async def _enqueue(
        self,
        update: Update,
        command: str | None = None,
        args: tuple[str, ...] = (),
    ) -> None:
        """Convert an update to an InboundMessage and queue it if relevant."""
        message = update.effective_message
        if message is None or not message.text:
            return

        chat_id = str(message.chat_id)
        if self._config.allowed_chats and chat_id not in self._config.allowed_chats:
            return

        user = update.effective_user
        if user is not None and user.is_bot:
            return

        inbound = InboundMessage(
            chat_id=chat_id,
            message_id=str(message.message_id),
            raw_text=message.text,
            sender_handle=user.username if user is not None else None,
            timestamp=message.date or datetime.now(),
            command=command,
            command_args=args,
            raw_event=update.to_dict(),
        )

        await self._message_queue.put(inbound)
        log.debug(
            "message_queued",
            chat_id=chat_id,
            message_id=inbound.message_id,
            command=command,
        )

    async def connect(self) -> None:
        """Start polling Telegram for updates.

        Raises:
            ConnectionError: If connection fails.
        """
        if self._connected:
            return

        try:
            await self._app.initialize()
            await self._app.start()
            if self._app.updater is None:
                raise TelegramAdapterError("Application was built without an updater")
            await self._app.updater.start_polling(poll_interval=self._config.poll_interval)

            self._connected = True
            self._disconnect_event.clear()
            log.info("telegram_connected", allowed_chats=len(self._config.allowed_chats))

        except Exception as e:
            log.error("telegram_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to Telegram: {e}") from e

    async def disconnect(self) -> None:
        """Stop polling and shut the application down."""
        if not self._connected:
            return

        self._disconnect_event.set()

        try:
            if self._app.updater is not None:
                await self._app.updater.stop()
            await self._app.stop()
            await self._app.shutdown()
        except Exception as e:
            log.warning("disconnect_error", error=str(e))

        self._connected = False
        log.info("telegram_disconnected")

    async def listen(self) -> AsyncIterator[InboundMessage]:
        """Yield incoming messages until disconnected."""
        if not self._connected:
            raise TelegramAdapterError("Not connected. Call connect() first.")

        while not self._disconnect_event.is_set():
            try:
                message = await asyncio.wait_for(self._message_queue.get(), timeout=1.0)
                yield message
            except TimeoutError:
                continue
            except asyncio.CancelledError:
                break

    async def send_reply(
        self,
        chat_id: str,
        text: str,
        reply_to: str | None = None,
    ) -> str:
        """Send a plain text message.

        Args:
            chat_id: Target chat identifier.
            text: Message text.
            reply_to: Message ID to reply to (optional).

        Returns:
            Message ID of the sent message.

        Raises:
            SendError: If message delivery fails.
        """
        kwargs: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_to:
            kwargs["reply_parameters"] = ReplyParameters(message_id=int(reply_to))

        try:
            sent = await self._app.bot.send_message(**kwargs)
        except TelegramError as e:
            log.error("send_reply_failed", chat_id=chat_id, error=str(e))
            raise SendError(f"Failed to send message: {e}") from e

        log.debug("message_sent", chat_id=chat_id, message_id=sent.message_id)
        return str(sent.message_id)
