"""Abstract interface for chat platform integrations."""

from collections.abc import AsyncIterator
from typing import Protocol

from ..models.message import InboundMessage


class ChatProvider(Protocol):
    """Abstract interface for chat platform integrations.

    This protocol defines the contract that all chat platform adapters
    (Telegram, Discord, etc.) must implement.
    """

    async def connect(self) -> None:
        """
        Establish connection to the chat platform.

        Raises:
            ConnectionError: If connection fails
        """
        ...

    async def disconnect(self) -> None:
        """Gracefully close the connection."""
        ...

    async def listen(self) -> AsyncIterator[InboundMessage]:
        """
        Yield incoming messages.

        This is an async generator that yields messages as they arrive.

        Yields:
            InboundMessage: Each incoming text message or bot command

        Example:
            async for message in provider.listen():
                # Process message
                pass
        """
        ...

    async def send_reply(
        self,
        chat_id: str,
        text: str,
        reply_to: str | None = None,
    ) -> str:
        """
        Send a text reply to a chat.

        Args:
            chat_id: Target chat identifier
            text: Plain text message (at most the platform's size limit)
            reply_to: Message ID to reply to (optional)

        Returns:
            Message ID of the sent message

        Raises:
            SendError: If message delivery fails
        """
        ...
