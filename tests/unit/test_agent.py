"""Tests for Agent orchestrator functionality."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from conftest import FakeChat, FakeDocuments, FakeLedger, make_message

from mylo_assistant.adapters.documents.notion import NotionAdapter
from mylo_assistant.adapters.ledger.airtable import AirtableAdapter
from mylo_assistant.config.schema import AssistantConfig, ChatConfig
from mylo_assistant.core.agent import Agent, StartupError, create_agent
from mylo_assistant.models.message import ProcessingResult
from mylo_assistant.utils.errors import ConfigurationError


@pytest.fixture
def agent(
    assistant_config: AssistantConfig,
    bob_ledger: FakeLedger,
) -> Agent:
    """Create an Agent wired to in-memory fakes."""
    return Agent(
        config=assistant_config,
        chat=FakeChat(),
        documents=FakeDocuments(),
        ledger=bob_ledger,
    )


class TestAgent:
    """Tests for Agent class."""

    def test_init(self, agent: Agent) -> None:
        """Test Agent initialization."""
        assert agent.is_running is False
        assert agent.stats == {
            "messages_seen": 0,
            "messages_answered": 0,
            "errors_count": 0,
            "active_tasks": 0,
        }

    async def test_process_message_counts(self, agent: Agent) -> None:
        """Test answered and ignored messages are counted."""
        assert await agent.process_message(make_message("hey mylo")) is ProcessingResult.HELP_SENT
        assert await agent.process_message(make_message("lunch?")) is (
            ProcessingResult.NOT_TRIGGERED
        )

        assert agent.stats["messages_seen"] == 2
        assert agent.stats["messages_answered"] == 1
        assert agent.stats["errors_count"] == 0

    async def test_process_message_handler_exception(self, agent: Agent) -> None:
        """Test an exception escaping the handler is counted, not raised."""
        with patch.object(agent.handler, "handle", AsyncMock(side_effect=RuntimeError("boom"))):
            result = await agent.process_message(make_message("hey mylo"))

        assert result is ProcessingResult.ERROR
        assert agent.stats["errors_count"] == 1

    async def test_earnings_disabled_without_ledger(
        self, assistant_config: AssistantConfig
    ) -> None:
        """Test an agent built without a ledger answers earnings with an error reply."""
        chat = FakeChat()
        agent = Agent(assistant_config, chat, FakeDocuments())

        result = await agent.process_message(make_message("hey mylo my earnings"))

        assert result is ProcessingResult.ERROR
        assert "not available" in chat.sent[0][1]

    async def test_start_processes_then_stop_drains(
        self, assistant_config: AssistantConfig, bob_ledger: FakeLedger
    ) -> None:
        """Test the listen loop feeds every message through the pipeline."""
        chat = FakeChat([make_message("hey mylo"), make_message("good morning")])
        agent = Agent(assistant_config, chat, FakeDocuments(), bob_ledger)

        # Returns once the fake provider runs out of messages
        await agent.start()
        assert agent.is_running is True

        await agent.stop()

        assert agent.is_running is False
        assert chat.connected is False
        assert agent.stats["messages_seen"] == 2
        assert agent.stats["messages_answered"] == 1
        assert len(chat.sent) == 1

    async def test_start_failure(self, assistant_config: AssistantConfig) -> None:
        """Test a failed connect raises StartupError and cleans up."""
        chat = MagicMock()
        chat.connect = AsyncMock(side_effect=RuntimeError("no network"))
        chat.disconnect = AsyncMock()
        agent = Agent(assistant_config, chat, FakeDocuments())

        with pytest.raises(StartupError, match="no network"):
            await agent.start()

        chat.disconnect.assert_awaited_once()
        assert agent.is_running is False

    async def test_stop_closes_http_adapters(self, assistant_config: AssistantConfig) -> None:
        """Test adapters exposing close() are closed on shutdown."""
        documents = FakeDocuments()
        documents.close = AsyncMock()  # type: ignore[attr-defined]
        ledger = FakeLedger()
        close_error = RuntimeError("already closed")
        ledger.close = AsyncMock(side_effect=close_error)  # type: ignore[attr-defined]
        chat = FakeChat()
        agent = Agent(assistant_config, chat, documents, ledger)

        await agent.start()
        await agent.stop()

        documents.close.assert_awaited_once()
        ledger.close.assert_awaited_once()

    async def test_stop_when_not_running(self, agent: Agent) -> None:
        """Test stopping an idle agent is a no-op."""
        await agent.stop()

        assert agent.is_running is False


class TestCreateAgent:
    """Tests for the create_agent factory."""

    async def test_builds_all_adapters(self, assistant_config: AssistantConfig) -> None:
        """Test chat, document and ledger adapters are created from config."""
        with patch("mylo_assistant.adapters.chat.telegram.TelegramAdapter") as telegram_cls:
            agent = await create_agent(assistant_config)

        telegram_cls.assert_called_once_with(assistant_config.chat.telegram)
        assert isinstance(agent.handler._documents, NotionAdapter)
        assert agent.handler._earnings is not None
        assert isinstance(agent.handler._earnings._ledger, AirtableAdapter)

    async def test_no_ledger_disables_earnings(self, assistant_config: AssistantConfig) -> None:
        """Test a config without a ledger section."""
        config = assistant_config.model_copy(update={"ledger": None})

        with patch("mylo_assistant.adapters.chat.telegram.TelegramAdapter"):
            agent = await create_agent(config)

        assert agent.handler._earnings is None

    async def test_missing_provider_config(self, assistant_config: AssistantConfig) -> None:
        """Test a selected provider without its section is rejected."""
        config = assistant_config.model_copy(
            update={"chat": ChatConfig(provider="telegram")}
        )

        with pytest.raises(ConfigurationError, match="Telegram configuration required"):
            await create_agent(config)
