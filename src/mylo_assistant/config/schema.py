"""Pydantic models for configuration schema."""

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TELEGRAM_TOKEN_PATTERN = re.compile(r"^\d+:[A-Za-z0-9_-]+$")


class TelegramConfig(BaseModel):
    """Telegram-specific configuration."""

    bot_token: str
    allowed_chats: list[str] = []
    poll_interval: float = Field(0.0, ge=0.0, le=60.0)

    @field_validator("bot_token")
    @classmethod
    def validate_bot_token(cls, v: str) -> str:
        """Validate Telegram bot token format."""
        if not TELEGRAM_TOKEN_PATTERN.match(v):
            raise ValueError("Bot token must look like <bot id>:<secret>")
        return v


class NotionConfig(BaseModel):
    """Notion-specific configuration."""

    token: str
    api_version: str = "2022-06-28"
    base_url: str = "https://api.notion.com"
    timeout: float = Field(30.0, gt=0.0, le=300.0)

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        """Validate Notion integration token format."""
        if not v.startswith(("secret_", "ntn_")):
            raise ValueError("Notion token must start with secret_ or ntn_")
        return v


class AirtableConfig(BaseModel):
    """Airtable-specific configuration."""

    api_key: str
    base_id: str
    base_url: str = "https://api.airtable.com"
    page_size: int = Field(100, ge=1, le=100)
    timeout: float = Field(30.0, gt=0.0, le=300.0)

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate Airtable personal access token format."""
        if not v.startswith(("pat", "key")):
            raise ValueError("Airtable API key must start with pat or key")
        return v

    @field_validator("base_id")
    @classmethod
    def validate_base_id(cls, v: str) -> str:
        """Validate Airtable base ID format."""
        if not v.startswith("app"):
            raise ValueError(f"Invalid Airtable base ID: {v}. Expected: app...")
        return v


class EarningsConfig(BaseModel):
    """Earnings table layout."""

    table_name: str = "Treasury"
    max_records: int = Field(1000, ge=1, le=10000)
    identifier_field: str = "Telegram"
    amount_field: str = "Payout"
    currency_field: str = "Currency"
    paid_out_field: str = "Paid out"


class AssistantSettings(BaseModel):
    """Free-text assistant behaviour."""

    activation_phrase: str = "hey mylo"
    max_message_length: int = Field(4000, ge=100, le=4096)
    max_search_results: int = Field(5, ge=1, le=20)

    @field_validator("activation_phrase")
    @classmethod
    def validate_activation_phrase(cls, v: str) -> str:
        """Reject blank activation phrases."""
        if not v.strip():
            raise ValueError("Activation phrase cannot be empty")
        return v.strip()


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("/var/log/mylo-assistant/assistant.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: FileLoggingConfig = FileLoggingConfig()


class RuntimeConfig(BaseModel):
    """Runtime configuration."""

    max_concurrent: int = Field(5, ge=1, le=50, description="Max concurrent message processing")
    shutdown_timeout: int = Field(30, ge=1, le=300, description="Seconds to drain in-flight work")


class ChatConfig(BaseModel):
    """Chat provider configuration."""

    provider: Literal["telegram"]
    telegram: TelegramConfig | None = None


class DocumentsConfig(BaseModel):
    """Document store configuration."""

    provider: Literal["notion"]
    notion: NotionConfig | None = None


class LedgerConfig(BaseModel):
    """Ledger store configuration."""

    provider: Literal["airtable"]
    airtable: AirtableConfig | None = None
    earnings: EarningsConfig = EarningsConfig()


class AssistantConfig(BaseSettings):
    """Root configuration for the Mylo assistant."""

    chat: ChatConfig
    documents: DocumentsConfig
    ledger: LedgerConfig | None = None  # None disables earnings queries
    assistant: AssistantSettings = AssistantSettings()
    logging: LoggingConfig = LoggingConfig()
    runtime: RuntimeConfig = RuntimeConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
    )
