"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    AirtableConfig,
    AssistantConfig,
    AssistantSettings,
    ChatConfig,
    DocumentsConfig,
    EarningsConfig,
    LedgerConfig,
    NotionConfig,
    TelegramConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "AssistantConfig",
    # Top-level configs
    "AssistantSettings",
    "ChatConfig",
    "DocumentsConfig",
    "LedgerConfig",
    "EarningsConfig",
    # Provider-specific configs
    "TelegramConfig",
    "NotionConfig",
    "AirtableConfig",
]
