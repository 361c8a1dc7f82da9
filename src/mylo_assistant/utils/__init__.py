"""Utility functions and helpers.

- errors: Exception hierarchy shared by the pipeline and adapters
- security: Secret redaction for logs
- logging: Structured logging with secret sanitization
"""

from mylo_assistant.utils.errors import (
    AssistantError,
    ConfigurationError,
    SourceUnavailableError,
)
from mylo_assistant.utils.logging import (
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from mylo_assistant.utils.security import (
    RedactionError,
    SecretRedactor,
    SecurityError,
)

__all__ = [
    # Errors
    "AssistantError",
    "ConfigurationError",
    # Logging
    "LogFormat",
    "LogLevel",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
    "SourceUnavailableError",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
]
