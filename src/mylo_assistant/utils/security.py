"""Secret redaction for log output and echoed text.

Tokens for every service the assistant talks to (Telegram, Notion,
Airtable) are matched by pattern and replaced before anything is written
to a log. Redaction fails closed: a pattern error raises rather than
letting the original text through.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Sequence

log = structlog.get_logger()


class SecurityError(Exception):
    """Base exception for security-related errors."""


class RedactionError(SecurityError):
    """Raised when secret redaction fails."""


class SecretRedactor:
    """Detects and redacts secrets from text.

    Usage:
        redactor = SecretRedactor()
        safe_text = redactor.redact(potentially_sensitive_text)

    Attributes:
        patterns: List of compiled regex patterns to detect secrets.
        placeholder: The string to replace secrets with (default: "[REDACTED]").
    """

    DEFAULT_PATTERNS: tuple[tuple[str, str], ...] = (
        (
            r"(?i)(api[_-]?key|secret|token|password|credential)\s*[=:]\s*[\"']?[\w-]{16,}",
            "Generic secret",
        ),
        (r"(?i)bearer\s+[\w.-]{16,}", "Bearer credential"),
        # Telegram bot token: <bot id>:<35 char secret>
        (r"\b\d{6,12}:[A-Za-z0-9_-]{30,}", "Telegram bot token"),
        # Telegram API URLs embed the token in the path
        (r"api\.telegram\.org/(?:file/)?bot[^/\s]+", "Telegram API URL"),
        (r"secret_[A-Za-z0-9]{32,}", "Notion integration token"),
        (r"ntn_[A-Za-z0-9]{32,}", "Notion API token"),
        (r"pat[A-Za-z0-9]{14}\.[a-f0-9]{64}", "Airtable personal access token"),
        (r"\bkey[A-Za-z0-9]{14}\b", "Airtable legacy API key"),
        (
            r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*",
            "JWT token",
        ),
    )

    def __init__(
        self,
        placeholder: str = "[REDACTED]",
        custom_patterns: Sequence[tuple[str, str]] | None = None,
    ) -> None:
        """Initialize the SecretRedactor.

        Args:
            placeholder: String to replace detected secrets with.
            custom_patterns: Additional (pattern, name) tuples to detect.

        Raises:
            RedactionError: If any pattern fails to compile.
        """
        self.placeholder = placeholder
        self._pattern_names: dict[re.Pattern[str], str] = {}

        all_patterns = list(self.DEFAULT_PATTERNS)
        if custom_patterns:
            all_patterns.extend(custom_patterns)

        for pattern_str, name in all_patterns:
            try:
                compiled = re.compile(pattern_str)
            except re.error as e:
                log.error("pattern_compilation_failed", pattern=pattern_str, error=str(e))
                raise RedactionError(
                    f"Failed to compile secret pattern '{pattern_str}': {e}"
                ) from e
            self._pattern_names[compiled] = name

    @property
    def patterns(self) -> list[re.Pattern[str]]:
        """Return the list of compiled patterns."""
        return list(self._pattern_names.keys())

    def redact(self, text: str) -> str:
        """Redact all secrets from the given text.

        Args:
            text: The text to scan and redact secrets from.

        Returns:
            The text with all detected secrets replaced with placeholder.

        Raises:
            RedactionError: If redaction fails for any reason.
        """
        if not text:
            return text

        try:
            result = text
            for pattern in self._pattern_names:
                result = pattern.sub(self.placeholder, result)
            return result
        except Exception as e:
            log.error("redaction_failed", error=str(e))
            raise RedactionError(f"Redaction failed: {e}") from e

    def scan(self, text: str) -> list[tuple[str, str]]:
        """Scan text for secrets without redacting.

        Returns:
            List of (pattern_name, preview) tuples. The preview shows only
            the first and last few characters of each match.
        """
        if not text:
            return []

        findings: list[tuple[str, str]] = []
        for pattern, name in self._pattern_names.items():
            for match in pattern.finditer(text):
                matched = match.group()
                preview = f"{matched[:4]}...{matched[-4:]}" if len(matched) > 10 else "***"
                findings.append((name, preview))
        return findings

    def has_secrets(self, text: str) -> bool:
        """Return True if text contains any recognizable secret."""
        if not text:
            return False
        return any(pattern.search(text) for pattern in self._pattern_names)


def sanitize_for_logging(text: str) -> str:
    """Remove ANSI escape codes and control characters from text.

    Chat text is user-controlled; this keeps it from forging log lines or
    corrupting terminal output.

    Args:
        text: The text to sanitize.

    Returns:
        The text with ANSI codes and control characters removed.
    """
    if not text:
        return text

    text = re.sub(r"\x1b\[[0-9;]*m", "", text)
    # Keep newline, tab and carriage return
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)
