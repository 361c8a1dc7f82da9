"""Exception hierarchy shared by the pipeline and the adapters.

Only a failed fetch from the ledger or the document store is raised as an
error (SourceUnavailableError). "Nothing matched", "empty table" and "no
rows for that month" are regular, empty results rather than exceptions.
"""

from __future__ import annotations


class AssistantError(Exception):
    """Base exception for all assistant errors."""


class SourceUnavailableError(AssistantError):
    """An external collaborator (ledger or document store) could not be reached.

    Attributes:
        source: Short name of the failing collaborator (e.g. "airtable").
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class ConfigurationError(AssistantError, ValueError):
    """The assistant was wired with an incomplete configuration."""
