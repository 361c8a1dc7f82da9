"""Abstract interface for document-store integrations."""

from typing import Protocol

from ..models.document import DocumentPage


class DocumentProvider(Protocol):
    """Abstract interface for searchable document stores (Notion, etc.)."""

    async def search_pages(self, query: str) -> list[DocumentPage]:
        """
        Search pages matching the query.

        Args:
            query: Free-text search phrase

        Returns:
            Matching pages in the store's relevance order

        Raises:
            SourceUnavailableError: If the search request itself fails
        """
        ...

    async def get_page_content(self, page_id: str) -> str:
        """
        Fetch a page's content rendered as plain text.

        Args:
            page_id: Opaque page identifier (as returned by search)

        Returns:
            Page text, empty string if the page has no readable blocks

        Raises:
            SourceUnavailableError: If the request fails
        """
        ...
