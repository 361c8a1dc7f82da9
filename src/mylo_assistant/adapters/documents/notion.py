"""Notion document adapter using the Notion REST API over httpx.

This module implements the DocumentProvider protocol for Notion:
- search_pages(): POST /v1/search restricted to pages
- get_page_content(): GET /v1/blocks/{id}/children, rendered as text

Only the fields the assistant needs are read from responses; everything
else in Notion's payloads is ignored.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import httpx
import structlog

from ...config.schema import NotionConfig
from ...models.document import DocumentPage
from ...utils.errors import SourceUnavailableError
from ...utils.security import sanitize_for_logging

log = structlog.get_logger()

# Block type -> line prefix
BLOCK_PREFIXES: dict[str, str] = {
    "paragraph": "",
    "heading_1": "# ",
    "heading_2": "## ",
    "heading_3": "### ",
    "bulleted_list_item": "• ",
    "numbered_list_item": "1. ",
}


class NotionAdapterError(SourceUnavailableError):
    """Raised when a Notion request fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, source="notion")


def _plain_text(rich_text: list[dict[str, Any]] | None) -> str:
    return "".join(part.get("plain_text", "") for part in rich_text or [])


def page_title(page: dict[str, Any]) -> str:
    """Return the text of a page's title property, "Untitled" if none."""
    for prop in (page.get("properties") or {}).values():
        if isinstance(prop, dict) and prop.get("type") == "title" and prop.get("title"):
            return _plain_text(prop["title"])
    return "Untitled"


def format_block(block: dict[str, Any]) -> str:
    """Render a single Notion block as a line of text.

    Blocks without rich text (images, dividers, ...) render as "".
    """
    block_type = block.get("type", "")
    data = block.get(block_type)
    if not isinstance(data, dict) or "rich_text" not in data:
        return ""
    return BLOCK_PREFIXES.get(block_type, "") + _plain_text(data["rich_text"])


def _parse_timestamp(value: str | None) -> datetime:
    if not value:
        return datetime.fromtimestamp(0, tz=UTC)
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return datetime.fromtimestamp(0, tz=UTC)


class NotionAdapter:
    """Notion adapter implementing the DocumentProvider protocol.

    Example:
        adapter = NotionAdapter(NotionConfig(token="secret_..."))
        pages = await adapter.search_pages("project proposals")
    """

    def __init__(
        self,
        config: NotionConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Notion adapter.

        Args:
            config: Notion-specific configuration.
            client: HTTP client override (tests pass one with a mock transport).
        """
        self._config = config
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
        )
        self._headers = {
            "Authorization": f"Bearer {config.token}",
            "Notion-Version": config.api_version,
            "Content-Type": "application/json",
        }

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, headers=self._headers, **kwargs)
            response.raise_for_status()
            data: dict[str, Any] = response.json()
            return data
        except httpx.HTTPStatusError as e:
            log.error(
                "notion_request_failed",
                path=path,
                status_code=e.response.status_code,
            )
            raise NotionAdapterError(
                f"Notion returned HTTP {e.response.status_code} for {path}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            log.error("notion_request_failed", path=path, error=str(e))
            raise NotionAdapterError(f"Notion request to {path} failed: {e}") from e

    async def search_pages(self, query: str) -> list[DocumentPage]:
        """Search Notion pages.

        Args:
            query: Search phrase.

        Returns:
            Pages in Notion's relevance order.

        Raises:
            NotionAdapterError: If the request fails.
        """
        if not query.strip():
            return []

        data = await self._request(
            "POST",
            "/v1/search",
            json={"query": query, "filter": {"property": "object", "value": "page"}},
        )

        pages = [
            DocumentPage(
                id=item.get("id", ""),
                title=page_title(item),
                url=item.get("url", ""),
                last_edited_at=_parse_timestamp(item.get("last_edited_time")),
            )
            for item in data.get("results", [])
        ]
        log.debug(
            "notion_search_complete",
            query=sanitize_for_logging(query),
            results=len(pages),
        )
        return pages

    async def get_page_content(self, page_id: str) -> str:
        """Fetch the first-level blocks of a page and render them as text.

        Args:
            page_id: Notion page ID.

        Returns:
            Rendered page text, "" if the page has no readable blocks.

        Raises:
            NotionAdapterError: If a request fails.
        """
        lines: list[str] = []
        cursor: str | None = None

        while True:
            params: dict[str, Any] = {"page_size": 100}
            if cursor:
                params["start_cursor"] = cursor

            data = await self._request("GET", f"/v1/blocks/{page_id}/children", params=params)

            for block in data.get("results", []):
                text = format_block(block)
                if text.strip():
                    lines.append(text)

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break

        return "\n".join(lines).strip()
