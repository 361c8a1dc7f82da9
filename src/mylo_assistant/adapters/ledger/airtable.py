"""Airtable ledger adapter using the Airtable REST API over httpx.

Implements the LedgerProvider protocol: GET /v0/{base}/{table}, following
the ``offset`` cursor until ``max_records`` rows have been read.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from ...config.schema import AirtableConfig
from ...models.earnings import LedgerRecord
from ...utils.errors import SourceUnavailableError

log = structlog.get_logger()


class AirtableAdapterError(SourceUnavailableError):
    """Raised when an Airtable request fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, source="airtable")


class AirtableAdapter:
    """Airtable adapter implementing the LedgerProvider protocol.

    Example:
        adapter = AirtableAdapter(AirtableConfig(api_key="pat...", base_id="app..."))
        records = await adapter.fetch_records("Treasury", max_records=1000)
    """

    def __init__(
        self,
        config: AirtableConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Airtable adapter.

        Args:
            config: Airtable-specific configuration.
            client: HTTP client override (tests pass one with a mock transport).
        """
        self._config = config
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
        )
        self._headers = {"Authorization": f"Bearer {config.api_key}"}

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_records(
        self,
        table_name: str,
        max_records: int = 1000,
    ) -> list[LedgerRecord]:
        """Fetch up to ``max_records`` records from a table.

        Args:
            table_name: Table name or ID.
            max_records: Upper bound on records returned.

        Returns:
            Records in the table's default order.

        Raises:
            AirtableAdapterError: If any page request fails.
        """
        if not table_name.strip():
            raise AirtableAdapterError("Table name cannot be empty")

        path = f"/v0/{self._config.base_id}/{quote(table_name, safe='')}"
        records: list[LedgerRecord] = []
        offset: str | None = None

        while len(records) < max_records:
            params: dict[str, Any] = {
                "maxRecords": max_records,
                "pageSize": min(self._config.page_size, max_records - len(records)),
            }
            if offset:
                params["offset"] = offset

            data = await self._get(path, params)

            for item in data.get("records", []):
                records.append(
                    LedgerRecord(
                        id=item.get("id", ""),
                        fields=dict(item.get("fields") or {}),
                        created_time=item.get("createdTime"),
                    )
                )

            offset = data.get("offset")
            if not offset:
                break

        log.debug("airtable_fetch_complete", table=table_name, records=len(records))
        return records[:max_records]

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.get(path, params=params, headers=self._headers)
            response.raise_for_status()
            data: dict[str, Any] = response.json()
            return data
        except httpx.HTTPStatusError as e:
            log.error(
                "airtable_request_failed",
                path=path,
                status_code=e.response.status_code,
            )
            raise AirtableAdapterError(
                f"Airtable returned HTTP {e.response.status_code} for {path}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            log.error("airtable_request_failed", path=path, error=str(e))
            raise AirtableAdapterError(f"Airtable request to {path} failed: {e}") from e
