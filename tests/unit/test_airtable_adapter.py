"""Tests for the Airtable ledger adapter."""

from collections.abc import Callable

import httpx
import pytest

from mylo_assistant.adapters.ledger.airtable import AirtableAdapter, AirtableAdapterError
from mylo_assistant.config.schema import AirtableConfig
from mylo_assistant.utils.errors import SourceUnavailableError

Handler = Callable[[httpx.Request], httpx.Response]

API_KEY = "patFAKEtest0123456.0123456789abcdef"


def make_adapter(handler: Handler, page_size: int = 100) -> AirtableAdapter:
    config = AirtableConfig(api_key=API_KEY, base_id="appTEST123", page_size=page_size)
    client = httpx.AsyncClient(base_url=config.base_url, transport=httpx.MockTransport(handler))
    return AirtableAdapter(config, client=client)


def airtable_record(index: int) -> dict:
    return {
        "id": f"rec{index}",
        "createdTime": "2025-05-01T00:00:00.000Z",
        "fields": {"Telegram": "@bob", "Payout": str(index), "Currency": "USDC"},
    }


class TestFetchRecords:
    """Test table fetching."""

    async def test_single_page(self) -> None:
        """Test the request shape and the mapping to LedgerRecord."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"records": [airtable_record(1), airtable_record(2)]})

        records = await make_adapter(handler).fetch_records("Treasury", max_records=1000)

        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/v0/appTEST123/Treasury"
        assert request.url.params["maxRecords"] == "1000"
        assert request.url.params["pageSize"] == "100"
        assert request.headers["Authorization"] == f"Bearer {API_KEY}"

        assert [r.id for r in records] == ["rec1", "rec2"]
        assert records[0].fields["Payout"] == "1"
        assert records[0].created_time == "2025-05-01T00:00:00.000Z"

    async def test_follows_offset(self) -> None:
        """Test pagination continues until no offset is returned."""
        offsets: list[str | None] = []

        def handler(request: httpx.Request) -> httpx.Response:
            offset = request.url.params.get("offset")
            offsets.append(offset)
            if offset is None:
                return httpx.Response(
                    200, json={"records": [airtable_record(1), airtable_record(2)], "offset": "o2"}
                )
            return httpx.Response(200, json={"records": [airtable_record(3)]})

        records = await make_adapter(handler, page_size=2).fetch_records("Treasury")

        assert offsets == [None, "o2"]
        assert [r.id for r in records] == ["rec1", "rec2", "rec3"]

    async def test_stops_at_max_records(self) -> None:
        """Test the fetch is bounded even if more pages exist."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            size = int(request.url.params["pageSize"])
            start = (calls - 1) * 2
            return httpx.Response(
                200,
                json={
                    "records": [airtable_record(start + i) for i in range(size)],
                    "offset": f"o{calls}",
                },
            )

        records = await make_adapter(handler, page_size=2).fetch_records("Treasury", max_records=3)

        assert len(records) == 3
        assert calls == 2

    async def test_empty_table(self) -> None:
        """Test an empty table is an empty list, not an error."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"records": []})

        assert await make_adapter(handler).fetch_records("Treasury") == []

    async def test_http_error_wrapped(self) -> None:
        """Test HTTP failures surface as SourceUnavailableError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"error": "unavailable"})

        with pytest.raises(AirtableAdapterError, match="HTTP 503") as exc_info:
            await make_adapter(handler).fetch_records("Treasury")

        assert isinstance(exc_info.value, SourceUnavailableError)
        assert exc_info.value.source == "airtable"

    async def test_timeout_wrapped(self) -> None:
        """Test timeouts surface as SourceUnavailableError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(SourceUnavailableError):
            await make_adapter(handler).fetch_records("Treasury")

    async def test_blank_table_name(self) -> None:
        """Test an empty table name is rejected before any request."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(AirtableAdapterError):
            await make_adapter(handler).fetch_records("  ")
