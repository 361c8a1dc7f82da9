"""Earnings aggregation over ledger records.

This module implements the EarningsEngine class that answers "what have I
earned" queries:
1. Normalize the sender handle (drop a leading "@", compare case-insensitively)
2. Fetch the ledger table (bounded)
3. Keep rows whose identifier column equals the handle
4. Optionally keep rows whose "paid out" label mentions the month
5. Parse each payout and bucket it by currency (USDC / TOKEN)
6. Round each bucket to cents

Only a failed fetch is reported as a failure. An empty table, an unknown
handle or a month with no payouts all produce a zero-valued result.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any

import structlog

from mylo_assistant.config.schema import EarningsConfig
from mylo_assistant.core.amounts import ZERO, parse_amount
from mylo_assistant.models.earnings import (
    TOKEN,
    USDC,
    EarningsRecord,
    EarningsResult,
    ErrorKind,
)
from mylo_assistant.utils.errors import SourceUnavailableError

if TYPE_CHECKING:
    from mylo_assistant.interfaces.ledger import LedgerProvider

log = structlog.get_logger()

CENTS = Decimal("0.01")

# Currency column value -> bucket
CURRENCY_BUCKETS: dict[str, str] = {
    "USDC": USDC,
    "TOKEN": TOKEN,
    "TOKENS": TOKEN,
}


def normalize_handle(handle: str) -> str:
    """Strip one leading "@" and lower-case a chat handle."""
    handle = handle.strip()
    if handle.startswith("@"):
        handle = handle[1:]
    return handle.lower()


def _flatten(value: Any) -> str:
    """Render a cell as text, joining list cells with commas."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


class EarningsEngine:
    """Computes per-currency earnings totals for a chat handle.

    Example:
        engine = EarningsEngine(airtable_adapter, EarningsConfig())
        result = await engine.compute_earnings("@alice", month="may")
        print(result.usdc_total, result.matched_record_count)
    """

    def __init__(
        self,
        ledger: LedgerProvider,
        config: EarningsConfig | None = None,
    ) -> None:
        """Initialize the EarningsEngine.

        Args:
            ledger: Ledger provider to read payout records from
            config: Table name, fetch bound and column names
        """
        self._ledger = ledger
        self._config = config or EarningsConfig()

    async def compute_earnings(
        self,
        identifier_handle: str,
        month: str | None = None,
    ) -> EarningsResult:
        """Aggregate earnings for a handle, optionally for one month.

        Args:
            identifier_handle: Sender handle, with or without a leading "@"
            month: Month name to filter "paid out" labels by, None for all time

        Returns:
            EarningsResult; ``failure`` is set only for a missing handle or an
            unreachable ledger.
        """
        handle = normalize_handle(identifier_handle or "")
        if not handle:
            return EarningsResult(month=month, failure=ErrorKind.MISSING_IDENTIFIER)

        try:
            raw_records = await self._ledger.fetch_records(
                self._config.table_name,
                max_records=self._config.max_records,
            )
        except SourceUnavailableError as e:
            log.warning(
                "ledger_fetch_failed",
                table=self._config.table_name,
                error=str(e),
            )
            return EarningsResult(month=month, failure=ErrorKind.SOURCE_UNAVAILABLE)

        records = [
            EarningsRecord.from_ledger_record(
                record,
                identifier_field=self._config.identifier_field,
                amount_field=self._config.amount_field,
                currency_field=self._config.currency_field,
                paid_out_field=self._config.paid_out_field,
            )
            for record in raw_records
        ]

        matched = self.filter_by_identifier(records, handle)
        if month:
            matched = self.filter_by_month(matched, month)

        totals = self.sum_by_currency(matched)

        log.info(
            "earnings_computed",
            fetched=len(records),
            matched=len(matched),
            month=month,
        )

        return EarningsResult(
            amount_by_currency=totals,
            matched_record_count=len(matched),
            month=month,
        )

    @staticmethod
    def filter_by_identifier(
        records: Iterable[EarningsRecord],
        handle: str,
    ) -> list[EarningsRecord]:
        """Keep records whose identifier column equals ``handle``.

        Args:
            records: Records to filter
            handle: Normalized handle (see normalize_handle)

        Returns:
            Matching records, in input order
        """
        wanted = normalize_handle(handle)
        return [
            record
            for record in records
            if record.identifier and normalize_handle(_flatten(record.identifier)) == wanted
        ]

    @staticmethod
    def filter_by_month(
        records: Iterable[EarningsRecord],
        month: str,
    ) -> list[EarningsRecord]:
        """Keep records whose "paid out" label mentions ``month``.

        This is a substring test, not a date parse, so labels such as
        "May 25", "May 2025" or "may batch" all match "may".
        """
        needle = month.strip().lower()
        return [
            record
            for record in records
            if record.paid_out and needle in _flatten(record.paid_out).lower()
        ]

    @staticmethod
    def sum_by_currency(records: Iterable[EarningsRecord]) -> dict[str, Decimal]:
        """Sum positive payouts into the USDC and TOKEN buckets.

        Payouts in any other currency, and rows without a currency, are
        skipped.

        Returns:
            Bucket totals rounded half away from zero to two decimals
        """
        totals: dict[str, Decimal] = {USDC: ZERO, TOKEN: ZERO}

        for record in records:
            currency = _flatten(record.currency).strip().upper()
            bucket = CURRENCY_BUCKETS.get(currency)
            if bucket is None:
                continue

            amount = parse_amount(record.amount)
            if amount > 0:
                totals[bucket] += amount

        return {
            bucket: amount.quantize(CENTS, rounding=ROUND_HALF_UP)
            for bucket, amount in totals.items()
        }
