"""Data models for ledger records and earnings results."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

USDC = "USDC"
TOKEN = "TOKEN"


class ErrorKind(Enum):
    """Failure kinds an earnings query can report."""

    SOURCE_UNAVAILABLE = "source_unavailable"
    MISSING_IDENTIFIER = "missing_identifier"


@dataclass(frozen=True)
class LedgerRecord:
    """A raw record from the ledger store (one spreadsheet row)."""

    id: str
    fields: dict[str, Any]
    created_time: str | None = None


@dataclass(frozen=True)
class EarningsRecord:
    """The four ledger columns the earnings engine reads.

    Values are kept exactly as the ledger returned them; they may be
    strings, numbers, lists or missing altogether.
    """

    identifier: Any
    amount: Any
    currency: Any
    paid_out: Any

    @classmethod
    def from_ledger_record(
        cls,
        record: LedgerRecord,
        identifier_field: str,
        amount_field: str,
        currency_field: str,
        paid_out_field: str,
    ) -> "EarningsRecord":
        """Pick the earnings columns out of a raw ledger record."""
        return cls(
            identifier=record.fields.get(identifier_field),
            amount=record.fields.get(amount_field),
            currency=record.fields.get(currency_field),
            paid_out=record.fields.get(paid_out_field),
        )


def _empty_buckets() -> dict[str, Decimal]:
    return {USDC: Decimal("0.00"), TOKEN: Decimal("0.00")}


@dataclass(frozen=True)
class EarningsResult:
    """Totals for one earnings query."""

    amount_by_currency: dict[str, Decimal] = field(default_factory=_empty_buckets)
    matched_record_count: int = 0
    month: str | None = None
    failure: ErrorKind | None = None

    @property
    def usdc_total(self) -> Decimal:
        return self.amount_by_currency.get(USDC, Decimal("0.00"))

    @property
    def token_total(self) -> Decimal:
        return self.amount_by_currency.get(TOKEN, Decimal("0.00"))

    @property
    def has_payouts(self) -> bool:
        """True if any bucket holds a nonzero total."""
        return any(amount != 0 for amount in self.amount_by_currency.values())
