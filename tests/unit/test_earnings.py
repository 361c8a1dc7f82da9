"""Tests for EarningsEngine functionality."""

from decimal import Decimal

from conftest import FakeLedger, ledger_row

from mylo_assistant.config.schema import EarningsConfig
from mylo_assistant.core.earnings import EarningsEngine, normalize_handle
from mylo_assistant.models.earnings import TOKEN, USDC, EarningsRecord, ErrorKind, LedgerRecord
from mylo_assistant.utils.errors import SourceUnavailableError


class TestComputeEarnings:
    """Test the full aggregation."""

    async def test_month_query(self, bob_ledger: FakeLedger) -> None:
        """Test only the May payout is counted for a May query."""
        result = await EarningsEngine(bob_ledger).compute_earnings("bob", month="may")

        assert result.failure is None
        assert result.month == "may"
        assert result.matched_record_count == 1
        assert result.amount_by_currency[USDC] == Decimal("100.00")
        assert result.amount_by_currency[TOKEN] == Decimal("0")

    async def test_all_time_query(self, bob_ledger: FakeLedger) -> None:
        """Test every matching row is counted without a month."""
        result = await EarningsEngine(bob_ledger).compute_earnings("@bob")

        assert result.matched_record_count == 2
        assert result.usdc_total == Decimal("100.00")
        assert result.token_total == Decimal("50.00")
        assert result.has_payouts is True

    async def test_idempotent(self, bob_ledger: FakeLedger) -> None:
        """Test repeated queries over the same records agree."""
        engine = EarningsEngine(bob_ledger)

        first = await engine.compute_earnings("bob", month="june")
        second = await engine.compute_earnings("bob", month="june")

        assert first == second

    async def test_identifier_case_and_at_insensitive(self) -> None:
        """Test "@Alice" in the ledger matches a query for "alice"."""
        ledger = FakeLedger([ledger_row("@Alice", "10", "USDC")])

        result = await EarningsEngine(ledger).compute_earnings("alice")

        assert result.matched_record_count == 1
        assert result.usdc_total == Decimal("10.00")

    async def test_unknown_handle_is_empty_not_error(self, bob_ledger: FakeLedger) -> None:
        """Test no matching rows gives a zero result."""
        result = await EarningsEngine(bob_ledger).compute_earnings("carol")

        assert result.failure is None
        assert result.matched_record_count == 0
        assert result.has_payouts is False

    async def test_empty_table(self) -> None:
        """Test an empty table is a valid, empty result."""
        result = await EarningsEngine(FakeLedger()).compute_earnings("bob")

        assert result.failure is None
        assert result.matched_record_count == 0
        assert result.amount_by_currency == {USDC: Decimal("0"), TOKEN: Decimal("0")}

    async def test_month_is_substring_match(self) -> None:
        """Test the paid out label is matched by substring."""
        ledger = FakeLedger(
            [
                ledger_row("bob", "5", "USDC", "May 2025 batch"),
                ledger_row("bob", "7", "USDC", "April 2025"),
                ledger_row("bob", "9", "USDC"),
            ]
        )

        result = await EarningsEngine(ledger).compute_earnings("bob", month="may")

        assert result.matched_record_count == 1
        assert result.usdc_total == Decimal("5.00")

    async def test_source_unavailable(self) -> None:
        """Test a failed fetch is reported, not raised."""
        ledger = FakeLedger(error=SourceUnavailableError("timeout", source="airtable"))

        result = await EarningsEngine(ledger).compute_earnings("bob", month="may")

        assert result.failure is ErrorKind.SOURCE_UNAVAILABLE
        assert result.month == "may"
        assert result.matched_record_count == 0

    async def test_missing_handle_skips_fetch(self) -> None:
        """Test an empty handle never reaches the ledger."""
        ledger = FakeLedger([ledger_row("bob", "5", "USDC")])

        result = await EarningsEngine(ledger).compute_earnings("  @ ")

        assert result.failure is ErrorKind.MISSING_IDENTIFIER
        assert ledger.calls == []

    async def test_config_drives_table_and_columns(self) -> None:
        """Test table name, bound and column names come from config."""
        config = EarningsConfig(
            table_name="Payouts",
            max_records=10,
            identifier_field="Handle",
            amount_field="Amount",
        )
        ledger = FakeLedger(
            [
                LedgerRecord(
                    id="rec1",
                    fields={"Handle": "bob", "Amount": "3", "Payout": "99", "Currency": "USDC"},
                ),
            ]
        )

        result = await EarningsEngine(ledger, config).compute_earnings("bob")

        assert ledger.calls == [("Payouts", 10)]
        assert result.usdc_total == Decimal("3.00")

    async def test_list_valued_cells(self) -> None:
        """Test lookup and multi-select cells are flattened."""
        ledger = FakeLedger([ledger_row(["@bob"], ["12"], ["USDC"], ["May 2025"])])

        result = await EarningsEngine(ledger).compute_earnings("bob", month="may")

        assert result.matched_record_count == 1
        assert result.usdc_total == Decimal("12.00")


class TestSumByCurrency:
    """Test currency bucketing and rounding."""

    def test_skips_negative_unknown_and_unparsable(self) -> None:
        """Test only positive USDC/TOKEN amounts are summed."""
        records = [
            EarningsRecord("bob", "-5", "USDC", None),
            EarningsRecord("bob", "10", "EUR", None),
            EarningsRecord("bob", "abc", "USDC", None),
            EarningsRecord("bob", "8", None, None),
            EarningsRecord("bob", "3.333", " tokens ", None),
        ]

        totals = EarningsEngine.sum_by_currency(records)

        assert totals == {USDC: Decimal("0.00"), TOKEN: Decimal("3.33")}

    def test_rounds_half_away_from_zero(self) -> None:
        """Test bucket totals round half up to cents."""
        records = [
            EarningsRecord("bob", "0.125", "USDC", None),
            EarningsRecord("bob", "0.005", "token", None),
        ]

        totals = EarningsEngine.sum_by_currency(records)

        assert str(totals[USDC]) == "0.13"
        assert str(totals[TOKEN]) == "0.01"

    def test_sums_across_rows(self) -> None:
        """Test several rows accumulate into one bucket."""
        records = [EarningsRecord("bob", "$1,000", "USDC", None) for _ in range(3)]

        assert EarningsEngine.sum_by_currency(records)[USDC] == Decimal("3000.00")


class TestNormalizeHandle:
    """Test handle normalization."""

    def test_strips_single_at_and_lowercases(self) -> None:
        """Test one leading @ is removed."""
        assert normalize_handle(" @Bob ") == "bob"
        assert normalize_handle("@@bob") == "@bob"
