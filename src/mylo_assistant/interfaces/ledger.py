"""Abstract interface for ledger (tabular record store) integrations."""

from typing import Protocol

from ..models.earnings import LedgerRecord


class LedgerProvider(Protocol):
    """Abstract interface for tabular record stores (Airtable, etc.)."""

    async def fetch_records(
        self,
        table_name: str,
        max_records: int = 1000,
    ) -> list[LedgerRecord]:
        """
        Fetch records from a table.

        Args:
            table_name: Name or ID of the table
            max_records: Upper bound on the number of records returned

        Returns:
            Records in the store's default order; empty list for an empty table

        Raises:
            SourceUnavailableError: If the fetch itself fails
        """
        ...
