"""
Export service for ledger data.

Produces the two backup formats:
- a JSON envelope (ExportData) with every entry, the settings record and
  the custom categories
- a CSV sheet of entries, one row per entry

Both only read from the stores.
"""

import csv
import io
from enum import Enum
from typing import Iterable, Optional

from spendful.audit import AuditLogger
from spendful.dates import SYSTEM_CLOCK, Clock
from spendful.ledger.account import AccountStore
from spendful.ledger.categories import CategoryStore
from spendful.ledger.entries import EntryStore
from spendful.models.audit import LedgerEventBuilder
from spendful.models.ledger import SpendEntry, normalize_category
from spendful.models.reports import ExportData


CSV_HEADERS = ["Date", "Amount", "Currency", "Category", "Note", "Created At"]


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    JSON = "json"


def convert_to_csv(entries: Iterable[SpendEntry], default_currency: str = "USD") -> str:
    """
    Render entries as CSV text.

    Every data cell is wrapped in double quotes, with embedded quotes
    doubled. Rows are separated by a bare newline and there is no
    trailing newline.

    Args:
        entries: Entries in the order they should appear
        default_currency: Shown for entries without their own currency
    """
    buffer = io.StringIO()

    header = csv.writer(buffer, lineterminator="\n")
    header.writerow(CSV_HEADERS)

    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for entry in entries:
        writer.writerow(
            [
                entry.date.isoformat(),
                str(entry.amount),
                entry.resolved_currency(default_currency),
                normalize_category(entry.category),
                entry.note or "",
                entry.created_at.isoformat(),
            ]
        )

    return buffer.getvalue().rstrip("\n")


class ExportService:
    """Service for exporting ledger data to backup formats."""

    def __init__(
        self,
        entries: EntryStore,
        account: AccountStore,
        categories: CategoryStore,
        audit: Optional[AuditLogger] = None,
        clock: Optional[Clock] = None,
    ):
        self._entries = entries
        self._account = account
        self._categories = categories
        self._audit = audit or AuditLogger()
        self._clock = clock or SYSTEM_CLOCK

    async def export_all_data(self) -> ExportData:
        """
        Collect the full backup envelope.

        Entries are ordered by date, newest first.
        """
        entries = await self._entries.all_entries()
        settings = await self._account.get_settings()
        custom = await self._categories.list_custom()

        data = ExportData(
            exported_at=self._clock.now(),
            entries=sorted(entries, key=lambda e: e.date, reverse=True),
            settings=settings,
            custom_categories=custom,
        )

        await self._audit.log(
            LedgerEventBuilder.data_exported(len(data.entries), ExportFormat.JSON.value)
        )
        return data

    async def export_csv(self) -> str:
        """All entries, newest date first, as CSV text."""
        entries = await self._entries.all_entries()
        settings = await self._account.get_settings()

        content = convert_to_csv(
            sorted(entries, key=lambda e: e.date, reverse=True),
            settings.default_currency,
        )

        await self._audit.log(
            LedgerEventBuilder.data_exported(len(entries), ExportFormat.CSV.value)
        )
        return content
