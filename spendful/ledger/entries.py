"""
Entry Store

CRUD over SpendEntry records. The whole collection lives under one key;
every mutation loads it, changes it and writes it back in one step, inside
the ledger's mutation queue. There is no index: lookups are linear scans
over a collection that stays small (one person's daily spending).

The legacy migration runs lazily before the first access.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from spendful.audit import AuditLogger
from spendful.dates import Clock, DayLike, as_day
from spendful.ledger.base import LedgerStoreBase, MutationQueue
from spendful.ledger.keys import StorageKeys
from spendful.ledger.migration import SchemaMigrator
from spendful.models.audit import LedgerEventBuilder
from spendful.models.ledger import DayData, SpendEntry
from spendful.services.storage import KeyValueStoreInterface
from spendful.validation import EntryValidator, coerce_amount


AmountLike = Union[Decimal, int, float, str]


def newest_first(entries: list[SpendEntry]) -> list[SpendEntry]:
    return sorted(entries, key=lambda e: e.timestamp, reverse=True)


class EntryStore(LedgerStoreBase):
    """Owns the collection of SpendEntry records."""

    def __init__(
        self,
        kv: KeyValueStoreInterface,
        queue: Optional[MutationQueue] = None,
        audit: Optional[AuditLogger] = None,
        clock: Optional[Clock] = None,
        migrator: Optional[SchemaMigrator] = None,
        validator: Optional[EntryValidator] = None,
    ):
        super().__init__(kv, queue=queue, audit=audit, clock=clock)
        self._migrator = migrator or SchemaMigrator(
            kv, queue=self._queue, audit=self._audit, clock=self._clock
        )
        self._validator = validator or EntryValidator(clock=self._clock)

    async def _load(self) -> list[SpendEntry]:
        return await self._load_records(StorageKeys.SPEND_ENTRIES, SpendEntry)

    async def _save(self, entries: list[SpendEntry]) -> None:
        await self._save_records(StorageKeys.SPEND_ENTRIES, entries)

    async def all_entries(self) -> list[SpendEntry]:
        """Every entry, in storage order. Empty on an unreadable store."""
        await self._migrator.ensure_migrated()
        return await self._load()

    async def get_entry(self, entry_id: str) -> Optional[SpendEntry]:
        for entry in await self.all_entries():
            if entry.entry_id == entry_id:
                return entry
        return None

    async def add_entry(
        self,
        day: DayLike,
        amount: AmountLike,
        category: Optional[str] = None,
        note: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> SpendEntry:
        """
        Record a new spend on `day`.

        Raises:
            EntryValidationError: If the amount is missing or not positive
            StorageWriteError: If the collection could not be written
        """
        day = as_day(day)
        # Warnings never block the write; they travel with the audit event
        result = self._validator.check(amount, currency=currency, day=day)
        value = coerce_amount(amount)
        await self._migrator.ensure_migrated()

        async with self._queue.mutation():
            entries = await self._load()
            now = self._clock.now()
            entry = SpendEntry(
                date=day,
                amount=value,
                category=category,
                currency=currency,
                note=note,
                timestamp=now,
                created_at=now,
                updated_at=now,
            )
            entries.append(entry)
            await self._save(entries)

        await self._audit.log(
            LedgerEventBuilder.entry_added(
                entry.entry_id, day.isoformat(), str(value), warnings=result.warnings
            )
        )
        return entry

    async def update_entry(
        self,
        entry_id: str,
        amount: AmountLike,
        category: Optional[str] = None,
        note: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> Optional[SpendEntry]:
        """
        Replace an entry's mutable fields.

        `entry_id`, `date`, `timestamp` and `created_at` are kept; omitted
        optional fields are cleared (category falls back to 'Uncategorized').

        Returns:
            The updated entry, or None if no entry has this id
        """
        value = self._validator.ensure_valid(amount, currency=currency)
        await self._migrator.ensure_migrated()

        async with self._queue.mutation():
            entries = await self._load()
            for index, entry in enumerate(entries):
                if entry.entry_id == entry_id:
                    break
            else:
                return None

            updated = SpendEntry.model_validate({
                **entry.model_dump(),
                "amount": value,
                "category": category,
                "note": note,
                "currency": currency,
                "updated_at": self._clock.now(),
            })
            entries[index] = updated
            await self._save(entries)

        await self._audit.log(LedgerEventBuilder.entry_updated(entry_id, str(value)))
        return updated

    async def delete_entry(self, entry_id: str) -> bool:
        """Remove an entry. Returns False if no entry has this id."""
        await self._migrator.ensure_migrated()

        async with self._queue.mutation():
            entries = await self._load()
            remaining = [e for e in entries if e.entry_id != entry_id]
            if len(remaining) == len(entries):
                return False
            await self._save(remaining)

        await self._audit.log(LedgerEventBuilder.entry_deleted(entry_id))
        return True

    async def entries_for_date(self, day: DayLike) -> list[SpendEntry]:
        """Entries on one day, most recent first."""
        day = as_day(day)
        return newest_first([e for e in await self.all_entries() if e.date == day])

    async def entries_for_range(
        self,
        start_date: DayLike,
        end_date: DayLike,
    ) -> list[SpendEntry]:
        """Entries with start_date <= date <= end_date, most recent first."""
        start, end = as_day(start_date), as_day(end_date)
        return newest_first(
            [e for e in await self.all_entries() if start <= e.date <= end]
        )

    async def day_data(self, day: DayLike) -> DayData:
        day = as_day(day)
        return DayData.from_entries(day, await self.entries_for_date(day))

    async def day_data_for_range(
        self,
        start_date: DayLike,
        end_date: DayLike,
    ) -> dict[date, DayData]:
        """Per-day data for the days in range that have entries, in date order."""
        grouped: dict[date, list[SpendEntry]] = {}
        for entry in await self.entries_for_range(start_date, end_date):
            grouped.setdefault(entry.date, []).append(entry)
        return {
            day: DayData.from_entries(day, grouped[day])
            for day in sorted(grouped)
        }
