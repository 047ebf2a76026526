"""
Recurring Entry Engine

Templates (RecurringEntry) spawn concrete SpendEntry rows on a weekly,
biweekly or monthly schedule.

Catch-up: when the app hasn't been opened for several periods, one pass
generates every missed occurrence, oldest first, exactly once each. After
each occurrence the template's `last_generated_date` is persisted, so an
interrupted pass resumes where it stopped.

The pass runs at most once per calendar day per session. The "last
checked" day is a field on LedgerSession rather than hidden module state,
so tests can reset it.

Monthly series keep the start date's day-of-month and clamp to the end of
shorter months (see spendful.dates.add_months).
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Union

import structlog
from pydantic import BaseModel

from spendful.audit import AuditLogger
from spendful.dates import SYSTEM_CLOCK, Clock, DayLike, add_months, as_day
from spendful.ledger.base import LedgerStoreBase, MutationQueue
from spendful.ledger.entries import EntryStore
from spendful.ledger.keys import StorageKeys
from spendful.models.audit import LedgerEventBuilder, LedgerEventType
from spendful.models.ledger import (
    Frequency,
    RecurringEntry,
    RecurringPatch,
    RecurringStatus,
)
from spendful.services.storage import KeyValueStoreInterface
from spendful.validation import EntryValidationError, EntryValidator


logger = structlog.get_logger(__name__)


class LedgerSession(BaseModel):
    """Per-process application state handed to the recurring engine."""

    last_recurring_check: Optional[date] = None

    def reset(self) -> None:
        self.last_recurring_check = None


def next_occurrence(
    day: date,
    frequency: Frequency,
    anchor_day: Optional[int] = None,
) -> date:
    """The occurrence one period after `day`."""
    if frequency == Frequency.WEEKLY:
        return day + timedelta(days=7)
    if frequency == Frequency.BIWEEKLY:
        return day + timedelta(days=14)
    return add_months(day, 1, anchor_day=anchor_day)


def recurring_status(template: RecurringEntry, today: date) -> RecurringStatus:
    if not template.is_active:
        return RecurringStatus.PAUSED
    if template.end_date is not None and template.end_date < today:
        return RecurringStatus.ENDED
    if template.start_date > today:
        return RecurringStatus.PENDING
    return RecurringStatus.ACTIVE


class RecurringStore(LedgerStoreBase):
    """CRUD over recurring templates."""

    def __init__(
        self,
        kv: KeyValueStoreInterface,
        queue: Optional[MutationQueue] = None,
        audit: Optional[AuditLogger] = None,
        clock: Optional[Clock] = None,
        validator: Optional[EntryValidator] = None,
    ):
        super().__init__(kv, queue=queue, audit=audit, clock=clock)
        self._validator = validator or EntryValidator(clock=self._clock)

    async def all_templates(self) -> list[RecurringEntry]:
        return await self._load_records(StorageKeys.RECURRING_ENTRIES, RecurringEntry)

    async def get(self, template_id: str) -> Optional[RecurringEntry]:
        for template in await self.all_templates():
            if template.id == template_id:
                return template
        return None

    async def add(
        self,
        amount: Union[Decimal, int, float, str],
        frequency: Union[Frequency, str],
        start_date: DayLike,
        category: Optional[str] = None,
        currency: Optional[str] = None,
        note: Optional[str] = None,
        end_date: Optional[DayLike] = None,
    ) -> RecurringEntry:
        """
        Create an active template.

        Raises:
            EntryValidationError: If the amount is not positive
            ValueError: If end_date is not after start_date
        """
        value = self._validator.ensure_valid(amount, currency=currency)
        now = self._clock.now()
        template = RecurringEntry(
            amount=value,
            frequency=Frequency(frequency),
            start_date=as_day(start_date),
            end_date=as_day(end_date) if end_date is not None else None,
            category=category,
            currency=currency,
            note=note,
            created_at=now,
            updated_at=now,
        )

        async with self._queue.mutation():
            templates = await self.all_templates()
            templates.append(template)
            await self._save_records(StorageKeys.RECURRING_ENTRIES, templates)

        await self._audit.log(LedgerEventBuilder.recurring_changed(
            LedgerEventType.RECURRING_ADDED, template.id,
            {"frequency": template.frequency.value, "amount": str(value)},
        ))
        return template

    async def update(
        self,
        template_id: str,
        patch: RecurringPatch,
    ) -> Optional[RecurringEntry]:
        """
        Apply the explicitly set fields of `patch`.

        Returns:
            The updated template, or None if no template has this id
        """
        changes = patch.changes()
        if "amount" in changes:
            changes["amount"] = self._validator.ensure_valid(changes["amount"])

        updated: Optional[RecurringEntry] = None
        async with self._queue.mutation():
            templates = await self.all_templates()
            for index, template in enumerate(templates):
                if template.id == template_id:
                    updated = RecurringEntry.model_validate({
                        **template.model_dump(),
                        **changes,
                        "updated_at": self._clock.now(),
                    })
                    templates[index] = updated
                    break
            if updated is None:
                return None
            await self._save_records(StorageKeys.RECURRING_ENTRIES, templates)

        await self._audit.log(LedgerEventBuilder.recurring_changed(
            LedgerEventType.RECURRING_UPDATED, template_id, {"fields": sorted(changes)}
        ))
        return updated

    async def pause(self, template_id: str) -> Optional[RecurringEntry]:
        return await self.update(template_id, RecurringPatch(is_active=False))

    async def resume(self, template_id: str) -> Optional[RecurringEntry]:
        return await self.update(template_id, RecurringPatch(is_active=True))

    async def delete(self, template_id: str) -> bool:
        """Remove a template. Entries it already generated are kept."""
        async with self._queue.mutation():
            templates = await self.all_templates()
            remaining = [t for t in templates if t.id != template_id]
            if len(remaining) == len(templates):
                return False
            await self._save_records(StorageKeys.RECURRING_ENTRIES, remaining)

        await self._audit.log(LedgerEventBuilder.recurring_changed(
            LedgerEventType.RECURRING_DELETED, template_id
        ))
        return True

    async def mark_generated(self, template_id: str, day: date) -> Optional[RecurringEntry]:
        """Record the most recent occurrence spawned by a template."""
        return await self.update(template_id, RecurringPatch(last_generated_date=day))


class RecurringEngine:
    """Materializes due occurrences of every active template."""

    def __init__(
        self,
        entries: EntryStore,
        templates: RecurringStore,
        session: Optional[LedgerSession] = None,
        audit: Optional[AuditLogger] = None,
        clock: Optional[Clock] = None,
    ):
        self._entries = entries
        self._templates = templates
        self._session = session or LedgerSession()
        self._audit = audit or AuditLogger()
        self._clock = clock or SYSTEM_CLOCK
        # One pass at a time; the store queue only covers single writes
        self._pass_lock = asyncio.Lock()

    @property
    def session(self) -> LedgerSession:
        return self._session

    async def catch_up(self, template: RecurringEntry, today: date) -> int:
        """
        Generate every occurrence of `template` due on or before `today`.

        Returns the number of entries created.
        """
        if recurring_status(template, today) != RecurringStatus.ACTIVE:
            return 0

        anchor_day = template.start_date.day
        if template.last_generated_date is not None:
            cursor = next_occurrence(
                template.last_generated_date, template.frequency, anchor_day
            )
        else:
            cursor = template.start_date

        generated = 0
        while cursor <= today:
            if template.end_date is not None and cursor > template.end_date:
                break

            entry = await self._entries.add_entry(
                cursor,
                template.amount,
                category=template.category,
                note=template.generated_note,
                currency=template.currency,
            )
            await self._templates.mark_generated(template.id, cursor)
            await self._audit.log(LedgerEventBuilder.recurring_generated(
                template.id, cursor.isoformat(), entry.entry_id
            ))
            generated += 1

            cursor = next_occurrence(cursor, template.frequency, anchor_day)

        return generated

    async def generate_for_today(self) -> int:
        """
        Run the catch-up pass once per calendar day.

        Returns the number of entries created (0 if already run today).
        Storage write failures propagate and leave the day unchecked, so
        the next call retries from each template's last generated date.
        """
        today = self._clock.today()
        if self._session.last_recurring_check == today:
            return 0

        async with self._pass_lock:
            # A concurrent caller may have finished the pass while we waited
            if self._session.last_recurring_check == today:
                return 0

            generated = 0
            for template_id in [t.id for t in await self._templates.all_templates()]:
                template = await self._templates.get(template_id)
                if template is None:
                    continue
                try:
                    generated += await self.catch_up(template, today)
                except EntryValidationError as e:
                    logger.error(
                        "recurring_template_skipped",
                        template_id=template_id,
                        error=str(e),
                    )

            self._session.last_recurring_check = today
            return generated
