"""
Main Orchestrator for Spendful

This module ties together all the components and defines the entry
points the app screens call:
1. Day view (recurring catch-up → access check → day data)
2. Entry CRUD, categories, recurring templates, settings
3. Weekly / monthly summaries
4. Export

DESIGN DECISION: One Ledger owns ONE mutation queue, ONE audit logger,
ONE clock and ONE session, shared by every store. That way:
- a recurring pass and a manual add can never interleave their writes
- tests pin "today" in a single place
- the once-per-day recurring check is state on the session, not a global
"""

from typing import Optional

import structlog

from spendful.audit import AuditLogger
from spendful.config import get_settings
from spendful.dates import SYSTEM_CLOCK, Clock, DayLike, as_day
from spendful.ledger import (
    AccountStore,
    CategoryStore,
    EntryStore,
    LedgerSession,
    MutationQueue,
    RecurringEngine,
    RecurringStore,
    SchemaMigrator,
    can_view_date,
)
from spendful.models.ledger import DayData
from spendful.models.reports import ExportData, PeriodSummary
from spendful.queries import SummaryExecutor
from spendful.services.export import ExportService
from spendful.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
)
from spendful.validation import EntryValidator


logger = structlog.get_logger(__name__)


class Ledger:
    """
    Facade over the stores of one local ledger.

    The stores are exposed as attributes for direct CRUD
    (`ledger.entries.add_entry(...)`, `ledger.recurring.pause(...)`);
    flows that combine several stores live here.
    """

    def __init__(
        self,
        kv: KeyValueStoreInterface,
        clock: Optional[Clock] = None,
        audit: Optional[AuditLogger] = None,
        session: Optional[LedgerSession] = None,
    ):
        clock = clock or SYSTEM_CLOCK
        self.kv = kv
        self.audit = audit or AuditLogger()
        self.session = session or LedgerSession()

        shared = dict(queue=MutationQueue(), audit=self.audit, clock=clock)
        validator = EntryValidator(clock=clock)

        self.migrator = SchemaMigrator(kv, **shared)
        self.entries = EntryStore(
            kv, migrator=self.migrator, validator=validator, **shared
        )
        self.account = AccountStore(kv, **shared)
        self.categories = CategoryStore(kv, **shared)
        self.recurring = RecurringStore(kv, validator=validator, **shared)

        self.recurring_engine = RecurringEngine(
            self.entries,
            self.recurring,
            session=self.session,
            audit=self.audit,
            clock=clock,
        )
        self.summaries = SummaryExecutor(self.entries, self.account, clock=clock)
        self.exports = ExportService(
            self.entries,
            self.account,
            self.categories,
            audit=self.audit,
            clock=clock,
        )

    @property
    def clock(self) -> Clock:
        return self.entries.clock

    @property
    def queue(self) -> MutationQueue:
        """The mutation queue every store serializes on."""
        return self.entries.queue

    async def can_view(self, day: DayLike) -> bool:
        """Whether the current user may see `day`."""
        settings = await self.account.get_settings()
        subscription = await self.account.get_subscription()
        return can_view_date(
            day,
            subscription,
            settings.free_history_days,
            today=self.clock.today(),
            now=self.clock.now(),
        )

    async def load_day(self, day: DayLike) -> DayData:
        """
        Day view.

        Runs the recurring catch-up (at most once per calendar day), then
        returns the day's data, or a locked placeholder if the day is
        outside the viewable history.
        """
        day = as_day(day)
        generated = await self.recurring_engine.generate_for_today()
        if generated:
            logger.info("recurring_entries_generated", count=generated)

        if not await self.can_view(day):
            return DayData.locked_placeholder(day)
        return await self.entries.day_data(day)

    async def load_today(self) -> DayData:
        return await self.load_day(self.clock.today())

    async def weekly_summary(self) -> PeriodSummary:
        await self.recurring_engine.generate_for_today()
        return await self.summaries.weekly_summary()

    async def monthly_summary(self, month_offset: int = 0) -> PeriodSummary:
        await self.recurring_engine.generate_for_today()
        return await self.summaries.monthly_summary(month_offset)

    async def export_all_data(self) -> ExportData:
        return await self.exports.export_all_data()

    async def export_csv(self) -> str:
        return await self.exports.export_csv()


def create_ledger(
    kv: Optional[KeyValueStoreInterface] = None,
    use_storage: bool = True,
    clock: Optional[Clock] = None,
) -> Ledger:
    """
    Factory function to create a ledger.

    Args:
        kv: Backend to use; overrides `use_storage`
        use_storage: Whether to persist to the JSON-file store.
                    Set to False for an in-memory ledger.
        clock: Source of "now" and "today"

    Returns:
        A Ledger wired to a single shared queue, audit logger and session
    """
    if kv is None:
        if use_storage:
            data_dir = get_settings().storage.data_dir
            try:
                data_dir.mkdir(parents=True, exist_ok=True)
                kv = JsonFileKeyValueStore(data_dir=data_dir)
            except OSError as e:
                # Storage not usable - continue without persistence
                logger.warning(
                    "storage_unavailable",
                    data_dir=str(data_dir),
                    error=str(e),
                )
                kv = InMemoryKeyValueStore()
        else:
            kv = InMemoryKeyValueStore()

    return Ledger(kv, clock=clock)
