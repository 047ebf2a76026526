"""
Period Summary Execution

Builds the weekly and monthly overviews from stored entries.

DESIGN DECISION: Access control is applied HERE, at the call site, not
in storage. Every day of the period is returned; days the user may not
view become locked placeholders, and their entries are left out of the
statistics. Nothing is deleted.
"""

from datetime import date
from typing import Optional

from spendful.dates import SYSTEM_CLOCK, Clock, iter_days, month_date_range, week_date_range
from spendful.ledger.access import can_view_date, filter_viewable
from spendful.ledger.account import AccountStore
from spendful.ledger.entries import EntryStore
from spendful.models.ledger import DayData, SpendEntry
from spendful.models.reports import PeriodSummary
from spendful.queries.stats import calculate_spending_stats


class SummaryExecutor:
    """Executes period summaries against the entry store."""

    def __init__(
        self,
        entries: EntryStore,
        account: AccountStore,
        clock: Optional[Clock] = None,
    ):
        self._entries = entries
        self._account = account
        self._clock = clock or SYSTEM_CLOCK

    async def period_summary(self, start_date: date, end_date: date) -> PeriodSummary:
        """Summary of every day from start_date to end_date inclusive."""
        settings = await self._account.get_settings()
        subscription = await self._account.get_subscription()
        today = self._clock.today()
        now = self._clock.now()

        entries = await self._entries.entries_for_range(start_date, end_date)
        by_day: dict[date, list[SpendEntry]] = {}
        for entry in entries:
            by_day.setdefault(entry.date, []).append(entry)

        days = []
        locked = 0
        for day in iter_days(start_date, end_date):
            if can_view_date(
                day, subscription, settings.free_history_days, today=today, now=now
            ):
                days.append(DayData.from_entries(day, by_day.get(day, [])))
            else:
                days.append(DayData.locked_placeholder(day))
                locked += 1

        viewable = filter_viewable(
            entries, subscription, settings.free_history_days, today=today, now=now
        )
        stats = calculate_spending_stats(
            viewable, total_days_in_period=(end_date - start_date).days + 1
        )

        return PeriodSummary(
            start_date=start_date,
            end_date=end_date,
            days=days,
            stats=stats,
            locked_days=locked,
        )

    async def weekly_summary(self) -> PeriodSummary:
        """Current Sunday..Saturday week."""
        start, end = week_date_range(self._clock.today())
        return await self.period_summary(start, end)

    async def monthly_summary(self, month_offset: int = 0) -> PeriodSummary:
        """Calendar month `month_offset` months from the current one."""
        start, end = month_date_range(month_offset, self._clock.today())
        return await self.period_summary(start, end)
