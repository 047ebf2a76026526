"""Tests for the Ledger composition root."""

import asyncio
import pytest
from datetime import date
from decimal import Decimal

from spendful.models import RecurringPatch, SettingsPatch
from spendful.orchestrator import Ledger, create_ledger
from spendful.services.storage import InMemoryKeyValueStore, JsonFileKeyValueStore


class TestCreateLedger:
    """Tests for the factory."""

    def test_in_memory(self):
        ledger = create_ledger(use_storage=False)
        assert isinstance(ledger.kv, InMemoryKeyValueStore)

    def test_explicit_backend(self, kv, clock):
        ledger = create_ledger(kv=kv, clock=clock)
        assert ledger.kv is kv
        assert ledger.clock is clock
        assert ledger.recurring.clock is clock

    def test_stores_share_queue(self, ledger):
        """Test that every store serializes on the same queue."""
        assert ledger.entries.queue is ledger.queue
        assert ledger.recurring.queue is ledger.queue
        assert ledger.account.queue is ledger.queue
        assert ledger.categories.queue is ledger.queue
        assert ledger.migrator.queue is ledger.queue

    @pytest.mark.asyncio
    async def test_data_survives_restart(self, tmp_path, clock):
        """Test persistence through the JSON-file backend."""
        first = create_ledger(kv=JsonFileKeyValueStore(data_dir=tmp_path), clock=clock)
        saved = await first.entries.add_entry(date(2024, 3, 15), "4.20", "Dining")

        second = create_ledger(kv=JsonFileKeyValueStore(data_dir=tmp_path), clock=clock)

        assert await second.entries.get_entry(saved.entry_id) == saved


class TestLoadDay:
    """Tests for Ledger.load_day."""

    @pytest.mark.asyncio
    async def test_runs_recurring_catch_up(self, ledger):
        """Test that opening a day materializes due recurring entries."""
        await ledger.recurring.add(15, "weekly", date(2024, 3, 8), "Subscriptions")

        today = await ledger.load_today()

        assert today.date == date(2024, 3, 15)
        assert today.has_spend is True
        assert today.total_amount == Decimal("15")
        assert today.entries[0].note == "[Recurring]"
        assert ledger.session.last_recurring_check == date(2024, 3, 15)

    @pytest.mark.asyncio
    async def test_locked_day_placeholder(self, ledger):
        """Test that days outside the free window are locked, not lost."""
        await ledger.entries.add_entry(date(2024, 1, 1), 9)

        day = await ledger.load_day(date(2024, 1, 1))

        assert day.locked is True
        assert day.entries == []
        assert len(await ledger.entries.entries_for_date(date(2024, 1, 1))) == 1

    @pytest.mark.asyncio
    async def test_window_follows_settings(self, ledger):
        await ledger.entries.add_entry(date(2024, 1, 1), 9)
        await ledger.account.update_settings(SettingsPatch(free_history_days=365))

        day = await ledger.load_day("2024-01-01")

        assert day.locked is False
        assert day.total_amount == Decimal("9")

    @pytest.mark.asyncio
    async def test_recurring_check_once_per_day(self, ledger):
        """Test that a second load on the same day does not regenerate."""
        template = await ledger.recurring.add(15, "weekly", date(2024, 3, 15))
        await ledger.load_today()
        # Even with the template rewound, the session has already checked today
        await ledger.recurring.update(template.id, RecurringPatch(last_generated_date=None))

        await ledger.load_today()

        assert len(await ledger.entries.all_entries()) == 1

    @pytest.mark.asyncio
    async def test_overlapping_screens_backfill_once(self, yielding_kv, clock):
        """Test that a day view and a summary loaded together share one pass."""
        ledger = Ledger(yielding_kv, clock=clock)
        await ledger.recurring.add(30, "monthly", date(2023, 12, 15))

        await asyncio.gather(ledger.load_today(), ledger.weekly_summary())

        assert sorted(e.date for e in await ledger.entries.all_entries()) == [
            date(2023, 12, 15), date(2024, 1, 15), date(2024, 2, 15), date(2024, 3, 15),
        ]
