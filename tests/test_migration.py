"""Tests for the v1 -> v2 schema migration."""

import json
import pytest
from datetime import date
from decimal import Decimal

from spendful.ledger import (
    EntryStore,
    MIGRATION_DONE_MARKER,
    SchemaMigrator,
    StorageKeys,
    convert_legacy_log,
)
from spendful.models import LegacyDailyLog, SpendEntry
from spendful.services.storage import InMemoryKeyValueStore


MS_2024_01_01 = 1704067200000


def legacy_log(log_id, day, did_spend, amount=None, category=None, note=None):
    return {
        "id": log_id,
        "date": day,
        "did_spend": did_spend,
        "amount": amount,
        "category": category,
        "note": note,
        "created_at": MS_2024_01_01,
        "updated_at": MS_2024_01_01,
    }


def legacy_store(logs):
    return InMemoryKeyValueStore({StorageKeys.LEGACY_DAILY_LOGS: json.dumps(logs)})


def stored_entries(kv):
    raw = kv.snapshot().get(StorageKeys.SPEND_ENTRIES)
    return json.loads(raw) if raw else []


class TestConvertLegacyLog:
    """Tests for the per-log conversion rule."""

    def test_spend_day_becomes_entry(self):
        """Test that a spend day keeps id, amount, note and timestamps."""
        log = LegacyDailyLog.model_validate(
            legacy_log("log-1", "2024-01-01", True, 12.5, "Dining", "Lunch")
        )
        entry = convert_legacy_log(log)
        assert entry.entry_id == "log-1"
        assert entry.date == date(2024, 1, 1)
        assert entry.amount == Decimal("12.5")
        assert entry.category == "Dining"
        assert entry.note == "Lunch"
        assert entry.currency is None
        assert entry.timestamp == log.created_at

    def test_missing_category_defaults(self):
        """Test the category fallback."""
        log = LegacyDailyLog.model_validate(legacy_log("log-1", "2024-01-01", True, 3))
        assert convert_legacy_log(log).category == "Uncategorized"

    @pytest.mark.parametrize(
        "did_spend, amount",
        [(False, None), (False, 10), (True, None), (True, 0)],
    )
    def test_no_spend_produces_nothing(self, did_spend, amount):
        """Test that no-spend and zero logs are dropped."""
        log = LegacyDailyLog.model_validate(
            legacy_log("log-1", "2024-01-01", did_spend, amount)
        )
        assert convert_legacy_log(log) is None


class TestSchemaMigrator:
    """Tests for SchemaMigrator.ensure_migrated."""

    @pytest.mark.asyncio
    async def test_converts_and_marks(self, clock):
        """Test conversion of a mixed legacy collection."""
        kv = legacy_store([
            legacy_log("a", "2024-01-01", True, 12.5),
            legacy_log("b", "2024-01-02", False),
            legacy_log("c", "2024-01-03", True, 0),
        ])
        migrator = SchemaMigrator(kv, clock=clock)

        assert await migrator.ensure_migrated() is True

        entries = stored_entries(kv)
        assert [e["entry_id"] for e in entries] == ["a"]
        assert kv.snapshot()[StorageKeys.MIGRATED_V2] == MIGRATION_DONE_MARKER

    @pytest.mark.asyncio
    async def test_idempotent(self, clock):
        """Test that running twice creates no duplicates."""
        kv = legacy_store([legacy_log("a", "2024-01-01", True, 5)])

        assert await SchemaMigrator(kv, clock=clock).ensure_migrated() is True
        # A fresh migrator sees the persisted marker
        second = SchemaMigrator(kv, clock=clock)
        assert await second.ensure_migrated() is False
        assert await second.ensure_migrated() is False

        assert len(stored_entries(kv)) == 1

    @pytest.mark.asyncio
    async def test_no_legacy_data(self, kv, clock):
        """Test a fresh install: nothing converted, still marked."""
        assert await SchemaMigrator(kv, clock=clock).ensure_migrated() is True
        assert stored_entries(kv) == []
        assert kv.snapshot()[StorageKeys.MIGRATED_V2] == "true"

    @pytest.mark.asyncio
    async def test_corrupt_legacy_data_still_marks(self, clock):
        """Test that undecodable legacy data is marked and never retried."""
        kv = InMemoryKeyValueStore({StorageKeys.LEGACY_DAILY_LOGS: "{not json"})
        migrator = SchemaMigrator(kv, clock=clock)

        assert await migrator.ensure_migrated() is True
        assert kv.snapshot()[StorageKeys.MIGRATED_V2] == "true"
        assert stored_entries(kv) == []
        # Legacy data is left in place
        assert kv.snapshot()[StorageKeys.LEGACY_DAILY_LOGS] == "{not json"

    @pytest.mark.asyncio
    async def test_invalid_legacy_rows_still_mark(self, clock):
        """Test that schema-invalid legacy logs are marked, not retried."""
        kv = InMemoryKeyValueStore({StorageKeys.LEGACY_DAILY_LOGS: json.dumps([{"id": "x"}])})
        assert await SchemaMigrator(kv, clock=clock).ensure_migrated() is True
        assert kv.snapshot()[StorageKeys.MIGRATED_V2] == "true"

    @pytest.mark.asyncio
    async def test_malformed_row_does_not_drop_the_rest(self, clock):
        """Test that one bad legacy row is skipped and the good ones convert."""
        bad = legacy_log("b", "2024-01-02", True, 7)
        del bad["updated_at"]
        kv = legacy_store([legacy_log("a", "2024-01-01", True, 5), bad])

        assert await SchemaMigrator(kv, clock=clock).ensure_migrated() is True

        assert [e["entry_id"] for e in stored_entries(kv)] == ["a"]
        assert kv.snapshot()[StorageKeys.MIGRATED_V2] == "true"

    @pytest.mark.asyncio
    async def test_non_array_legacy_data_still_marks(self, clock):
        kv = InMemoryKeyValueStore({StorageKeys.LEGACY_DAILY_LOGS: json.dumps({"a": 1})})

        assert await SchemaMigrator(kv, clock=clock).ensure_migrated() is True
        assert kv.snapshot()[StorageKeys.MIGRATED_V2] == "true"
        assert stored_entries(kv) == []

    @pytest.mark.asyncio
    async def test_merges_with_existing_entries(self, clock):
        """Test that entries already in v2 storage are kept."""
        existing = SpendEntry(entry_id="new", date=date(2024, 2, 1), amount=Decimal("3"))
        kv = InMemoryKeyValueStore({
            StorageKeys.LEGACY_DAILY_LOGS: json.dumps([
                legacy_log("new", "2024-01-01", True, 99),
                legacy_log("old", "2024-01-02", True, 4),
            ]),
            StorageKeys.SPEND_ENTRIES: json.dumps([existing.model_dump(mode="json")]),
        })

        await SchemaMigrator(kv, clock=clock).ensure_migrated()

        entries = stored_entries(kv)
        assert [e["entry_id"] for e in entries] == ["new", "old"]
        assert entries[0]["amount"] == "3"

    @pytest.mark.asyncio
    async def test_write_failure_is_retried(self, clock, write_failing_kv):
        """Test that a failed write leaves the migration pending."""
        kv = write_failing_kv({
            StorageKeys.LEGACY_DAILY_LOGS: json.dumps([legacy_log("a", "2024-01-01", True, 5)]),
        })
        migrator = SchemaMigrator(kv, clock=clock)

        assert await migrator.ensure_migrated() is True
        assert StorageKeys.MIGRATED_V2 not in kv.snapshot()
        # Not done: the next access tries again
        assert await migrator.ensure_migrated() is True
        assert kv.write_attempts == 2

    @pytest.mark.asyncio
    async def test_unreadable_marker_is_retried(self, clock, read_failing_kv):
        """Test that an unreadable marker does not mark or raise."""
        migrator = SchemaMigrator(read_failing_kv, clock=clock)
        assert await migrator.ensure_migrated() is False
        assert StorageKeys.MIGRATED_V2 not in read_failing_kv.snapshot()


class TestLazyMigration:
    """Tests for migration triggered by the entry store."""

    @pytest.mark.asyncio
    async def test_first_read_migrates(self, clock):
        """Test that the first read sees converted legacy entries."""
        kv = legacy_store([legacy_log("a", "2024-01-01", True, 5, "Dining")])
        store = EntryStore(kv, clock=clock)

        entries = await store.all_entries()

        assert len(entries) == 1
        assert entries[0].category == "Dining"
        assert (await store.entries_for_date("2024-01-01"))[0].entry_id == "a"
