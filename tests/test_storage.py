"""Tests for the key-value store backends."""

import os
import pytest

from spendful.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    StorageReadError,
    StorageWriteError,
)


@pytest.fixture
def file_store(tmp_path):
    return JsonFileKeyValueStore(data_dir=tmp_path, write_attempts=2, backoff_max_seconds=0)


class TestJsonFileKeyValueStore:
    """Tests for JsonFileKeyValueStore."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, file_store, tmp_path):
        """Test that a value lands in <key>.json and reads back."""
        await file_store.set("spendful_spend_entries", '[{"a": 1}]')

        assert await file_store.get("spendful_spend_entries") == '[{"a": 1}]'
        assert (tmp_path / "spendful_spend_entries.json").read_text(encoding="utf-8") == '[{"a": 1}]'

    @pytest.mark.asyncio
    async def test_missing_key(self, file_store):
        assert await file_store.get("spendful_app_settings") is None

    @pytest.mark.asyncio
    async def test_overwrite_leaves_no_temp_files(self, file_store, tmp_path):
        await file_store.set("spendful_subscription", "{}")
        await file_store.set("spendful_subscription", '{"plan": "free"}')

        assert sorted(os.listdir(tmp_path)) == ["spendful_subscription.json"]
        assert await file_store.get("spendful_subscription") == '{"plan": "free"}'

    @pytest.mark.asyncio
    async def test_remove(self, file_store):
        await file_store.set("spendful_migrated_v2", "true")

        assert await file_store.remove("spendful_migrated_v2") is True
        assert await file_store.remove("spendful_migrated_v2") is False
        assert await file_store.get("spendful_migrated_v2") is None

    @pytest.mark.asyncio
    async def test_invalid_key_rejected(self, file_store):
        with pytest.raises(ValueError):
            await file_store.get("../etc/passwd")

    @pytest.mark.asyncio
    async def test_failed_write_keeps_previous_value(self, file_store, tmp_path, monkeypatch):
        """Test that a failed replace retries, then raises and keeps the old file."""
        await file_store.set("spendful_app_settings", '{"tone": "calm"}')
        calls = []

        def failing_replace(src, dst):
            calls.append(dst)
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", failing_replace)

        with pytest.raises(StorageWriteError):
            await file_store.set("spendful_app_settings", '{"tone": "direct"}')

        monkeypatch.undo()
        assert len(calls) == 2
        assert await file_store.get("spendful_app_settings") == '{"tone": "calm"}'
        assert sorted(os.listdir(tmp_path)) == ["spendful_app_settings.json"]

    @pytest.mark.asyncio
    async def test_unwritable_directory(self, tmp_path):
        """Test that a data_dir that is a file surfaces StorageWriteError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        store = JsonFileKeyValueStore(data_dir=blocker / "data", write_attempts=1, backoff_max_seconds=0)

        with pytest.raises(StorageWriteError):
            await store.set("spendful_spend_entries", "[]")

    @pytest.mark.asyncio
    async def test_unreadable_value(self, file_store, tmp_path):
        """Test that a read error surfaces StorageReadError."""
        (tmp_path / "spendful_spend_entries.json").mkdir()

        with pytest.raises(StorageReadError):
            await file_store.get("spendful_spend_entries")


class TestInMemoryKeyValueStore:
    """Tests for InMemoryKeyValueStore."""

    @pytest.mark.asyncio
    async def test_round_trip_and_snapshot(self):
        store = InMemoryKeyValueStore({"a": "1"})
        await store.set("b", "2")

        assert await store.get("a") == "1"
        assert await store.remove("a") is True
        assert await store.remove("a") is False
        assert store.snapshot() == {"b": "2"}
