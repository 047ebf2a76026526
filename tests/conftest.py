"""
Shared fixtures.

Every test runs against an in-memory key-value store and a clock pinned
to Friday 2024-03-15, 12:00 UTC. The clock advances one second per
`now()` call so creation timestamps are strictly ordered.
"""

import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from spendful.dates import Clock
from spendful.orchestrator import Ledger
from spendful.services.storage import (
    InMemoryKeyValueStore,
    StorageReadError,
    StorageWriteError,
)


class FakeClock(Clock):
    """Controllable clock for tests."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def now(self) -> datetime:
        value = self.current
        self.current += self.step
        return value

    def today(self) -> date:
        return self.current.date()

    def set_today(self, day: date) -> None:
        self.current = datetime(day.year, day.month, day.day, 12, tzinfo=timezone.utc)


class YieldingStore(InMemoryKeyValueStore):
    """Suspends on every call, so concurrent tasks interleave like real I/O."""

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)

    async def set(self, key, value):
        await asyncio.sleep(0)
        await super().set(key, value)


class ReadFailingStore(InMemoryKeyValueStore):
    """Every read fails."""

    async def get(self, key):
        raise StorageReadError(f"disk unreadable: {key}")


class WriteFailingStore(InMemoryKeyValueStore):
    """Reads work, every write fails."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.write_attempts = 0

    async def set(self, key, value):
        self.write_attempts += 1
        raise StorageWriteError(f"disk full: {key}")


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def yielding_kv():
    return YieldingStore()


@pytest.fixture
def ledger(kv, clock):
    return Ledger(kv, clock=clock)


@pytest.fixture
def read_failing_kv():
    return ReadFailingStore()


@pytest.fixture
def write_failing_kv():
    """Factory: a store preloaded with `initial` whose writes all fail."""
    return WriteFailingStore
