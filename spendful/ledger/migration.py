"""
Schema Migration: v1 daily logs -> v2 spend entries

v1 stored at most one log per day (`did_spend`, `amount`, ...). v2 stores
any number of SpendEntry rows per day. The migrator converts once, lazily,
before the first read of the entry collection.

Rules:
- a log with `did_spend` and `amount > 0` becomes one entry that keeps
  the log's id, amount, category (default 'Uncategorized'), note and
  timestamps
- an explicit "no spend" day produces nothing
- legacy rows are validated one at a time; a malformed row is skipped
  and logged, the rest still convert
- the completion marker is written on success AND when the legacy data
  is undecodable (not JSON, or not an array), so corrupt legacy data is
  never retried. That loss is logged as an error event, not surfaced.
- if the backend fails (legacy logs unreadable, converted collection
  not written), nothing is marked and the next access tries again
"""

from typing import Optional

import structlog
from pydantic import ValidationError

from spendful.ledger.base import LedgerStoreBase
from spendful.ledger.keys import MIGRATION_DONE_MARKER, StorageKeys
from spendful.models.audit import LedgerEventBuilder
from spendful.models.ledger import LegacyDailyLog, SpendEntry
from spendful.services.storage import (
    CorruptDataError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)


def convert_legacy_log(log: LegacyDailyLog) -> Optional[SpendEntry]:
    """Map one v1 log to a v2 entry, or None for no-spend days."""
    if not log.did_spend or log.amount is None or log.amount <= 0:
        return None
    return SpendEntry(
        entry_id=log.id,
        date=log.date,
        amount=log.amount,
        category=log.category,
        currency=None,
        note=log.note,
        timestamp=log.created_at,
        created_at=log.created_at,
        updated_at=log.updated_at,
    )


class SchemaMigrator(LedgerStoreBase):
    """One-shot, idempotent upgrade from the legacy log collection."""

    _done: bool = False

    async def _is_marked(self) -> bool:
        return await self._kv.get(StorageKeys.MIGRATED_V2) == MIGRATION_DONE_MARKER

    async def _mark_done(self) -> None:
        # The marker is a bare string, not a JSON document
        try:
            await self._kv.set(StorageKeys.MIGRATED_V2, MIGRATION_DONE_MARKER)
        except StorageError as e:
            # Not marked: the next access converts again, merging by id
            await self._audit.log_write_failed(StorageKeys.MIGRATED_V2, str(e))
            return
        self._done = True

    async def _convert(self) -> tuple[int, int]:
        """
        Convert legacy logs into the entry collection.

        Returns (converted, skipped). Malformed rows count as skipped.
        Raises on unreadable or undecodable legacy data.
        """
        data = await self._read_json(StorageKeys.LEGACY_DAILY_LOGS)
        if data is None:
            return 0, 0
        if not isinstance(data, list):
            raise CorruptDataError("Legacy daily logs are not a JSON array")

        logs = []
        for index, row in enumerate(data):
            try:
                logs.append(LegacyDailyLog.model_validate(row))
            except ValidationError as e:
                logger.warning(
                    "malformed_legacy_log_skipped",
                    index=index,
                    error=str(e),
                )

        converted = [e for e in (convert_legacy_log(log) for log in logs) if e]
        if not converted:
            return 0, len(data)

        # Entries written since (e.g. by an earlier partial run) are kept;
        # ids already present are not duplicated.
        existing = await self._load_records(StorageKeys.SPEND_ENTRIES, SpendEntry)
        known_ids = {e.entry_id for e in existing}
        merged = existing + [e for e in converted if e.entry_id not in known_ids]
        await self._save_records(StorageKeys.SPEND_ENTRIES, merged)

        return len(converted), len(data) - len(converted)

    async def ensure_migrated(self) -> bool:
        """
        Run the migration if it has not run on this install.

        Never raises. Returns True if a conversion pass ran during this call.
        """
        if self._done:
            return False

        async with self._queue.mutation():
            if self._done:
                return False

            try:
                if await self._is_marked():
                    self._done = True
                    return False
            except StorageError as e:
                # Can't tell whether we migrated; try again on the next read
                await self._audit.log_read_failed(StorageKeys.MIGRATED_V2, str(e))
                return False

            try:
                converted, skipped = await self._convert()
            except (StorageReadError, StorageWriteError) as e:
                # Legacy data is intact; convert again on the next access
                await self._audit.log(LedgerEventBuilder.migration_failed(str(e)))
                return True
            except (StorageError, ValidationError, ValueError, TypeError) as e:
                await self._audit.log(LedgerEventBuilder.migration_failed(str(e)))
                await self._mark_done()
                return True

            await self._mark_done()
            await self._audit.log(
                LedgerEventBuilder.migration_completed(converted, skipped)
            )
            return True
