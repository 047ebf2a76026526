"""
Shared plumbing for the ledger stores.

Every store keeps one JSON collection (or one singleton record) under one
key. Reads and writes follow the same policy everywhere:

- READS never raise. Unreadable or undecodable data becomes an empty
  collection / default record, and the failure is logged.
- WRITES replace the whole value. Failures propagate to the caller as
  StorageWriteError and nothing else is changed.
- Every read-modify-write runs inside the ledger's MutationQueue, so two
  mutations can never interleave their windows.
"""

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from spendful.audit import AuditLogger
from spendful.dates import SYSTEM_CLOCK, Clock
from spendful.services.storage import (
    CorruptDataError,
    KeyValueStoreInterface,
    StorageError,
    StorageWriteError,
)


ModelT = TypeVar("ModelT", bound=BaseModel)

logger = structlog.get_logger(__name__)


class MutationQueue:
    """Serializes mutations: one read-modify-write in flight at a time."""

    def __init__(self):
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def mutation(self) -> AsyncIterator[None]:
        async with self._lock:
            yield


class LedgerStoreBase:
    """Base class for stores backed by a KeyValueStoreInterface."""

    def __init__(
        self,
        kv: KeyValueStoreInterface,
        queue: Optional[MutationQueue] = None,
        audit: Optional[AuditLogger] = None,
        clock: Optional[Clock] = None,
    ):
        self._kv = kv
        self._queue = queue or MutationQueue()
        self._audit = audit or AuditLogger()
        self._clock = clock or SYSTEM_CLOCK

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def queue(self) -> MutationQueue:
        return self._queue

    async def _read_json(self, key: str) -> Any:
        """
        Read and decode a key.

        Returns None if the key is absent.

        Raises:
            StorageReadError: If the backend fails
            CorruptDataError: If the value is not valid JSON
        """
        raw = await self._kv.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Value under {key} is not valid JSON: {e}") from e

    async def _write_json(self, key: str, data: Any) -> None:
        """Encode and write a key, mapping any backend failure to StorageWriteError."""
        payload = json.dumps(data, ensure_ascii=False)
        try:
            await self._kv.set(key, payload)
        except StorageWriteError as e:
            await self._audit.log_write_failed(key, str(e))
            raise
        except Exception as e:
            await self._audit.log_write_failed(key, str(e))
            raise StorageWriteError(f"Failed to write {key}: {e}") from e

    async def _load_records(self, key: str, model: Type[ModelT]) -> list[ModelT]:
        """
        Load a JSON array of records.

        Malformed rows are skipped; an unreadable collection is empty.
        """
        try:
            data = await self._read_json(key)
        except StorageError as e:
            await self._audit.log_read_failed(key, str(e))
            return []
        except Exception as e:
            await self._audit.log_read_failed(key, f"unexpected: {e}")
            return []

        if data is None:
            return []
        if not isinstance(data, list):
            await self._audit.log_read_failed(key, "expected a JSON array")
            return []

        records = []
        for index, row in enumerate(data):
            try:
                records.append(model.model_validate(row))
            except ValidationError as e:
                logger.warning(
                    "malformed_record_skipped",
                    key=key,
                    index=index,
                    error=str(e),
                )
        return records

    async def _save_records(self, key: str, records: list[BaseModel]) -> None:
        await self._write_json(key, [r.model_dump(mode="json") for r in records])

    async def _load_record(
        self,
        key: str,
        model: Type[ModelT],
        defaults: ModelT,
    ) -> ModelT:
        """
        Load a singleton record, filling missing fields from `defaults`.

        Any failure (unreadable, corrupt, invalid) yields `defaults`.
        """
        try:
            data = await self._read_json(key)
        except StorageError as e:
            await self._audit.log_read_failed(key, str(e))
            return defaults
        except Exception as e:
            await self._audit.log_read_failed(key, f"unexpected: {e}")
            return defaults

        if data is None:
            return defaults
        if not isinstance(data, dict):
            await self._audit.log_read_failed(key, "expected a JSON object")
            return defaults

        try:
            return model.model_validate({**defaults.model_dump(), **data})
        except ValidationError as e:
            await self._audit.log_read_failed(key, str(e))
            return defaults
