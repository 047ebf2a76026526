"""
JSON File Storage Implementation

DESIGN DECISION: Each key is stored as its own file under a data
directory because:
1. The user can open and back up their data with any text editor
2. No database setup required
3. A write is a temp-file write plus an atomic rename, so a crash
   mid-write never leaves a half-written collection behind

TRADEOFFS:
- Every mutation rewrites the whole collection (fine for one person's ledger)
- No cross-key transactions (callers order their writes carefully)
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from spendful.config import get_settings
from spendful.services.storage.interface import (
    KeyValueStoreInterface,
    StorageReadError,
    StorageWriteError,
)


KEY_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_.-]*$")

logger = structlog.get_logger(__name__)


class JsonFileKeyValueStore(KeyValueStoreInterface):
    """
    File-backed key-value store.

    Values are written as-is (callers pass JSON text) to
    `<data_dir>/<key>.json`.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        write_attempts: Optional[int] = None,
        backoff_max_seconds: Optional[float] = None,
    ):
        settings = get_settings().storage
        self._data_dir = Path(data_dir or settings.data_dir)
        self._write_attempts = write_attempts or settings.write_attempts
        self._backoff_max = (
            settings.write_backoff_max_seconds
            if backoff_max_seconds is None
            else backoff_max_seconds
        )

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def _write_atomic(self, path: Path, value: str) -> None:
        """Write to a temp file in the same directory, then rename over the target."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.stem}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    async def get(self, key: str) -> Optional[str]:
        """Read a key's file, or None if it doesn't exist."""
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {key}: {e}") from e

    async def set(self, key: str, value: str) -> None:
        """Atomically replace a key's file, retrying transient OS errors."""
        path = self._path_for(key)
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._write_attempts),
                wait=wait_exponential(multiplier=0.1, max=self._backoff_max),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write_atomic(path, value)
        except OSError as e:
            logger.error("storage_write_failed", key=key, error=str(e))
            raise StorageWriteError(f"Failed to write {key}: {e}") from e

    async def remove(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageWriteError(f"Failed to remove {key}: {e}") from e
