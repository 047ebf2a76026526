"""
In-Memory Storage Implementation

Used when persistence is disabled and as the backend in tests.
"""

from typing import Optional

from spendful.services.storage.interface import KeyValueStoreInterface


class InMemoryKeyValueStore(KeyValueStoreInterface):
    """Dictionary-backed key-value store. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def snapshot(self) -> dict[str, str]:
        """Copy of everything stored, for inspection."""
        return dict(self._data)
