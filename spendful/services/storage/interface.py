"""
Abstract Storage Interface

DESIGN DECISION: The ledger talks to a plain async key-value store of
strings. Every record collection is one JSON blob under one key.
This allows us to:
1. Keep the on-disk format trivially inspectable
2. Use in-memory storage for testing
3. Swap the JSON-file backend for anything with get/set/remove

The interface is intentionally tiny. Querying happens in Python over the
decoded collection - record counts are small (years of daily entries).
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for the persistent key-value store.

    Implementations must make `set` atomic from the caller's point of
    view: after a failed `set` the previous value is still readable.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Namespaced storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageReadError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Args:
            key: Namespaced storage key
            value: Serialized value (a JSON blob for ledger records)

        Raises:
            StorageWriteError: If the value could not be written
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """
        Remove a key.

        Args:
            key: Namespaced storage key

        Returns:
            True if the key existed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """The backend could not be read."""
    pass


class StorageWriteError(StorageError):
    """The backend could not be written; the previous value is intact."""
    pass


class CorruptDataError(StorageError):
    """A stored value could not be decoded."""
    pass
