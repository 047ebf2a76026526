"""
Storage Services Package

Provides the abstract key-value store interface and its implementations.
Currently implements a JSON-file backend, but designed to be swappable.
"""

from spendful.services.storage.interface import (
    CorruptDataError,
    KeyValueStoreInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from spendful.services.storage.json_file import JsonFileKeyValueStore
from spendful.services.storage.memory import InMemoryKeyValueStore

__all__ = [
    # Interfaces
    "KeyValueStoreInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
