"""
Services Package

Storage backends and the export service.
"""

from spendful.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
)

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStoreInterface",
]
