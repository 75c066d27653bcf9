"""
Storage Services Package

Provides the abstract key-value interface and its local implementations.
The JSON file backend is the default; the in-memory backend serves tests.
"""

from src.services.storage.interface import (
    DuplicateIdentityError,
    KeyValueStoreInterface,
    NotFoundError,
    StorageError,
)
from src.services.storage.json_file import JsonFileKeyValueStore
from src.services.storage.memory import InMemoryKeyValueStore

__all__ = [
    # Interfaces
    "KeyValueStoreInterface",
    # Exceptions
    "DuplicateIdentityError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
