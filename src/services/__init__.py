"""Services package."""

from src.services.storage import (
    DuplicateIdentityError,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Storage services
    "DuplicateIdentityError",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStoreInterface",
    "NotFoundError",
    "StorageError",
]
