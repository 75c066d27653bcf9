"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the key-value store.
This allows us to:
1. Swap the JSON file for another local store later
2. Use in-memory storage for testing
3. Keep the repository and ledger decoupled from the storage backend

The interface is intentionally tiny: get, set and remove a string value
under a string key. No transactions, no indexing, no key listing.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStoreInterface(ABC):
    """
    Abstract interface for an async key-value store.

    Values are opaque serialized strings. Any implementation must wrap
    backend failures in StorageError.
    """

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """
        Write a value, replacing whatever was stored under the key.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.

        Raises:
            StorageError: If the removal fails
        """
        pass


class StorageError(Exception):
    """Underlying store read or write failed."""
    pass


class NotFoundError(Exception):
    """No account exists for the identity."""

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(f"No account found for {identity}")


class DuplicateIdentityError(Exception):
    """An account already exists for the identity."""

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(f"An account already exists for {identity}")
