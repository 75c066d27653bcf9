"""
Account Repository

Owns the shape of stored account records and their key scheme.

DESIGN DECISION: Every update is a full-record rewrite (read, modify,
write). There are no partial updates and no deletes.

Account creation is strict by default: an existing identity raises
DuplicateIdentityError. The overwrite mode reproduces older clients,
which replaced an existing account without warning.
"""

import hmac
from decimal import Decimal
from typing import Optional

from pydantic import ValidationError

from src.accounts.keys import account_key
from src.models.account import AccountRecord
from src.services.storage import (
    DuplicateIdentityError,
    KeyValueStoreInterface,
    NotFoundError,
    StorageError,
)


def _password_bytes(password: str) -> bytes:
    # surrogatepass so every str encodes, lone surrogates included
    return password.encode("utf-8", "surrogatepass")


class InvalidCredentialsError(Exception):
    """Password does not match the stored account."""

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(f"Incorrect password for {identity}")


class AccountRepository:
    """
    Create, look up, authenticate and update accounts.

    Errors from the store propagate untouched as StorageError.
    """

    def __init__(
        self,
        store: KeyValueStoreInterface,
        allow_overwrite: bool = False,
    ):
        """
        Initialize repository.

        Args:
            store: Key-value store holding the records
            allow_overwrite: Default for create(); True lets creation
                             replace an existing account
        """
        self._store = store
        self._allow_overwrite = allow_overwrite

    async def find_by_identity(self, identity: str) -> Optional[AccountRecord]:
        """
        Look up an account.

        Returns:
            The record, or None if no account exists for the identity

        Raises:
            StorageError: If the read fails or the stored record is unreadable
        """
        blob = await self._store.get_item(account_key(identity))
        if blob is None:
            return None

        try:
            return AccountRecord.from_blob(blob)
        except (ValueError, ValidationError) as e:
            raise StorageError(f"Stored account for {identity} is unreadable: {e}")

    async def create(
        self,
        record: AccountRecord,
        overwrite: Optional[bool] = None,
    ) -> bool:
        """
        Write a new account under its identity.

        Args:
            record: Fully validated account
            overwrite: Replace an existing account instead of failing.
                       Defaults to the repository's allow_overwrite.

        Returns:
            True if an existing account was replaced

        Raises:
            DuplicateIdentityError: If the identity exists and overwrite is off
            StorageError: If the store fails
        """
        if overwrite is None:
            overwrite = self._allow_overwrite

        existing = await self._store.get_item(account_key(record.identity))
        if existing is not None and not overwrite:
            raise DuplicateIdentityError(record.identity)

        await self._store.set_item(account_key(record.identity), record.to_blob())
        return existing is not None

    async def authenticate(self, identity: str, password: str) -> AccountRecord:
        """
        Check a password against the stored account.

        Raises:
            NotFoundError: If no account exists for the identity
            InvalidCredentialsError: If the password does not match exactly
        """
        record = await self.find_by_identity(identity)
        if record is None:
            raise NotFoundError(identity)

        if not hmac.compare_digest(_password_bytes(record.password), _password_bytes(password)):
            raise InvalidCredentialsError(identity)
        return record

    async def update_balance(self, identity: str, new_balance: Decimal) -> AccountRecord:
        """
        Replace an account's balance.

        Reads the current record, swaps the balance and writes the whole
        record back.

        Raises:
            NotFoundError: If the account does not exist
            ValueError: If new_balance is negative
        """
        if new_balance < 0:
            raise ValueError(f"Balance cannot be negative: {new_balance}")

        record = await self.find_by_identity(identity)
        if record is None:
            raise NotFoundError(identity)

        updated = record.model_copy(update={"balance": Decimal(new_balance)})
        await self._store.set_item(account_key(identity), updated.to_blob())
        return updated
