"""
Deposit Ledger

Each account's deposits are a JSON array stored under its own key,
separate from the account record. The array is append-only.

The ledger also keeps the pending-deposit marker used to settle a deposit
that was interrupted between the ledger write and the balance write.
"""

from typing import Optional

from pydantic import ValidationError

from src.accounts.keys import history_key, pending_deposit_key
from src.models.account import DepositEntry, PendingDeposit, load_json
from src.services.storage import KeyValueStoreInterface, StorageError


class DepositLedger:
    """Append-only deposit history per account."""

    def __init__(self, store: KeyValueStoreInterface):
        self._store = store

    async def entries(self, identity: str) -> list[DepositEntry]:
        """Deposits in the order they were made. Empty if none."""
        blob = await self._store.get_item(history_key(identity))
        if blob is None:
            return []

        try:
            data = load_json(blob)
            if not isinstance(data, list):
                raise ValueError("deposit history is not a list")
            return [DepositEntry.model_validate(item) for item in data]
        except (ValueError, ValidationError) as e:
            raise StorageError(f"Deposit history for {identity} is unreadable: {e}")

    async def _write(self, identity: str, entries: list[DepositEntry]) -> None:
        blob = "[" + ",".join(entry.model_dump_json() for entry in entries) + "]"
        await self._store.set_item(history_key(identity), blob)

    async def append(self, identity: str, entry: DepositEntry) -> list[DepositEntry]:
        """
        Add a deposit to the end of the history.

        Returns:
            The full history after the append, oldest first

        Raises:
            StorageError: If the read or write fails
        """
        history = await self.entries(identity)
        history.append(entry)
        await self._write(identity, history)
        return history

    # Pending deposit marker

    async def get_pending(self, identity: str) -> Optional[PendingDeposit]:
        blob = await self._store.get_item(pending_deposit_key(identity))
        if blob is None:
            return None

        try:
            return PendingDeposit.model_validate(load_json(blob))
        except (ValueError, ValidationError) as e:
            raise StorageError(f"Pending deposit for {identity} is unreadable: {e}")

    async def set_pending(self, identity: str, pending: PendingDeposit) -> None:
        await self._store.set_item(pending_deposit_key(identity), pending.model_dump_json())

    async def clear_pending(self, identity: str) -> None:
        await self._store.remove_item(pending_deposit_key(identity))

    async def list(self, identity: str) -> list[DepositEntry]:
        """
        Deposits for display, most recent first.

        Raises:
            StorageError: If the read fails
        """
        history = await self.entries(identity)
        history.reverse()
        return history
