"""
Two-Phase Deposit Writes

A deposit changes two keys: the account record (balance) and the deposit
history. The store cannot update both at once, so a deposit is written as:

1. Pending marker: amount, timestamp, ledger length, opening balance
2. Ledger append
3. Balance rewrite
4. Marker removal

If anything fails after step 1, the marker stays behind and recover()
settles it from the ledger, which is the record of what happened:
- Entry in the ledger: the deposit counts. The balance is recomputed as
  opening balance + ledger sum.
- Entry not in the ledger: the deposit never happened. The marker is
  discarded and the balance is left alone.

A partial failure can therefore only under-count, never credit twice.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from src.accounts.ledger import DepositLedger
from src.accounts.repository import AccountRepository
from src.models.account import AccountRecord, DepositEntry, PendingDeposit
from src.services.storage import NotFoundError


class RecoveredDeposit(BaseModel):
    """Outcome of settling an interrupted deposit."""

    pending: PendingDeposit
    applied: bool
    account: AccountRecord


def _ledger_sum(entries: list[DepositEntry]) -> Decimal:
    return sum((entry.amount for entry in entries), Decimal("0"))


class DepositProcessor:
    """Applies deposits to the balance and the ledger."""

    def __init__(
        self,
        repository: AccountRepository,
        ledger: DepositLedger,
        timestamp_format: str = "%d/%m/%Y, %I:%M:%S %p",
    ):
        self._repository = repository
        self._ledger = ledger
        self._timestamp_format = timestamp_format

    def now_label(self) -> str:
        """Current local time formatted for a deposit entry."""
        return datetime.now().strftime(self._timestamp_format)

    async def deposit(
        self,
        identity: str,
        amount: Decimal,
        timestamp: Optional[str] = None,
    ) -> AccountRecord:
        """
        Deposit into an account.

        Any interrupted deposit for the account is settled first.

        Args:
            identity: Account to credit
            amount: Positive amount, already validated
            timestamp: Display label for the entry; defaults to now

        Returns:
            The account as written, with the new balance

        Raises:
            NotFoundError: If the account does not exist
            StorageError: If any write fails. The deposit is then
                          settled by the next recover() for the account.
        """
        if amount <= 0:
            raise ValueError(f"Deposit amount must be positive: {amount}")

        await self.recover(identity)

        record = await self._repository.find_by_identity(identity)
        if record is None:
            raise NotFoundError(identity)

        history = await self._ledger.entries(identity)
        pending = PendingDeposit(
            amount=amount,
            timestamp=timestamp or self.now_label(),
            history_length=len(history),
            opening_balance=record.balance - _ledger_sum(history),
        )

        await self._ledger.set_pending(identity, pending)
        await self._ledger.append(identity, pending.entry)
        updated = await self._repository.update_balance(identity, record.balance + amount)
        await self._ledger.clear_pending(identity)

        return updated

    async def recover(self, identity: str) -> Optional[RecoveredDeposit]:
        """
        Settle an interrupted deposit, if there is one.

        The deposit is applied only if its entry reached the ledger.
        Otherwise it is discarded.

        Returns:
            What was settled, or None if no deposit was pending

        Raises:
            NotFoundError: If a deposit is pending for a missing account
        """
        pending = await self._ledger.get_pending(identity)
        if pending is None:
            return None

        record = await self._repository.find_by_identity(identity)
        if record is None:
            raise NotFoundError(identity)

        history = await self._ledger.entries(identity)
        applied = (
            len(history) > pending.history_length
            and history[pending.history_length] == pending.entry
        )

        if applied:
            balance = pending.opening_balance + _ledger_sum(history)
            if balance != record.balance:
                record = await self._repository.update_balance(identity, balance)

        await self._ledger.clear_pending(identity)

        return RecoveredDeposit(
            pending=pending,
            applied=applied,
            account=record,
        )
