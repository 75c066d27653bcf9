"""Account repository, deposit ledger and deposit writes."""

from src.accounts.deposits import DepositProcessor, RecoveredDeposit
from src.accounts.keys import (
    LEGACY_SESSION_KEY,
    account_key,
    history_key,
    pending_deposit_key,
)
from src.accounts.ledger import DepositLedger
from src.accounts.repository import AccountRepository, InvalidCredentialsError

__all__ = [
    "AccountRepository",
    "DepositLedger",
    "DepositProcessor",
    "InvalidCredentialsError",
    "LEGACY_SESSION_KEY",
    "RecoveredDeposit",
    "account_key",
    "history_key",
    "pending_deposit_key",
]
