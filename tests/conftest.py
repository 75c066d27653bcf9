"""Shared fixtures: in-memory store, core components and flows."""

from decimal import Decimal

import pytest

from src.accounts import AccountRepository, DepositLedger, DepositProcessor
from src.audit import AuditLogger
from src.models.account import AccountRecord
from src.orchestrator import AccountFlow, DashboardFlow, DepositFlow
from src.services.storage import InMemoryKeyValueStore, StorageError
from src.session import SessionReconciler


class FlakyStore(InMemoryKeyValueStore):
    """In-memory store whose writes to chosen keys fail."""

    def __init__(self):
        super().__init__()
        self.failing_keys: set[str] = set()
        self.fail_reads = False

    async def get_item(self, key):
        if self.fail_reads:
            raise StorageError("read failed")
        return await super().get_item(key)

    async def set_item(self, key, value):
        if key in self.failing_keys:
            raise StorageError(f"write to {key} failed")
        await super().set_item(key, value)


VALID_FORM = {
    "name": "Asha Rao",
    "email": "a@b.com",
    "phone": "9876543210",
    "aadhar": "123456789012",
    "pan": "ABCDE1234F",
    "password": "Abcdef1!",
}


def make_account(email: str = "a@b.com", balance: str = "0", **overrides) -> AccountRecord:
    fields = {
        "name": "Asha Rao",
        "identity": email,
        "phone": "9876543210",
        "aadhar": "123456789012",
        "pan": "ABCDE1234F",
        "password": "Abcdef1!",
        "balance": Decimal(balance),
    }
    fields.update(overrides)
    return AccountRecord(**fields)


@pytest.fixture
def valid_form() -> dict:
    return dict(VALID_FORM)


@pytest.fixture
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


@pytest.fixture
def repository(store) -> AccountRepository:
    return AccountRepository(store)


@pytest.fixture
def ledger(store) -> DepositLedger:
    return DepositLedger(store)


@pytest.fixture
def processor(repository, ledger) -> DepositProcessor:
    return DepositProcessor(repository, ledger)


@pytest.fixture
def reconciler(store, repository, ledger, processor, audit_logger) -> SessionReconciler:
    return SessionReconciler(store, repository, ledger, processor, audit_logger)


@pytest.fixture
def account_flow(repository, reconciler, audit_logger) -> AccountFlow:
    return AccountFlow(repository, reconciler, audit_logger)


@pytest.fixture
def deposit_flow(processor, ledger, reconciler, audit_logger) -> DepositFlow:
    return DepositFlow(processor, ledger, reconciler, audit_logger)


@pytest.fixture
def dashboard_flow(reconciler, audit_logger) -> DashboardFlow:
    return DashboardFlow(reconciler, audit_logger)
