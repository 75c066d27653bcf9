"""
Session Reconciler

Keeps the account the screens show in step with the last durable write.

DESIGN DECISION: The session is an explicit, immutable value. Screens hold
it and pass it back in; every operation returns a new Session. Nothing is
read from an ambient "current user" key.

- begin(): adopt the record handed over by sign-in or creation, no re-read
- mark_dirty(): a deposit happened, the snapshot may be old
- refresh(): re-read record and ledger (settling any interrupted deposit)
- on_return(): refresh only if dirty
- logout(): drop the session; account data stays
"""

from typing import Optional
from uuid import UUID

from src.accounts import DepositLedger, DepositProcessor, AccountRepository, LEGACY_SESSION_KEY
from src.audit import AuditLogger
from src.models.account import AccountRecord, Session
from src.services.storage import KeyValueStoreInterface, NotFoundError


class StaleSessionError(Exception):
    """The account behind an active session no longer exists."""

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__("User data not found")


class SessionReconciler:
    """Refreshes Session snapshots from the store."""

    def __init__(
        self,
        store: KeyValueStoreInterface,
        repository: AccountRepository,
        ledger: DepositLedger,
        processor: DepositProcessor,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._repository = repository
        self._ledger = ledger
        self._processor = processor
        self._audit_logger = audit_logger

    def begin(self, account: AccountRecord) -> Session:
        """Start a session from a freshly loaded record."""
        return Session(account=account)

    def mark_dirty(self, session: Session) -> Session:
        return session.model_copy(update={"dirty": True})

    async def refresh(
        self,
        session: Session,
        correlation_id: Optional[UUID] = None,
    ) -> Session:
        """
        Re-read the account and its ledger.

        Returns:
            A clean Session with the stored balance and latest-first deposits

        Raises:
            StaleSessionError: If the account record has vanished
            StorageError: If the store fails
        """
        identity = session.identity

        try:
            recovered = await self._processor.recover(identity)
        except NotFoundError:
            recovered = None

        if recovered and self._audit_logger:
            await self._audit_logger.log_deposit_recovered(
                identity=identity,
                amount=str(recovered.pending.amount),
                applied=recovered.applied,
                balance=str(recovered.account.balance),
                correlation_id=correlation_id,
            )

        record = await self._repository.find_by_identity(identity)
        if record is None:
            if self._audit_logger:
                await self._audit_logger.log_stale_session(identity, correlation_id)
            raise StaleSessionError(identity)

        deposits = await self._ledger.list(identity)

        if self._audit_logger:
            await self._audit_logger.log_session_refreshed(
                identity=identity,
                balance=str(record.balance),
                deposit_count=len(deposits),
                correlation_id=correlation_id,
            )

        return Session(account=record, dirty=False, deposits=deposits)

    async def on_return(
        self,
        session: Session,
        correlation_id: Optional[UUID] = None,
    ) -> Session:
        """Called when the dashboard regains focus."""
        if session.dirty:
            return await self.refresh(session, correlation_id)
        return session

    async def logout(
        self,
        session: Session,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        End the session.

        Clears the legacy "user" key. The account record and ledger are
        left untouched.
        """
        await self._store.remove_item(LEGACY_SESSION_KEY)

        if self._audit_logger:
            await self._audit_logger.log_logged_out(session.identity, correlation_id)
