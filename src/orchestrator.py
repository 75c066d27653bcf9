"""
Main Orchestrator for the Local Ledger

This module ties together all the components and defines the
end-to-end flows the screens call:
1. Account (validate → create / validate → authenticate → session)
2. Deposit (parse amount → two-phase write → dirty session)
3. Dashboard (adopt session → refresh on return → logout)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches storage without passing validation
- A deposit only counts once both the ledger and the balance are written
- Every step is audited

Errors are logged and re-raised untouched; screens decide how to show them.
"""

from decimal import Decimal
from typing import Mapping, Optional
from uuid import UUID

from src.accounts import (
    AccountRepository,
    DepositLedger,
    DepositProcessor,
    InvalidCredentialsError,
)
from src.audit import AuditLogger, create_correlation_id
from src.config import get_settings
from src.models.account import AccountRecord, DepositEntry, Session
from src.models.audit import AuditEvent, AuditSeverity
from src.services.storage import (
    DuplicateIdentityError,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStoreInterface,
    NotFoundError,
    StorageError,
)
from src.session import SessionReconciler, StaleSessionError
from src.validation import (
    ValidationFailedError,
    parse_deposit_amount,
    validate_account_form,
    validate_sign_in_form,
)


def _error_messages(error: ValidationFailedError) -> dict[str, str]:
    if error.result is None:
        return {"form": str(error)}
    return {field.value: message for field, message in error.errors.items()}


class AccountFlow:
    """
    Orchestrates account creation and sign-in.

    Flow:
    1. Validate every field (blocks on any failure, nothing written)
    2. Create the account, or authenticate against it
    3. Hand back the record / a new Session
    """

    def __init__(
        self,
        repository: AccountRepository,
        reconciler: SessionReconciler,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._repository = repository
        self._reconciler = reconciler
        self._audit_logger = audit_logger

    async def create_account(
        self,
        form: Mapping[str, Optional[str]],
        correlation_id: Optional[UUID] = None,
    ) -> AccountRecord:
        """
        Register a new account with a zero balance.

        Args:
            form: Raw input keyed by name, email, phone, aadhar, pan, password

        Returns:
            The stored record

        Raises:
            ValidationFailedError: If any field is not valid
            DuplicateIdentityError: If the email is taken (strict mode)
            StorageError: If the write fails
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            validate_account_form(form)
        except ValidationFailedError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    form="create_account",
                    errors=_error_messages(e),
                    correlation_id=correlation_id,
                )
            raise

        record = AccountRecord(
            name=form["name"],
            identity=form["email"],
            phone=form["phone"],
            aadhar=form["aadhar"],
            pan=form["pan"],
            password=form["password"],
            balance=Decimal("0"),
        )

        try:
            replaced = await self._repository.create(record)
        except DuplicateIdentityError:
            if self._audit_logger:
                await self._audit_logger.log_duplicate_rejected(
                    identity=record.identity,
                    correlation_id=correlation_id,
                )
            raise
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation="create_account",
                    error_message=str(e),
                    identity=record.identity,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_account_created(
                identity=record.identity,
                overwritten=replaced,
                correlation_id=correlation_id,
            )

        return record

    async def sign_in(
        self,
        form: Mapping[str, Optional[str]],
        correlation_id: Optional[UUID] = None,
    ) -> Session:
        """
        Sign in with email and password.

        Returns:
            A Session holding the stored record

        Raises:
            ValidationFailedError: If email or password fails the sign-in rules
            NotFoundError: If no account exists for the email
            InvalidCredentialsError: If the password does not match
            StorageError: If the read fails
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            validate_sign_in_form(form)
        except ValidationFailedError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    form="sign_in",
                    errors=_error_messages(e),
                    correlation_id=correlation_id,
                )
            raise

        identity = form["email"]

        try:
            record = await self._repository.authenticate(identity, form["password"])
        except NotFoundError:
            if self._audit_logger:
                await self._audit_logger.log_sign_in(
                    identity, False, correlation_id, reason="not_found"
                )
            raise
        except InvalidCredentialsError:
            if self._audit_logger:
                await self._audit_logger.log_sign_in(
                    identity, False, correlation_id, reason="invalid_credentials"
                )
            raise
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation="sign_in",
                    error_message=str(e),
                    identity=identity,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_sign_in(identity, True, correlation_id)

        return self._reconciler.begin(record)


class DepositFlow:
    """
    Orchestrates deposits.

    The returned session is marked dirty; the dashboard refreshes it when
    it regains focus.
    """

    def __init__(
        self,
        processor: DepositProcessor,
        ledger: DepositLedger,
        reconciler: SessionReconciler,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._processor = processor
        self._ledger = ledger
        self._reconciler = reconciler
        self._audit_logger = audit_logger

    async def deposit(
        self,
        session: Session,
        raw_amount: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> Session:
        """
        Deposit the typed amount into the session's account.

        Raises:
            ValidationFailedError: If the amount is not a positive number
            StaleSessionError: If the account no longer exists
            StorageError: If a write fails (settled on the next refresh)
        """
        correlation_id = correlation_id or create_correlation_id()
        identity = session.identity

        try:
            amount = parse_deposit_amount(raw_amount)
        except ValidationFailedError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    form="deposit",
                    errors=_error_messages(e),
                    correlation_id=correlation_id,
                )
            raise

        try:
            updated = await self._processor.deposit(identity, amount)
        except NotFoundError:
            if self._audit_logger:
                await self._audit_logger.log_stale_session(identity, correlation_id)
            raise StaleSessionError(identity)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation="deposit",
                    error_message=str(e),
                    identity=identity,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_deposit_recorded(
                identity=identity,
                amount=str(amount),
                new_balance=str(updated.balance),
                correlation_id=correlation_id,
            )

        return self._reconciler.mark_dirty(
            session.model_copy(update={"account": updated})
        )

    async def history(self, session: Session) -> list[DepositEntry]:
        """Deposits for the session's account, most recent first."""
        return await self._ledger.list(session.identity)


class DashboardFlow:
    """Keeps the dashboard's session fresh."""

    def __init__(
        self,
        reconciler: SessionReconciler,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._reconciler = reconciler
        self._audit_logger = audit_logger

    async def refresh(
        self,
        session: Session,
        correlation_id: Optional[UUID] = None,
    ) -> Session:
        """Pull-to-refresh."""
        return await self._reconciler.refresh(session, correlation_id)

    async def on_return(
        self,
        session: Session,
        correlation_id: Optional[UUID] = None,
    ) -> Session:
        """Back from the deposit screen."""
        return await self._reconciler.on_return(session, correlation_id)

    async def logout(
        self,
        session: Session,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self._reconciler.logout(session, correlation_id)

    def activity(self, session: Session, limit: int = 5) -> list[AuditEvent]:
        """Recent notable events for the session's account, newest first."""
        if not self._audit_logger:
            return []
        events = [
            event for event in self._audit_logger.recent_events
            if event.identity == session.identity
            and event.severity != AuditSeverity.DEBUG
        ]
        return events[:limit]


def create_store(use_storage: bool = True) -> KeyValueStoreInterface:
    """
    Build the key-value store selected by settings.

    Args:
        use_storage: False forces an in-memory store regardless of settings.
    """
    if not use_storage:
        return InMemoryKeyValueStore()

    storage_settings = get_settings().storage
    if storage_settings.backend == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(storage_settings.path)


def create_app_components(
    use_storage: bool = True,
    store: Optional[KeyValueStoreInterface] = None,
) -> tuple[AccountFlow, DepositFlow, DashboardFlow]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist to the configured store.
                    Set to False for an in-memory store.
        store: Use this store instead of building one from settings.

    Returns:
        (account_flow, deposit_flow, dashboard_flow)
    """
    app_settings = get_settings().app
    if store is None:
        store = create_store(use_storage)
    audit_logger = AuditLogger()

    repository = AccountRepository(store, allow_overwrite=app_settings.allow_overwrite)
    ledger = DepositLedger(store)
    processor = DepositProcessor(
        repository,
        ledger,
        timestamp_format=app_settings.timestamp_format,
    )
    reconciler = SessionReconciler(
        store=store,
        repository=repository,
        ledger=ledger,
        processor=processor,
        audit_logger=audit_logger,
    )

    account_flow = AccountFlow(repository, reconciler, audit_logger)
    deposit_flow = DepositFlow(processor, ledger, reconciler, audit_logger)
    dashboard_flow = DashboardFlow(reconciler, audit_logger)

    return account_flow, deposit_flow, dashboard_flow
