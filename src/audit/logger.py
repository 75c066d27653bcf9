"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of every balance change
2. Debugging capability when a deposit is interrupted
3. A record of failed sign-ins

The audit logger:
- Is async so flows can await it like any other step
- Writes structured JSON lines through structlog
- Supports correlation IDs to trace related events
- Never records passwords
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Events are written to the structured local log. The most recent
    events are also kept in memory so the UI can show them.
    """

    def __init__(self, history_size: int = 100):
        self._logger = structlog.get_logger("ledger.audit")
        self._history_size = history_size
        self._recent: list[AuditEvent] = []

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._recent))

    async def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._recent.append(event)
        if len(self._recent) > self._history_size:
            del self._recent[0]

    async def log_account_created(
        self,
        identity: str,
        overwritten: bool,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.account_created(
            identity=identity,
            overwritten=overwritten,
            correlation_id=correlation_id,
        ))

    async def log_duplicate_rejected(
        self,
        identity: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.duplicate_rejected(
            identity=identity,
            correlation_id=correlation_id,
        ))

    async def log_sign_in(
        self,
        identity: str,
        succeeded: bool,
        correlation_id: UUID,
        reason: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.sign_in(
            identity=identity,
            succeeded=succeeded,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        form: str,
        errors: dict[str, str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.validation_failed(
            form=form,
            errors=errors,
            correlation_id=correlation_id,
        ))

    async def log_deposit_recorded(
        self,
        identity: str,
        amount: str,
        new_balance: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.deposit_recorded(
            identity=identity,
            amount=amount,
            new_balance=new_balance,
            correlation_id=correlation_id,
        ))

    async def log_deposit_recovered(
        self,
        identity: str,
        amount: str,
        applied: bool,
        balance: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.deposit_recovered(
            identity=identity,
            amount=amount,
            applied=applied,
            balance=balance,
            correlation_id=correlation_id,
        ))

    async def log_session_refreshed(
        self,
        identity: str,
        balance: str,
        deposit_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.session_refreshed(
            identity=identity,
            balance=balance,
            deposit_count=deposit_count,
            correlation_id=correlation_id,
        ))

    async def log_stale_session(
        self,
        identity: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.stale_session(identity, correlation_id))

    async def log_logged_out(
        self,
        identity: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.logged_out(identity, correlation_id))

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        identity: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            identity=identity,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a deposit).
    Pass it through all subsequent operations.
    """
    return uuid4()
