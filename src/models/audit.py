"""
Audit Models for the Local Ledger

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of account creation, sign-in and deposits
2. Debugging information when a storage write fails part-way
3. Ability to reconstruct what happened to a balance

DESIGN DECISION: Audit events identify accounts by identity (email).
Passwords never appear in an event.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Account lifecycle
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_OVERWRITTEN = "account_overwritten"
    DUPLICATE_REJECTED = "duplicate_rejected"

    # Sign-in
    SIGN_IN_SUCCEEDED = "sign_in_succeeded"
    SIGN_IN_FAILED = "sign_in_failed"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Deposits
    DEPOSIT_RECORDED = "deposit_recorded"
    DEPOSIT_RECOVERED = "deposit_recovered"

    # Session
    SESSION_REFRESHED = "session_refreshed"
    STALE_SESSION = "stale_session"
    LOGGED_OUT = "logged_out"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Which account is this about?
    identity: Optional[str] = Field(
        default=None,
        description="Identity (email) of the account involved"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one deposit flow)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "identity": self.identity,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_created(identity, correlation_id)
        event = AuditEventBuilder.deposit_recorded(identity, "50.5", "150.5", correlation_id)
    """

    @staticmethod
    def account_created(
        identity: str,
        overwritten: bool,
        correlation_id: UUID
    ) -> AuditEvent:
        if overwritten:
            return AuditEvent(
                event_type=AuditEventType.ACCOUNT_OVERWRITTEN,
                severity=AuditSeverity.WARNING,
                identity=identity,
                correlation_id=correlation_id,
                description="Account created over an existing account",
                is_user_action=True,
            )
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            identity=identity,
            correlation_id=correlation_id,
            description="Account created",
            is_user_action=True,
        )

    @staticmethod
    def duplicate_rejected(
        identity: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DUPLICATE_REJECTED,
            severity=AuditSeverity.WARNING,
            identity=identity,
            correlation_id=correlation_id,
            description="Account creation rejected: identity already registered",
            is_user_action=True,
        )

    @staticmethod
    def sign_in(
        identity: str,
        succeeded: bool,
        reason: Optional[str],
        correlation_id: UUID
    ) -> AuditEvent:
        if succeeded:
            return AuditEvent(
                event_type=AuditEventType.SIGN_IN_SUCCEEDED,
                identity=identity,
                correlation_id=correlation_id,
                description="Signed in",
                is_user_action=True,
            )
        return AuditEvent(
            event_type=AuditEventType.SIGN_IN_FAILED,
            severity=AuditSeverity.WARNING,
            identity=identity,
            correlation_id=correlation_id,
            description=f"Sign-in failed: {reason}",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        form: str,
        errors: dict[str, str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"{form} form rejected with {len(errors)} invalid fields",
            details={"form": form, "errors": errors},
            is_user_action=True,
        )

    @staticmethod
    def deposit_recorded(
        identity: str,
        amount: str,
        new_balance: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEPOSIT_RECORDED,
            identity=identity,
            correlation_id=correlation_id,
            description=f"Deposit recorded: ₹{amount}",
            details={
                "amount": amount,
                "new_balance": new_balance,
            },
            is_user_action=True,
        )

    @staticmethod
    def deposit_recovered(
        identity: str,
        amount: str,
        applied: bool,
        balance: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEPOSIT_RECOVERED,
            severity=AuditSeverity.WARNING,
            identity=identity,
            correlation_id=correlation_id,
            description=f"Interrupted deposit of ₹{amount} {'applied' if applied else 'discarded'}",
            details={
                "amount": amount,
                "applied": applied,
                "balance": balance,
            },
        )

    @staticmethod
    def session_refreshed(
        identity: str,
        balance: str,
        deposit_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_REFRESHED,
            severity=AuditSeverity.DEBUG,
            identity=identity,
            correlation_id=correlation_id,
            description="Session refreshed from store",
            details={
                "balance": balance,
                "deposit_count": deposit_count,
            },
        )

    @staticmethod
    def stale_session(
        identity: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STALE_SESSION,
            severity=AuditSeverity.ERROR,
            identity=identity,
            correlation_id=correlation_id,
            description="Account record missing for an active session",
        )

    @staticmethod
    def logged_out(
        identity: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGGED_OUT,
            identity=identity,
            correlation_id=correlation_id,
            description="Logged out",
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        identity: Optional[str] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            identity=identity,
            correlation_id=correlation_id,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
        )
