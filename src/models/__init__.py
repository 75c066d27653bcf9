"""
Data Models Package

This package contains all Pydantic models used by the local ledger.
All data flowing through the system must conform to these schemas.
"""

from src.models.account import (
    AccountRecord,
    DepositEntry,
    FieldName,
    FormValidationResult,
    PendingDeposit,
    Session,
    ValidationResult,
    Verdict,
    format_currency,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Account models
    "AccountRecord",
    "DepositEntry",
    "FieldName",
    "FormValidationResult",
    "PendingDeposit",
    "Session",
    "ValidationResult",
    "Verdict",
    "format_currency",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
