"""
Core Data Models for the Local Ledger

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the exact JSON shape kept in the key-value store

DESIGN DECISION: Money is held as Decimal in memory and written as a plain
JSON number. Records are read back with Decimal float parsing so a stored
150.5 never turns into 150.49999...
"""

import json
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
)


def _json_number(value: Decimal) -> int | float:
    """
    Render a Decimal as the JSON number a JavaScript client would write.

    Raises:
        ValueError: If the value has no exact JSON number form, so it would
                    read back as a different amount
    """
    if value == value.to_integral_value():
        return int(value)
    number = float(value)
    if Decimal(repr(number)) != value:
        raise ValueError(f"Amount {value} cannot be stored exactly")
    return number


def load_json(blob: str):
    """Parse a stored blob, keeping every non-integer number as Decimal."""
    return json.loads(blob, parse_float=Decimal)


def format_currency(amount: Optional[Decimal], symbol: str = "₹") -> str:
    """
    Format an amount with Indian digit grouping.

    Example: Decimal("123456.5") -> "₹1,23,456.50"
    """
    amount = Decimal(amount or 0).quantize(Decimal("0.01"))
    sign = "-" if amount < 0 else ""
    whole, fraction = f"{abs(amount):.2f}".split(".")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    return f"{sign}{symbol}{whole}.{fraction}"


# =============================================================================
# ACCOUNT MODELS
# =============================================================================

class AccountRecord(BaseModel):
    """
    A registered account as stored under its identity key.

    The identity is the email exactly as entered. It is serialized under
    the "email" field so stored records stay readable by older clients.

    Field formats are checked once, at creation, by the validation engine.
    Records read back from the store are trusted as-is.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(
        default=None,
        description="Full name"
    )
    identity: str = Field(
        ...,
        alias="email",
        min_length=1,
        description="Email address, the primary key of the account"
    )
    phone: Optional[str] = Field(
        default=None,
        description="10-digit phone number"
    )
    aadhar: Optional[str] = Field(
        default=None,
        description="12-digit Aadhar number"
    )
    pan: Optional[str] = Field(
        default=None,
        description="PAN in the form ABCDE1234F"
    )
    password: str = Field(
        ...,
        description="Password, stored in plaintext"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Current balance in INR"
    )

    @field_serializer("balance", when_used="json")
    def serialize_balance(self, value: Decimal) -> int | float:
        return _json_number(value)

    def to_blob(self) -> str:
        """Serialize to the JSON string written to the store."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_blob(cls, blob: str) -> "AccountRecord":
        """Deserialize a stored JSON string."""
        return cls.model_validate(load_json(blob))

    @property
    def display_name(self) -> str:
        return self.name or self.identity

    @property
    def masked_aadhar(self) -> str:
        """Aadhar with all but the last four digits hidden."""
        if not self.aadhar:
            return "Not provided"
        return f"XXXX-XXXX-{self.aadhar[-4:]}"

    @property
    def formatted_phone(self) -> str:
        """Phone as 123-456-7890."""
        if not self.phone:
            return "Not provided"
        return f"{self.phone[:3]}-{self.phone[3:6]}-{self.phone[6:]}"


class DepositEntry(BaseModel):
    """
    A single deposit in an account's ledger.

    The timestamp is a display label. Entries are ordered by insertion,
    never by parsing the timestamp.
    """

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Deposited amount in INR"
    )
    timestamp: str = Field(
        ...,
        description="When the deposit was made, formatted for display"
    )

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, value: Decimal) -> int | float:
        return _json_number(value)


class PendingDeposit(BaseModel):
    """
    Intent record written before a deposit touches the ledger or balance.

    If the process dies part-way, reconciliation uses this to settle the
    deposit.
    """

    amount: Decimal = Field(..., gt=0)
    timestamp: str
    history_length: int = Field(
        ...,
        ge=0,
        description="Ledger length before the entry was appended"
    )
    opening_balance: Decimal = Field(
        ...,
        description="Balance not accounted for by ledger entries"
    )

    @field_serializer("amount", "opening_balance", when_used="json")
    def serialize_money(self, value: Decimal) -> int | float:
        return _json_number(value)

    @property
    def entry(self) -> DepositEntry:
        return DepositEntry(amount=self.amount, timestamp=self.timestamp)


class Session(BaseModel):
    """
    The signed-in account as the screens currently see it.

    Never persisted. A dirty session may be older than the store and must
    be refreshed before it is shown again.
    """
    model_config = ConfigDict(frozen=True)

    account: AccountRecord
    dirty: bool = False
    deposits: list[DepositEntry] = Field(
        default_factory=list,
        description="Deposits, most recent first, as of the last refresh"
    )

    @property
    def identity(self) -> str:
        return self.account.identity

    @property
    def balance(self) -> Decimal:
        return self.account.balance


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class FieldName(str, Enum):
    """Form fields the validation engine knows about."""
    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    AADHAR = "aadhar"
    PAN = "pan"
    PASSWORD = "password"
    SIGN_IN_PASSWORD = "sign_in_password"


class Verdict(str, Enum):
    """
    Three-way outcome used for live field feedback.

    INCOMPLETE means the value can still become valid by typing more.
    """
    INVALID = "invalid"
    INCOMPLETE = "incomplete"
    VALID = "valid"


class ValidationResult(BaseModel):
    """Verdict and status message for one field value."""
    model_config = ConfigDict(frozen=True)

    field: FieldName
    verdict: Verdict
    message: str

    # Password strength only
    score: Optional[int] = Field(default=None, ge=0, le=5)
    missing: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.verdict == Verdict.VALID


class FormValidationResult(BaseModel):
    """Results for every field of a submitted form."""

    results: dict[FieldName, ValidationResult] = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return all(result.is_valid for result in self.results.values())

    @property
    def errors(self) -> dict[FieldName, str]:
        """Messages of fields that block submission."""
        return {
            name: result.message
            for name, result in self.results.items()
            if not result.is_valid
        }

    @property
    def error_count(self) -> int:
        return len(self.errors)
