"""
Field Validation Engine

DESIGN DECISION: Validation is a pure function of (field, raw value).
It runs on every keystroke for live feedback and once more on submit to
gate the store write. There is no shared status object: the caller keeps
the latest result per field.

Each field maps to one of three verdicts:
- VALID: the value passes the field's blocking rule
- INCOMPLETE: not valid yet, but more typing can make it valid
- INVALID: the value is wrong as it stands

IMPORTANT: Validation never touches storage and never fixes values.
It reports problems for the user to correct.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Mapping, Optional

from src.models.account import (
    FieldName,
    FormValidationResult,
    ValidationResult,
    Verdict,
)


EMAIL_PATTERN = re.compile(
    r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}",
    re.IGNORECASE | re.ASCII,
)
PAN_PATTERN = re.compile(r"[A-Z]{5}[0-9]{4}[A-Z]")
DIGITS_PATTERN = re.compile(r"[0-9]*")

PHONE_LENGTH = 10
AADHAR_LENGTH = 12
PAN_LENGTH = 10
NAME_MIN_LENGTH = 2
PASSWORD_MIN_LENGTH = 8
SIGN_IN_PASSWORD_MIN_LENGTH = 6

# Deposit amounts: whole paise, at most this much per deposit
AMOUNT_QUANTUM = Decimal("0.01")
MAX_DEPOSIT_AMOUNT = Decimal("1000000000")

# Fields of each form, keyed by the form's input name
ACCOUNT_FORM_FIELDS = {
    "name": FieldName.NAME,
    "email": FieldName.EMAIL,
    "phone": FieldName.PHONE,
    "aadhar": FieldName.AADHAR,
    "pan": FieldName.PAN,
    "password": FieldName.PASSWORD,
}
SIGN_IN_FORM_FIELDS = {
    "email": FieldName.EMAIL,
    "password": FieldName.SIGN_IN_PASSWORD,
}


class ValidationFailedError(Exception):
    """A submitted value did not pass validation. Nothing was written."""

    def __init__(self, message: str, result: Optional[FormValidationResult] = None):
        self.result = result
        super().__init__(message)

    @property
    def errors(self) -> dict[FieldName, str]:
        return self.result.errors if self.result else {}


def _result(field: FieldName, verdict: Verdict, message: str, **extra) -> ValidationResult:
    return ValidationResult(field=field, verdict=verdict, message=message, **extra)


def _validate_name(raw: str) -> ValidationResult:
    if not raw:
        return _result(FieldName.NAME, Verdict.INVALID, "Name is required")
    if len(raw) < NAME_MIN_LENGTH:
        return _result(
            FieldName.NAME,
            Verdict.INCOMPLETE,
            f"Name must be at least {NAME_MIN_LENGTH} characters",
        )
    return _result(FieldName.NAME, Verdict.VALID, "Valid name")


def _validate_email(raw: str) -> ValidationResult:
    if "@" not in raw:
        return _result(FieldName.EMAIL, Verdict.INCOMPLETE, "Must include @ symbol")
    if not EMAIL_PATTERN.fullmatch(raw):
        return _result(FieldName.EMAIL, Verdict.INVALID, "Invalid email format")
    return _result(FieldName.EMAIL, Verdict.VALID, "Valid email")


def _validate_digit_run(
    field: FieldName,
    raw: str,
    length: int,
    label: str,
) -> ValidationResult:
    """Shared policy for fixed-length numeric identifiers."""
    if not DIGITS_PATTERN.fullmatch(raw):
        return _result(field, Verdict.INVALID, "Only numbers allowed")
    if len(raw) < length:
        return _result(
            field,
            Verdict.INCOMPLETE,
            f"{length - len(raw)} digits remaining",
        )
    if len(raw) > length:
        return _result(field, Verdict.INVALID, f"Must be exactly {length} digits")
    return _result(field, Verdict.VALID, f"Valid {label}")


def _validate_pan(raw: str) -> ValidationResult:
    if len(raw) < PAN_LENGTH:
        return _result(
            FieldName.PAN,
            Verdict.INCOMPLETE,
            f"{PAN_LENGTH - len(raw)} characters remaining",
        )
    if not PAN_PATTERN.fullmatch(raw):
        return _result(FieldName.PAN, Verdict.INVALID, "Must match format: ABCDE1234F")
    return _result(FieldName.PAN, Verdict.VALID, "Valid PAN number")


def password_strength(raw: str) -> tuple[int, list[str]]:
    """
    Score a password from 0 to 5.

    One point each for: 8+ characters, an uppercase letter, a lowercase
    letter, a digit, and a character that is not an ASCII letter or digit.

    Returns: (score, names_of_missing_requirements)
    """
    checks = [
        ("8+ characters", len(raw) >= PASSWORD_MIN_LENGTH),
        ("uppercase", re.search(r"[A-Z]", raw) is not None),
        ("lowercase", re.search(r"[a-z]", raw) is not None),
        ("number", re.search(r"[0-9]", raw) is not None),
        ("special char", re.search(r"[^A-Za-z0-9]", raw) is not None),
    ]
    missing = [name for name, passed in checks if not passed]
    return len(checks) - len(missing), missing


def strength_label(score: int) -> str:
    if score < 2:
        return "Weak"
    if score < 4:
        return "Medium"
    if score < 5:
        return "Strong"
    return "Very strong"


def _validate_password(raw: str) -> ValidationResult:
    score, missing = password_strength(raw)
    label = strength_label(score)

    if not missing:
        return _result(FieldName.PASSWORD, Verdict.VALID, label, score=score)

    # Every missing requirement can still be met by typing more
    return _result(
        FieldName.PASSWORD,
        Verdict.INCOMPLETE,
        f"{label}: need {', '.join(missing)}",
        score=score,
        missing=missing,
    )


def _validate_sign_in_password(raw: str) -> ValidationResult:
    if not raw:
        return _result(FieldName.SIGN_IN_PASSWORD, Verdict.INVALID, "Password is required")
    if len(raw) < SIGN_IN_PASSWORD_MIN_LENGTH:
        return _result(
            FieldName.SIGN_IN_PASSWORD,
            Verdict.INCOMPLETE,
            f"{SIGN_IN_PASSWORD_MIN_LENGTH - len(raw)} more characters needed",
        )
    return _result(FieldName.SIGN_IN_PASSWORD, Verdict.VALID, "Password length OK")


_VALIDATORS = {
    FieldName.NAME: _validate_name,
    FieldName.EMAIL: _validate_email,
    FieldName.PHONE: lambda raw: _validate_digit_run(
        FieldName.PHONE, raw, PHONE_LENGTH, "phone number"
    ),
    FieldName.AADHAR: lambda raw: _validate_digit_run(
        FieldName.AADHAR, raw, AADHAR_LENGTH, "Aadhar number"
    ),
    FieldName.PAN: _validate_pan,
    FieldName.PASSWORD: _validate_password,
    FieldName.SIGN_IN_PASSWORD: _validate_sign_in_password,
}


def validate(field: FieldName | str, raw: Optional[str]) -> ValidationResult:
    """
    Validate one raw field value.

    Total: any string (or None, treated as empty) yields a result.

    Args:
        field: Which field the value belongs to
        raw: The value exactly as typed

    Returns:
        ValidationResult with verdict and status message
    """
    return _VALIDATORS[FieldName(field)](raw or "")


def _check_form(form: Mapping[str, Optional[str]], fields: dict[str, FieldName]) -> FormValidationResult:
    return FormValidationResult(
        results={
            field: validate(field, form.get(input_name))
            for input_name, field in fields.items()
        }
    )


def check_account_form(form: Mapping[str, Optional[str]]) -> FormValidationResult:
    """Validate every account-creation field without raising."""
    return _check_form(form, ACCOUNT_FORM_FIELDS)


def check_sign_in_form(form: Mapping[str, Optional[str]]) -> FormValidationResult:
    """Validate the sign-in fields without raising."""
    return _check_form(form, SIGN_IN_FORM_FIELDS)


def validate_account_form(form: Mapping[str, Optional[str]]) -> FormValidationResult:
    """
    Gate account creation.

    Raises:
        ValidationFailedError: If any field is not VALID
    """
    result = check_account_form(form)
    if not result.is_valid:
        raise ValidationFailedError("Account details are not valid", result)
    return result


def validate_sign_in_form(form: Mapping[str, Optional[str]]) -> FormValidationResult:
    """
    Gate sign-in.

    Raises:
        ValidationFailedError: If email or password is not VALID
    """
    result = check_sign_in_form(form)
    if not result.is_valid:
        raise ValidationFailedError("Sign-in details are not valid", result)
    return result


def parse_deposit_amount(raw: Optional[str]) -> Decimal:
    """
    Parse the amount typed into the deposit form.

    The amount is rounded to whole paise.

    Raises:
        ValidationFailedError: If the amount is not a positive number, rounds
                               to zero, or exceeds MAX_DEPOSIT_AMOUNT
    """
    try:
        amount = Decimal((raw or "").strip())
    except InvalidOperation:
        raise ValidationFailedError("Please enter a valid amount to deposit.")

    if not amount.is_finite() or amount <= 0 or amount > MAX_DEPOSIT_AMOUNT:
        raise ValidationFailedError("Please enter a valid amount to deposit.")

    amount = amount.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise ValidationFailedError("Please enter a valid amount to deposit.")
    return amount


def get_user_friendly_summary(result: FormValidationResult) -> str:
    """
    Generate a user-friendly summary of a form's validation results.

    This is what the screens show under the submit button.
    """
    if result.is_valid:
        return "✅ All details look good."

    lines = ["❌ Please fix the following:"]
    for field, message in result.errors.items():
        label = field.value.replace("_", " ").capitalize()
        lines.append(f"   • {label}: {message}")
    return "\n".join(lines)
