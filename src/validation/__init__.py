"""Field validation package."""

from src.validation.validator import (
    ValidationFailedError,
    check_account_form,
    check_sign_in_form,
    get_user_friendly_summary,
    parse_deposit_amount,
    password_strength,
    strength_label,
    validate,
    validate_account_form,
    validate_sign_in_form,
)

__all__ = [
    "ValidationFailedError",
    "check_account_form",
    "check_sign_in_form",
    "get_user_friendly_summary",
    "parse_deposit_amount",
    "password_strength",
    "strength_label",
    "validate",
    "validate_account_form",
    "validate_sign_in_form",
]
