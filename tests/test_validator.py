"""Tests for the field validation engine."""

import re
from decimal import Decimal

import pytest

from src.models.account import FieldName, Verdict
from src.validation import (
    ValidationFailedError,
    check_account_form,
    get_user_friendly_summary,
    parse_deposit_amount,
    password_strength,
    strength_label,
    validate,
    validate_account_form,
    validate_sign_in_form,
)


EMAIL_REGEX = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$", re.IGNORECASE | re.ASCII)


class TestNameValidation:
    """Tests for the name rule."""

    def test_empty_name_is_invalid(self):
        result = validate(FieldName.NAME, "")
        assert result.verdict == Verdict.INVALID
        assert result.message == "Name is required"

    def test_single_character_is_incomplete(self):
        assert validate(FieldName.NAME, "A").verdict == Verdict.INCOMPLETE

    def test_two_characters_is_valid(self):
        assert validate(FieldName.NAME, "Al").verdict == Verdict.VALID

    def test_whitespace_counts_as_characters(self):
        assert validate(FieldName.NAME, "  ").verdict == Verdict.VALID
        assert validate(FieldName.NAME, " ").verdict == Verdict.INCOMPLETE


class TestEmailValidation:
    """Tests for the email rule."""

    def test_missing_at_symbol(self):
        result = validate(FieldName.EMAIL, "asha.rao")
        assert result.verdict == Verdict.INCOMPLETE
        assert result.message == "Must include @ symbol"

    def test_bad_format_after_at(self):
        result = validate(FieldName.EMAIL, "asha@")
        assert result.verdict == Verdict.INVALID
        assert result.message == "Invalid email format"

    def test_valid_email(self):
        result = validate(FieldName.EMAIL, "a@b.com")
        assert result.verdict == Verdict.VALID
        assert result.message == "Valid email"

    @pytest.mark.parametrize("value", [
        "a@b.com",
        "A@B.COM",
        "first.last+tag@sub.example.org",
        "a@b.c",
        "a@b",
        "a b@c.com",
        "@b.com",
        "a@b.com\n",
        "a@@b.com",
        "",
    ])
    def test_valid_iff_pattern_matches(self, value):
        expected = EMAIL_REGEX.fullmatch(value) is not None
        assert (validate(FieldName.EMAIL, value).verdict == Verdict.VALID) is expected

    @pytest.mark.parametrize("value", [
        "a@b.co\u017f",
        "a@b.\u212aom",
        "a@b.com\u0131",
        "\u017f@b.com",
    ])
    def test_non_ascii_lookalikes_are_invalid(self, value):
        assert validate(FieldName.EMAIL, value).verdict == Verdict.INVALID


class TestDigitFields:
    """Tests for phone and Aadhar rules."""

    def test_ten_digit_phone_is_valid(self):
        result = validate(FieldName.PHONE, "1234567890")
        assert result.verdict == Verdict.VALID
        assert result.message == "Valid phone number"

    def test_nine_digit_phone_reports_one_remaining(self):
        result = validate(FieldName.PHONE, "123456789")
        assert result.verdict == Verdict.INCOMPLETE
        assert result.message == "1 digits remaining"

    @pytest.mark.parametrize("length", range(0, 10))
    def test_short_phone_reports_remaining_count(self, length):
        result = validate(FieldName.PHONE, "7" * length)
        assert result.verdict == Verdict.INCOMPLETE
        assert result.message == f"{10 - length} digits remaining"

    def test_eleven_digit_phone_is_invalid(self):
        result = validate(FieldName.PHONE, "12345678901")
        assert result.verdict == Verdict.INVALID
        assert result.message == "Must be exactly 10 digits"

    def test_phone_with_letters_is_invalid(self):
        result = validate(FieldName.PHONE, "12345abcde")
        assert result.verdict == Verdict.INVALID
        assert result.message == "Only numbers allowed"

    def test_non_ascii_digits_are_rejected(self):
        assert validate(FieldName.PHONE, "١٢٣٤٥٦٧٨٩٠").verdict == Verdict.INVALID

    def test_aadhar_uses_twelve_digits(self):
        assert validate(FieldName.AADHAR, "123456789012").verdict == Verdict.VALID
        assert validate(FieldName.AADHAR, "1234567890").message == "2 digits remaining"
        assert validate(FieldName.AADHAR, "1234567890123").message == "Must be exactly 12 digits"

    def test_field_name_may_be_a_string(self):
        assert validate("phone", "1234567890").verdict == Verdict.VALID

    def test_none_is_treated_as_empty(self):
        assert validate(FieldName.PHONE, None).message == "10 digits remaining"


class TestPanValidation:
    """Tests for the PAN rule."""

    def test_valid_pan(self):
        result = validate(FieldName.PAN, "ABCDE1234F")
        assert result.verdict == Verdict.VALID
        assert result.message == "Valid PAN number"

    def test_lowercase_pan_is_invalid(self):
        result = validate(FieldName.PAN, "abcde1234f")
        assert result.verdict == Verdict.INVALID
        assert result.message == "Must match format: ABCDE1234F"

    def test_short_pan_reports_remaining(self):
        result = validate(FieldName.PAN, "ABCDE123")
        assert result.verdict == Verdict.INCOMPLETE
        assert result.message == "2 characters remaining"

    def test_too_long_pan_is_invalid(self):
        assert validate(FieldName.PAN, "ABCDE1234FG").verdict == Verdict.INVALID


class TestPasswordStrength:
    """Tests for password scoring and labels."""

    def test_all_requirements_met(self):
        score, missing = password_strength("Passw0rd!")
        assert score == 5
        assert missing == []

        result = validate(FieldName.PASSWORD, "Passw0rd!")
        assert result.verdict == Verdict.VALID
        assert result.message == "Very strong"

    def test_lowercase_only_password(self):
        score, missing = password_strength("password")
        assert score == 2
        assert missing == ["uppercase", "number", "special char"]

        result = validate(FieldName.PASSWORD, "password")
        assert result.verdict == Verdict.INCOMPLETE
        assert result.message == "Medium: need uppercase, number, special char"

    def test_weak_password(self):
        result = validate(FieldName.PASSWORD, "abc")
        assert result.score == 1
        assert result.message == "Weak: need 8+ characters, uppercase, number, special char"

    def test_strong_password_lists_missing(self):
        result = validate(FieldName.PASSWORD, "Password1")
        assert result.score == 4
        assert result.message == "Strong: need special char"
        assert result.verdict == Verdict.INCOMPLETE

    @pytest.mark.parametrize("score,label", [
        (0, "Weak"), (1, "Weak"), (2, "Medium"), (3, "Medium"), (4, "Strong"), (5, "Very strong"),
    ])
    def test_buckets(self, score, label):
        assert strength_label(score) == label

    def test_sign_in_password_only_needs_length(self):
        assert validate(FieldName.SIGN_IN_PASSWORD, "").verdict == Verdict.INVALID

        short = validate(FieldName.SIGN_IN_PASSWORD, "abc")
        assert short.verdict == Verdict.INCOMPLETE
        assert short.message == "3 more characters needed"

        ok = validate(FieldName.SIGN_IN_PASSWORD, "abcdef")
        assert ok.verdict == Verdict.VALID
        assert ok.message == "Password length OK"


class TestFormValidation:
    """Tests for whole-form submission gates."""

    def test_valid_account_form(self, valid_form):
        result = validate_account_form(valid_form)
        assert result.is_valid
        assert result.error_count == 0

    def test_invalid_account_form_raises_with_every_error(self, valid_form):
        valid_form["phone"] = "12345"
        valid_form["pan"] = "abcde1234f"

        with pytest.raises(ValidationFailedError) as exc_info:
            validate_account_form(valid_form)

        errors = exc_info.value.errors
        assert set(errors) == {FieldName.PHONE, FieldName.PAN}
        assert errors[FieldName.PHONE] == "5 digits remaining"

    def test_account_form_requires_full_password_composition(self, valid_form):
        valid_form["password"] = "Password1"
        result = check_account_form(valid_form)
        assert not result.is_valid
        assert FieldName.PASSWORD in result.errors

    def test_missing_fields_fail(self):
        result = check_account_form({})
        assert result.error_count == 6

    def test_sign_in_form_accepts_weak_password(self):
        result = validate_sign_in_form({"email": "a@b.com", "password": "simple"})
        assert result.is_valid

    def test_sign_in_form_rejects_bad_email(self):
        with pytest.raises(ValidationFailedError):
            validate_sign_in_form({"email": "a@b", "password": "simple"})

    def test_summary_lists_errors(self, valid_form):
        valid_form["name"] = ""
        summary = get_user_friendly_summary(check_account_form(valid_form))
        assert "Name: Name is required" in summary

    def test_summary_for_valid_form(self, valid_form):
        summary = get_user_friendly_summary(check_account_form(valid_form))
        assert summary.startswith("✅")


class TestDepositAmount:
    """Tests for parsing the deposit amount."""

    @pytest.mark.parametrize("raw,expected", [
        ("50.5", Decimal("50.5")),
        (" 25 ", Decimal("25")),
        ("0.01", Decimal("0.01")),
        ("0.105", Decimal("0.11")),
        ("1e2", Decimal("100")),
        ("1000000000", Decimal("1000000000")),
    ])
    def test_valid_amounts(self, raw, expected):
        assert parse_deposit_amount(raw) == expected

    @pytest.mark.parametrize("raw", [
        "", None, "abc", "0", "-5", "NaN", "Infinity", "12abc",
        "1e-400", "0.004", "1e400", "1000000000.01",
    ])
    def test_invalid_amounts(self, raw):
        with pytest.raises(ValidationFailedError, match="valid amount"):
            parse_deposit_amount(raw)
