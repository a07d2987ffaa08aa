"""Tests for claim submission validation rules."""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from expense_claims.exceptions import ClaimValidationException, ErrorCode
from expense_claims.models.claim import ClaimStatus
from expense_claims.utils.claim_validation import (
    REQUIRED_FIELDS,
    subtract_months,
    validate_claim_submission,
    validate_status,
)

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fields() -> dict:
    return {
        "employee_name": "Arjun Mehta",
        "employee_email": "arjun@outlook.com",
        "employee_id": "ATS0123",
        "department": "Finance",
        "claim_date": "2026-10-01",
        "amount": "499.99",
        "description": "Team lunch",
        "type": "Meals",
    }


def assert_rejected(fields: dict, code: ErrorCode, document_count: int = 1) -> None:
    with pytest.raises(ClaimValidationException) as exc_info:
        validate_claim_submission(fields, document_count, now=NOW)
    assert exc_info.value.code == code
    assert exc_info.value.status_code == 400


@pytest.mark.unit
def test_valid_submission_returns_typed_claim(fields):
    claim = validate_claim_submission(fields, 1, now=NOW)

    assert claim.employee_id == "ATS0123"
    assert claim.amount == Decimal("499.99")
    assert claim.claim_date == date(2026, 10, 1)


@pytest.mark.unit
@pytest.mark.parametrize("field", REQUIRED_FIELDS)
@pytest.mark.parametrize("blank", [None, "", "   "])
def test_missing_field_rejected(fields, field, blank):
    fields[field] = blank
    assert_rejected(fields, ErrorCode.MISSING_FIELD)


@pytest.mark.unit
def test_missing_field_wins_over_later_rules(fields):
    fields["employee_id"] = "bad"
    fields["department"] = None
    assert_rejected(fields, ErrorCode.MISSING_FIELD, document_count=0)


@pytest.mark.unit
def test_employee_id_accepted(fields):
    fields["employee_id"] = "ATS0999"
    assert validate_claim_submission(fields, 1, now=NOW).employee_id == "ATS0999"


@pytest.mark.unit
@pytest.mark.parametrize("employee_id", ["ATS1123", "ATS0012", "ats0123", "ATS01234", "ATS012", "XYZ0123"])
def test_employee_id_rejected(fields, employee_id):
    fields["employee_id"] = employee_id
    assert_rejected(fields, ErrorCode.INVALID_EMPLOYEE_ID)


@pytest.mark.unit
@pytest.mark.parametrize("email", ["a@gmail.com", "a@outlook.com", "first.last+tag@gmail.com"])
def test_email_accepted(fields, email):
    fields["employee_email"] = email
    assert validate_claim_submission(fields, 1, now=NOW).employee_email == email


@pytest.mark.unit
@pytest.mark.parametrize("email", ["a@yahoo.com", "a@gmail.co", "gmail.com", "a b@gmail.com", "a@mail.gmail.com"])
def test_email_rejected(fields, email):
    fields["employee_email"] = email
    assert_rejected(fields, ErrorCode.INVALID_EMAIL)


@pytest.mark.unit
@pytest.mark.parametrize("amount", ["50000", "0.01", "1", "49999.99"])
def test_amount_accepted(fields, amount):
    fields["amount"] = amount
    assert validate_claim_submission(fields, 1, now=NOW).amount == Decimal(amount)


@pytest.mark.unit
@pytest.mark.parametrize(
    "amount",
    ["0", "-5", "0.001", "0.004", "50000.01", "50000.005", "abc", "NaN", "Infinity", "1,000", "1e30"],
)
def test_amount_rejected(fields, amount):
    fields["amount"] = amount
    assert_rejected(fields, ErrorCode.INVALID_AMOUNT)


@pytest.mark.unit
@pytest.mark.parametrize(
    "amount, expected",
    [("0.005", "0.01"), ("10.004", "10.00"), ("10.005", "10.01"), ("50000.004", "50000.00")],
)
def test_amount_rounded_to_cents_before_bounds(fields, amount, expected):
    fields["amount"] = amount
    assert validate_claim_submission(fields, 1, now=NOW).amount == Decimal(expected)


@pytest.mark.unit
@pytest.mark.parametrize("claim_date", ["2026-10-17", "2026-07-18", "2026-07-17"])
def test_claim_date_accepted(fields, claim_date):
    # Window runs from 2026-07-17 (three months back) through today
    fields["claim_date"] = claim_date
    assert validate_claim_submission(fields, 1, now=NOW).claim_date == date.fromisoformat(claim_date)


@pytest.mark.unit
@pytest.mark.parametrize(
    "claim_date",
    ["2026-07-16", "2026-10-18", "2025-01-01", "17/10/2026", "2026-02-30", "2026-10-17garbage", "2026-10-17x12"],
)
def test_claim_date_rejected(fields, claim_date):
    fields["claim_date"] = claim_date
    assert_rejected(fields, ErrorCode.INVALID_DATE)


@pytest.mark.unit
def test_claim_date_accepts_iso_timestamp(fields):
    fields["claim_date"] = "2026-10-01T08:30:00"
    assert validate_claim_submission(fields, 1, now=NOW).claim_date == date(2026, 10, 1)


@pytest.mark.unit
@pytest.mark.parametrize(
    "field, max_length",
    [("employee_name", 255), ("department", 255), ("type", 100)],
)
def test_field_length_limits(fields, field, max_length):
    fields[field] = "x" * max_length
    assert getattr(validate_claim_submission(fields, 1, now=NOW), field) == "x" * max_length

    fields[field] = "x" * (max_length + 1)
    assert_rejected(fields, ErrorCode.FIELD_TOO_LONG)


@pytest.mark.unit
def test_overlong_email_rejected_before_pattern(fields):
    fields["employee_email"] = "a" * 250 + "@gmail.com"
    assert_rejected(fields, ErrorCode.FIELD_TOO_LONG)


@pytest.mark.unit
def test_no_documents_rejected(fields):
    assert_rejected(fields, ErrorCode.NO_DOCUMENTS, document_count=0)


@pytest.mark.unit
def test_too_many_documents_rejected(fields):
    assert_rejected(fields, ErrorCode.TOO_MANY_DOCUMENTS, document_count=6)


@pytest.mark.unit
def test_rules_short_circuit_in_order(fields):
    fields["employee_email"] = "a@yahoo.com"
    fields["amount"] = "-1"
    assert_rejected(fields, ErrorCode.INVALID_EMAIL, document_count=0)


@pytest.mark.unit
@pytest.mark.parametrize(
    "day, months, expected",
    [
        (date(2026, 10, 17), 3, date(2026, 7, 17)),
        (date(2026, 5, 31), 3, date(2026, 2, 28)),
        (date(2026, 1, 15), 3, date(2025, 10, 15)),
        (date(2024, 5, 31), 3, date(2024, 2, 29)),
    ],
)
def test_subtract_months(day, months, expected):
    assert subtract_months(day, months) == expected


@pytest.mark.unit
def test_validate_status():
    assert validate_status("approved") is ClaimStatus.APPROVED
    assert validate_status("rejected") is ClaimStatus.REJECTED

    for value in ("pending", "APPROVED", "", None, 5, True, ["approved"], {"status": "approved"}):
        with pytest.raises(ClaimValidationException) as exc_info:
            validate_status(value)
        assert exc_info.value.code == ErrorCode.INVALID_STATUS
