"""Validation rules for expense claim submissions.

Every function here is pure: no database access, no file system access.
Rules run in a fixed order and the first failing rule wins, so clients
always see the same error for the same input.
"""
import calendar
import re
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Mapping, Optional

from expense_claims.config import settings
from expense_claims.exceptions import ClaimValidationException, ErrorCode
from expense_claims.models.claim import ClaimStatus
from expense_claims.schemas.claim import ClaimCreate

REQUIRED_FIELDS = (
    "employee_name",
    "employee_email",
    "employee_id",
    "department",
    "claim_date",
    "amount",
    "description",
    "type",
)

EMPLOYEE_ID_PATTERN = re.compile(r"^ATS0[1-9]\d{2}$")
EMPLOYEE_EMAIL_PATTERN = re.compile(r"^[^\s@]+@(gmail|outlook)\.com$")

# Column widths of the claims table
FIELD_MAX_LENGTHS = {
    "employee_name": 255,
    "employee_email": 255,
    "department": 255,
    "type": 100,
}

CENTS = Decimal("0.01")


def subtract_months(day: date, months: int) -> date:
    """Return the same calendar day `months` earlier, clamped to the month's last day."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def check_required_fields(fields: Mapping[str, Any]) -> None:
    missing = [name for name in REQUIRED_FIELDS if _is_blank(fields.get(name))]
    if missing:
        raise ClaimValidationException(
            ErrorCode.MISSING_FIELD,
            f"All fields are required. Missing: {', '.join(missing)}",
            field=missing[0],
        )


def check_field_lengths(fields: Mapping[str, Any]) -> None:
    for name, max_length in FIELD_MAX_LENGTHS.items():
        value = fields.get(name)
        if isinstance(value, str) and len(value.strip()) > max_length:
            raise ClaimValidationException(
                ErrorCode.FIELD_TOO_LONG,
                f"{name} must be at most {max_length} characters",
                field=name,
            )


def check_employee_id(employee_id: str) -> None:
    if not EMPLOYEE_ID_PATTERN.match(employee_id.strip()):
        raise ClaimValidationException(
            ErrorCode.INVALID_EMPLOYEE_ID,
            "Employee ID must be in the format ATS0XXX (e.g. ATS0123)",
            field="employee_id",
        )


def check_employee_email(email: str) -> None:
    if not EMPLOYEE_EMAIL_PATTERN.match(email.strip()):
        raise ClaimValidationException(
            ErrorCode.INVALID_EMAIL,
            "Email must be a valid @gmail.com or @outlook.com address",
            field="employee_email",
        )


def parse_amount(raw: Any) -> Decimal:
    """
    Parse and bound-check a claim amount.

    Args:
        raw: Amount as submitted (string or number)

    Returns:
        Amount rounded to cents

    Raises:
        ClaimValidationException: If the amount is not a finite number in (0, MAX_CLAIM_AMOUNT]
    """
    try:
        amount = Decimal(str(raw).strip())
        if amount.is_finite():
            # Bounds are checked on the value as stored, in cents
            amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        amount = None

    if amount is None or not amount.is_finite() or amount <= 0 or amount > settings.MAX_CLAIM_AMOUNT:
        raise ClaimValidationException(
            ErrorCode.INVALID_AMOUNT,
            f"Amount must be a number greater than 0 and not more than {settings.MAX_CLAIM_AMOUNT}",
            field="amount",
        )
    return amount


def parse_claim_date(raw: Any, today: date) -> date:
    """
    Parse a claim date and check it falls inside the submission window.

    The window is [today - CLAIM_DATE_WINDOW_MONTHS calendar months, today].

    Args:
        raw: ISO date string (YYYY-MM-DD) or date
        today: Reference day for the window

    Returns:
        Parsed date

    Raises:
        ClaimValidationException: If the date is unparseable, in the future, or too old
    """
    if isinstance(raw, datetime):
        claim_date = raw.date()
    elif isinstance(raw, date):
        claim_date = raw
    else:
        text = str(raw).strip()
        try:
            # Full ISO timestamps such as 2026-10-01T08:30:00 carry the date too
            if len(text) > 10 and text[10] in ("T", " "):
                claim_date = datetime.fromisoformat(text).date()
            else:
                claim_date = date.fromisoformat(text)
        except ValueError:
            raise ClaimValidationException(
                ErrorCode.INVALID_DATE,
                "Claim date must be a valid date in YYYY-MM-DD format",
                field="claim_date",
            )

    if claim_date > today:
        raise ClaimValidationException(
            ErrorCode.INVALID_DATE,
            "Claim date cannot be in the future",
            field="claim_date",
        )

    earliest = subtract_months(today, settings.CLAIM_DATE_WINDOW_MONTHS)
    if claim_date < earliest:
        raise ClaimValidationException(
            ErrorCode.INVALID_DATE,
            f"Claim date cannot be more than {settings.CLAIM_DATE_WINDOW_MONTHS} months in the past",
            field="claim_date",
        )
    return claim_date


def check_document_count(document_count: int) -> None:
    if document_count < 1:
        raise ClaimValidationException(
            ErrorCode.NO_DOCUMENTS,
            "At least one supporting document is required",
            field="documents",
        )
    if document_count > settings.MAX_DOCUMENTS_PER_CLAIM:
        raise ClaimValidationException(
            ErrorCode.TOO_MANY_DOCUMENTS,
            f"At most {settings.MAX_DOCUMENTS_PER_CLAIM} documents can be attached to a claim",
            field="documents",
        )


def validate_claim_submission(
    fields: Mapping[str, Any],
    document_count: int,
    now: Optional[datetime] = None,
) -> ClaimCreate:
    """
    Run every submission rule in order.

    Args:
        fields: Raw claim fields keyed by model attribute name
        document_count: Number of files attached to the submission
        now: Submission time (defaults to the current UTC time)

    Returns:
        Validated ClaimCreate schema

    Raises:
        ClaimValidationException: On the first rule that fails
    """
    now = now or datetime.now(timezone.utc)

    check_required_fields(fields)
    check_field_lengths(fields)
    check_employee_id(fields["employee_id"])
    check_employee_email(fields["employee_email"])
    amount = parse_amount(fields["amount"])
    claim_date = parse_claim_date(fields["claim_date"], now.date())
    check_document_count(document_count)

    return ClaimCreate(
        employee_name=fields["employee_name"].strip(),
        employee_email=fields["employee_email"].strip(),
        employee_id=fields["employee_id"].strip(),
        department=fields["department"].strip(),
        claim_date=claim_date,
        amount=amount,
        description=fields["description"].strip(),
        type=fields["type"].strip(),
    )


def validate_status(value: Any) -> ClaimStatus:
    """
    Validate a review decision.

    Only approved and rejected can be requested; pending is the initial state.

    Raises:
        ClaimValidationException: If the value is not approved or rejected
    """
    if value in (ClaimStatus.APPROVED.value, ClaimStatus.REJECTED.value):
        return ClaimStatus(value)
    raise ClaimValidationException(
        ErrorCode.INVALID_STATUS,
        "Status must be 'approved' or 'rejected'",
        field="status",
    )
