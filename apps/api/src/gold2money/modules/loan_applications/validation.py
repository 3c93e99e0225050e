"""
Loan Application Validation

Pure rule checks over the raw form fields. Every rule runs; violations are
returned in rule order and never deduplicated.
"""

import re
from collections.abc import Mapping

from email_validator import EmailNotValidError, validate_email

from gold2money.modules.loan_applications.schemas import TAKEOVER_LOAN_TYPE

PHONE_LENGTH = 10
_DIGITS_ONLY = re.compile(r"^[0-9]+$")

NAME_REQUIRED = "Name is required."
INVALID_EMAIL = "Please provide a valid email address."
PHONE_LENGTH_MESSAGE = "Phone number must be 10 digits."
PHONE_DIGITS_MESSAGE = "Phone number must contain only digits."
CITY_REQUIRED = "City is required."
TAKEOVER_DOCUMENT_REQUIRED = "A loan document is required for Takeover loans."


def _trimmed(fields: Mapping[str, str | None], key: str) -> str:
    return (fields.get(key) or "").strip()


def is_valid_email(value: str | None) -> bool:
    """Check email syntax only; no DNS lookups."""
    if not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_submission(fields: Mapping[str, str | None], file_present: bool) -> list[str]:
    """
    Check a submission against every rule.

    Args:
        fields: Raw form values keyed by their wire names
        file_present: Whether a loan document was stored for this submission

    Returns:
        Violation messages in rule order; empty when the submission is valid
    """
    violations: list[str] = []

    if not _trimmed(fields, "name"):
        violations.append(NAME_REQUIRED)

    if not is_valid_email(fields.get("email")):
        violations.append(INVALID_EMAIL)

    phone = _trimmed(fields, "phone")
    if len(phone) != PHONE_LENGTH:
        violations.append(PHONE_LENGTH_MESSAGE)
    if not _DIGITS_ONLY.match(phone):
        violations.append(PHONE_DIGITS_MESSAGE)

    if not _trimmed(fields, "city"):
        violations.append(CITY_REQUIRED)

    if fields.get("loanType") == TAKEOVER_LOAN_TYPE and not file_present:
        violations.append(TAKEOVER_DOCUMENT_REQUIRED)

    return violations
