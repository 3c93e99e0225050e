"""
Loan Applications Service Layer

Accepts or rejects a submission before anything leaves the server:
1. Store the uploaded document (if any)
2. Run every validation rule
3. On rejection, delete the stored document and raise ValidationError
4. On acceptance, return the submission for the notifier

Nothing here sends email; the router schedules that after responding.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from fastapi import UploadFile

from gold2money.core.errors import ValidationError
from gold2money.modules.loan_applications.schemas import ApplicationSubmission
from gold2money.modules.loan_applications.uploads import UploadedFile, UploadStorage
from gold2money.modules.loan_applications.validation import validate_submission

logger = logging.getLogger(__name__)

# Fields trimmed by validation are carried trimmed
_TRIMMED_FIELDS = ("name", "phone", "city")


@dataclass(frozen=True)
class AcceptedApplication:
    """A submission that passed validation, with its stored document."""

    submission: ApplicationSubmission
    upload: UploadedFile | None = None


def build_submission(
    fields: Mapping[str, str | None],
    upload: UploadedFile | None,
) -> ApplicationSubmission:
    """Create the submission model from raw form fields."""
    data = {key: value for key, value in fields.items() if value is not None}
    for key in _TRIMMED_FIELDS:
        data[key] = (fields.get(key) or "").strip()
    if upload is not None:
        data["loanDocumentPath"] = str(upload.stored_path)
    return ApplicationSubmission.model_validate(data)


async def submit_application(
    fields: Mapping[str, str | None],
    upload: UploadFile | None,
    storage: UploadStorage,
) -> AcceptedApplication:
    """
    Store, validate and accept a loan application.

    Args:
        fields: Form values keyed by wire name (name, email, phone, city,
            loanType, loanAmount, jewelryType, grams, message)
        upload: The optional loan document
        storage: Where uploaded documents are written

    Returns:
        The accepted application

    Raises:
        StorageError: If the document could not be stored
        ValidationError: If any validation rule failed
    """
    stored = await storage.save(upload)

    violations = validate_submission(fields, file_present=stored is not None)
    if violations:
        if stored is not None:
            storage.discard(stored)
        raise ValidationError(violations)

    submission = build_submission(fields, stored)
    logger.info(
        f"Application accepted: loan_type={submission.loan_type}, "
        f"document={'yes' if stored else 'no'}"
    )
    return AcceptedApplication(submission=submission, upload=stored)
