"""
Loan Applications Router

Public endpoint for the website's loan application form.

Endpoints:
- POST /api/submit-loan-application - Submit an application (multipart)

The response confirms validation and acceptance only. Emails are sent in a
background task after the response, so slow or failing delivery never
delays or fails the form.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request
from starlette.datastructures import UploadFile

from gold2money.core.errors import ServiceError, ValidationError
from gold2money.core.rate_limit import rate_limit
from gold2money.core.schemas import ApiResponse
from gold2money.modules.loan_applications import service
from gold2money.modules.loan_applications.notifications import Notifier
from gold2money.modules.loan_applications.uploads import UPLOAD_FIELD, UploadStorage

logger = logging.getLogger(__name__)

router = APIRouter()

SUBMITTED_MESSAGE = "Form submitted successfully!"
SERVER_ERROR_MESSAGE = "Server error. Please try again."


def get_upload_storage(request: Request) -> UploadStorage:
    return request.app.state.uploads


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


async def get_loan_document(request: Request) -> UploadFile | None:
    """
    The file sent under ``loanDocument``, if any.

    A plain text value under that field is ignored rather than rejected.
    """
    form = await request.form()
    document = form.get(UPLOAD_FIELD)
    return document if isinstance(document, UploadFile) else None


@router.post(
    "/submit-loan-application",
    response_model=ApiResponse,
    summary="Submit Loan Application",
    description="""
Submit the loan application form.

Fields: `name`, `email`, `phone`, `city`, `loanType`, `loanAmount`,
`jewelryType`, `grams`, `message`, plus an optional file under
`loanDocument`. A document is required when `loanType` is `Takeover`.

All validation failures are reported together, in rule order, joined by
single spaces.
""",
    responses={
        400: {
            "description": "One or more validation rules failed",
            "content": {
                "application/json": {
                    "example": {
                        "success": False,
                        "message": "Name is required. City is required.",
                    }
                }
            },
        },
        429: {"description": "Too many submissions from this client"},
        500: {"description": "The uploaded document could not be stored"},
    },
)
@rate_limit("submit")
async def submit_loan_application(
    request: Request,
    background_tasks: BackgroundTasks,
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    city: str = Form(""),
    loan_type: str | None = Form(None, alias="loanType"),
    loan_amount: str | None = Form(None, alias="loanAmount"),
    jewelry_type: str | None = Form(None, alias="jewelryType"),
    grams: str | None = Form(None),
    message: str | None = Form(None),
    loan_document: UploadFile | None = Depends(get_loan_document),
    storage: UploadStorage = Depends(get_upload_storage),
    notifier: Notifier = Depends(get_notifier),
) -> ApiResponse:
    """
    Accept a loan application and queue its emails.

    Raises:
        ValidationError (400): If any rule failed
        StorageError (500): If the document could not be stored
    """
    fields = {
        "name": name,
        "email": email,
        "phone": phone,
        "city": city,
        "loanType": loan_type,
        "loanAmount": loan_amount,
        "jewelryType": jewelry_type,
        "grams": grams,
        "message": message,
    }

    try:
        accepted = await service.submit_application(fields, loan_document, storage)
    except ValidationError as e:
        logger.info(f"Application rejected: {e.message}")
        raise
    except ServiceError:
        raise
    except Exception as e:
        logger.exception(f"Error processing form: {e}")
        raise ServiceError(
            message=SERVER_ERROR_MESSAGE,
            error_code="INTERNAL_ERROR",
            status_code=500,
        ) from e

    background_tasks.add_task(notifier.dispatch, accepted.submission, accepted.upload)

    return ApiResponse(success=True, message=SUBMITTED_MESSAGE)
