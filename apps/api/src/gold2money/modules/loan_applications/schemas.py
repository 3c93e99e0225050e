"""
Loan Applications Schemas

Pydantic models for accepted submissions and API responses.
"""

from pydantic import BaseModel, ConfigDict, Field

TAKEOVER_LOAN_TYPE = "Takeover"


class ApplicationSubmission(BaseModel):
    """A validated loan application, as handed to the notifier.

    Wire names are camelCase to match the public form.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    email: str | None = None
    phone: str
    city: str
    loan_type: str | None = Field(None, alias="loanType")
    loan_amount: str | None = Field(None, alias="loanAmount")
    jewelry_type: str | None = Field(None, alias="jewelryType")
    grams: str | None = None
    message: str | None = None
    loan_document_path: str | None = Field(None, alias="loanDocumentPath")
