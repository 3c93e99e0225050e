"""Shared response schemas."""

from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Envelope returned by every JSON endpoint."""

    success: bool
    message: str
