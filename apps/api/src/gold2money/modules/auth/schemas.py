"""Authentication schemas."""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Login request schema."""

    password: str | None = None
