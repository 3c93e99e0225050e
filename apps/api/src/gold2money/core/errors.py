"""
Service Errors

Every error that can reach an HTTP caller derives from ServiceError and
carries the status code and client-facing message it is rendered with.
"""


def join_violations(violations: list[str]) -> str:
    """Render violations as the single message returned to the client."""
    return " ".join(violations)


class ServiceError(Exception):
    """Base exception for errors surfaced to API clients."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class ValidationError(ServiceError):
    """Raised when a submission breaks one or more validation rules."""

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        super().__init__(
            message=join_violations(self.violations),
            error_code="VALIDATION_FAILED",
            status_code=400,
        )


class AuthError(ServiceError):
    """Raised when the admin password is rejected."""

    def __init__(self):
        super().__init__(
            message="Invalid password.",
            error_code="INVALID_CREDENTIALS",
            status_code=401,
        )


class StorageError(ServiceError):
    """Raised when an uploaded file cannot be written."""

    def __init__(self):
        super().__init__(
            message="Server error. Please try again.",
            error_code="STORAGE_ERROR",
            status_code=500,
        )


class SessionError(ServiceError):
    """Raised when the session store cannot destroy a session."""

    def __init__(self):
        super().__init__(
            message="Could not log out.",
            error_code="SESSION_ERROR",
            status_code=500,
        )


class RateLimitExceeded(ServiceError):
    """Raised when a client exceeds the request rate for an endpoint."""

    def __init__(self, limit: int, window_seconds: int):
        self.retry_after_seconds = window_seconds
        super().__init__(
            message=f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
            error_code="RATE_LIMIT_EXCEEDED",
            status_code=429,
        )


class DeliveryError(Exception):
    """
    Raised by the mailer when the transport rejects a message.

    Never rendered to an HTTP client: mail goes out after the response.
    """

    def __init__(self, to_email: str, reason: str):
        self.to_email = to_email
        self.reason = reason
        super().__init__(f"Failed to send email to {to_email}: {reason}")
