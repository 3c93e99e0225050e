"""
Core module - Configuration, errors, email, sessions, and utilities.
"""

from gold2money.core.config import Settings, get_settings
from gold2money.core.errors import (
    AuthError,
    DeliveryError,
    RateLimitExceeded,
    ServiceError,
    SessionError,
    StorageError,
    ValidationError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "ServiceError",
    "ValidationError",
    "AuthError",
    "StorageError",
    "SessionError",
    "RateLimitExceeded",
    "DeliveryError",
]
