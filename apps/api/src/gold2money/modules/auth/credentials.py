"""
Admin Credential Verification

The admin area has a single shared password. Verification sits behind
CredentialVerifier so the check can be swapped without touching routes:
- SharedSecretVerifier compares against ADMIN_PASSWORD
- BcryptHashVerifier checks against ADMIN_PASSWORD_HASH
"""

import logging
import secrets
from abc import ABC, abstractmethod

import bcrypt
from fastapi import Request

from gold2money.core.config import Settings

logger = logging.getLogger(__name__)


class CredentialVerifier(ABC):
    """Decides whether a submitted admin password is accepted."""

    @abstractmethod
    def verify(self, password: str | None) -> bool:
        """Return True if the password grants admin access."""


class SharedSecretVerifier(CredentialVerifier):
    """Constant-time comparison against one configured secret."""

    def __init__(self, secret: str | None):
        self._secret = secret or None

    def verify(self, password: str | None) -> bool:
        # An unset secret must never match an absent password
        if self._secret is None or password is None:
            return False
        return secrets.compare_digest(password.encode(), self._secret.encode())


class BcryptHashVerifier(CredentialVerifier):
    """Checks the password against a bcrypt hash."""

    def __init__(self, password_hash: str):
        self._hash = password_hash.encode()

    def verify(self, password: str | None) -> bool:
        if not password:
            return False
        try:
            return bcrypt.checkpw(password.encode(), self._hash)
        except ValueError as e:
            logger.error(f"ADMIN_PASSWORD_HASH is not a valid bcrypt hash: {e}")
            return False


def build_verifier(settings: Settings) -> CredentialVerifier:
    """Pick the verifier for the configured credentials."""
    if settings.admin_password_hash:
        return BcryptHashVerifier(settings.admin_password_hash)
    if not settings.admin_password:
        logger.warning("Neither ADMIN_PASSWORD nor ADMIN_PASSWORD_HASH is set - admin login disabled")
    return SharedSecretVerifier(settings.admin_password)


def get_credential_verifier(request: Request) -> CredentialVerifier:
    """FastAPI dependency returning the application's verifier."""
    return request.app.state.credentials
