"""Authentication module."""

from gold2money.modules.auth.credentials import build_verifier
from gold2money.modules.auth.jobs import register_session_jobs
from gold2money.modules.auth.router import router

__all__ = ["router", "build_verifier", "register_session_jobs"]
