"""
Admin Sessions

Server-side session storage for the admin area. The client only ever holds
an opaque random id in a cookie; the store keys sessions by an HMAC of that
id so a dump of the store cannot be replayed as cookies.

Sessions expire after SESSION_TTL_SECONDS of inactivity: every read
refreshes the expiry.
"""

import hashlib
import hmac
import json
import logging
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from fastapi import Request, Response
from redis.asyncio import Redis

from gold2money.core.config import Settings
from gold2money.core.errors import SessionError

logger = logging.getLogger(__name__)

SESSION_ID_LENGTH = 32  # 256 bits of entropy when using token_urlsafe


@dataclass
class Session:
    """Session state for one client."""

    session_id: str | None = None
    is_authenticated: bool = False


class SessionStore(ABC):
    """Base class for session backends."""

    def __init__(self, ttl_seconds: int, secret: str):
        self.ttl_seconds = ttl_seconds
        self._secret = secret.encode()

    def _key(self, session_id: str) -> str:
        digest = hmac.new(self._secret, session_id.encode(), hashlib.sha256).hexdigest()
        return f"session:{digest}"

    @abstractmethod
    async def get(self, session_id: str) -> dict | None:
        """Return session data and refresh its expiry, or None if absent/expired."""

    @abstractmethod
    async def save(self, session_id: str, data: dict) -> None:
        """Store session data with a fresh expiry."""

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Remove a session. Deleting an unknown session is not an error."""


class RedisSessionStore(SessionStore):
    """Sessions stored as JSON strings with a Redis TTL."""

    def __init__(self, redis: Redis, ttl_seconds: int, secret: str):
        super().__init__(ttl_seconds, secret)
        self.redis = redis

    async def get(self, session_id: str) -> dict | None:
        key = self._key(session_id)
        raw = await self.redis.get(key)
        if raw is None:
            return None
        await self.redis.expire(key, self.ttl_seconds)
        return json.loads(raw)

    async def save(self, session_id: str, data: dict) -> None:
        await self.redis.set(self._key(session_id), json.dumps(data), ex=self.ttl_seconds)

    async def delete(self, session_id: str) -> None:
        await self.redis.delete(self._key(session_id))


class MemorySessionStore(SessionStore):
    """
    In-process session storage.

    Used when Redis is not configured. Sessions do not survive a restart
    and are not shared between workers.
    """

    def __init__(self, ttl_seconds: int, secret: str):
        super().__init__(ttl_seconds, secret)
        # Format: {key: (data, expires_at)}
        self._sessions: dict[str, tuple[dict, float]] = {}

    async def get(self, session_id: str) -> dict | None:
        key = self._key(session_id)
        entry = self._sessions.get(key)
        if entry is None:
            return None

        data, expires_at = entry
        now = time.monotonic()
        if expires_at <= now:
            del self._sessions[key]
            return None

        self._sessions[key] = (data, now + self.ttl_seconds)
        return dict(data)

    async def save(self, session_id: str, data: dict) -> None:
        self._sessions[self._key(session_id)] = (dict(data), time.monotonic() + self.ttl_seconds)

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(self._key(session_id), None)

    def purge_expired(self) -> int:
        """Drop expired sessions. Returns how many were removed."""
        now = time.monotonic()
        expired = [key for key, (_, expires_at) in self._sessions.items() if expires_at <= now]
        for key in expired:
            del self._sessions[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


class SessionManager:
    """Reads and writes the session cookie on top of a SessionStore."""

    def __init__(self, store: SessionStore, settings: Settings):
        self.store = store
        self.cookie_name = settings.session_cookie_name
        self.cookie_secure = settings.session_cookie_secure
        self.ttl_seconds = settings.session_ttl_seconds

    async def load(self, request: Request) -> Session:
        """
        Resolve the session for a request.

        Unknown, expired or unreadable sessions resolve to an anonymous
        session so the admin guard fails closed.
        """
        session_id = request.cookies.get(self.cookie_name)
        if not session_id:
            return Session()

        try:
            data = await self.store.get(session_id)
        except Exception as e:
            logger.error(f"Session lookup failed, treating request as anonymous: {e}")
            return Session()

        if data is None:
            return Session()

        return Session(session_id=session_id, is_authenticated=bool(data.get("is_authenticated")))

    async def login(self, request: Request, response: Response) -> Session:
        """
        Mark the client as authenticated.

        A fresh session id is always issued so an id handed out before
        login cannot be reused afterwards.
        """
        previous_id = request.cookies.get(self.cookie_name)
        if previous_id:
            await self.store.delete(previous_id)

        session = Session(session_id=secrets.token_urlsafe(SESSION_ID_LENGTH), is_authenticated=True)
        await self.store.save(session.session_id, {"is_authenticated": True})

        response.set_cookie(
            key=self.cookie_name,
            value=session.session_id,
            max_age=self.ttl_seconds,
            httponly=True,
            secure=self.cookie_secure,
            samesite="lax",
        )
        return session

    async def logout(self, request: Request, response: Response) -> None:
        """
        Destroy the session and clear the cookie.

        Logging out without a session is a no-op that still succeeds.

        Raises:
            SessionError: If the store could not delete the session
        """
        session_id = request.cookies.get(self.cookie_name)
        if session_id:
            try:
                await self.store.delete(session_id)
            except Exception as e:
                logger.error(f"Failed to destroy session: {e}")
                raise SessionError() from e

        response.delete_cookie(
            key=self.cookie_name,
            httponly=True,
            secure=self.cookie_secure,
            samesite="lax",
        )


async def get_session_manager(request: Request) -> SessionManager:
    """FastAPI dependency returning the application's SessionManager."""
    return request.app.state.sessions


async def get_current_session(request: Request) -> Session:
    """FastAPI dependency resolving the caller's session."""
    manager: SessionManager = request.app.state.sessions
    return await manager.load(request)


__all__ = [
    "Session",
    "SessionStore",
    "RedisSessionStore",
    "MemorySessionStore",
    "SessionManager",
    "get_session_manager",
    "get_current_session",
]
