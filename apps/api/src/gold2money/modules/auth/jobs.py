"""
Admin Session Background Jobs

Redis expires sessions on its own; the in-memory fallback needs a sweep so
abandoned sessions do not accumulate.

Jobs:
- sessions_purge_expired: Runs hourly, drops expired in-memory sessions
"""

import logging

from apscheduler.triggers.interval import IntervalTrigger

from gold2money.core.scheduler import register_job
from gold2money.core.sessions import MemorySessionStore, SessionStore

logger = logging.getLogger(__name__)

PURGE_EXPIRED_SESSIONS_JOB_ID = "sessions_purge_expired"


def register_session_jobs(store: SessionStore) -> bool:
    """
    Register session maintenance jobs for the given store.

    Returns:
        True if a job was registered
    """
    if not isinstance(store, MemorySessionStore):
        logger.debug("Session store expires entries itself, no purge job needed")
        return False

    async def purge_expired_sessions() -> None:
        removed = store.purge_expired()
        logger.info(f"Purged {removed} expired admin sessions ({len(store)} active)")

    register_job(
        job_id=PURGE_EXPIRED_SESSIONS_JOB_ID,
        func=purge_expired_sessions,
        trigger=IntervalTrigger(hours=1),
    )
    return True
