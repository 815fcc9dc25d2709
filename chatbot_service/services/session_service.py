"""Service for TTL-bounded chat session state."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chatbot_service.core.database import session_scope
from chatbot_service.repositories.session_repo import SessionRepository
from chatbot_service.schemas.session_schema import SessionData

DEFAULT_TTL_SECONDS = 1800


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


class SessionService:
    """Stores session blobs with an expiry; every call is its own transaction.

    Database errors propagate to the caller unchanged.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def set(
        self,
        session_id: str,
        data: SessionData,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        """Create or replace a session, expiring ``ttl_seconds`` from now."""
        expires_at = self._clock() + timedelta(seconds=ttl_seconds)
        async with session_scope(self._session_factory) as session:
            await SessionRepository(session).upsert(
                session_id, data.to_storage(), expires_at
            )

    async def get(self, session_id: str) -> SessionData | None:
        """Return the live session, purging expired rows first."""
        now = self._clock()
        async with session_scope(self._session_factory) as session:
            repo = SessionRepository(session)
            await repo.delete_expired(now)
            record = await repo.find_live(session_id, now)
            if record is None:
                return None
            return SessionData.model_validate(record.data)

    async def delete(self, session_id: str) -> None:
        """Remove a session if present."""
        async with session_scope(self._session_factory) as session:
            await SessionRepository(session).delete(session_id)

    async def extend(
        self, session_id: str, additional_seconds: int = DEFAULT_TTL_SECONDS
    ) -> bool:
        """Extend a live session; returns False when it had already expired."""
        async with session_scope(self._session_factory) as session:
            return await SessionRepository(session).extend(
                session_id, additional_seconds, self._clock()
            )

    async def get_active_count(self) -> int:
        """Count sessions that have not expired."""
        async with session_scope(self._session_factory) as session:
            return await SessionRepository(session).count_active(self._clock())

    async def cleanup(self) -> int:
        """Delete expired sessions and return how many were removed."""
        async with session_scope(self._session_factory) as session:
            return await SessionRepository(session).delete_expired(self._clock())
