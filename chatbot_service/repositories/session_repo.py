"""Session repository for TTL-bounded session state."""

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chatbot_service.core.database import dialect_insert
from chatbot_service.models.session import SessionRecord


class SessionRepository:
    """Encapsulates queries on the sessions table.

    All expiry comparisons take ``now`` from the caller so that a single
    clock decides what is live.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(
        self, session_id: str, data: dict[str, Any], expires_at: datetime
    ) -> None:
        """Insert or replace the session blob and its expiry."""
        table = SessionRecord.__table__
        stmt = dialect_insert(self._session, table).values(
            session_id=session_id,
            data=data,
            expires_at=expires_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["session_id"],
            set_={
                "data": stmt.excluded.data,
                "expires_at": stmt.excluded.expires_at,
                "updated_at": func.now(),
            },
        )
        await self._session.execute(stmt)

    async def find_live(self, session_id: str, now: datetime) -> SessionRecord | None:
        """Return the session row if it has not expired yet."""
        result = await self._session.execute(
            select(SessionRecord)
            .where(
                SessionRecord.session_id == session_id,
                SessionRecord.expires_at > now,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def delete(self, session_id: str) -> int:
        """Delete a session row, returning the number of rows removed."""
        result = await self._session.execute(
            delete(SessionRecord)
            .where(SessionRecord.session_id == session_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def delete_expired(self, now: datetime) -> int:
        """Delete every row whose expiry is in the past."""
        result = await self._session.execute(
            delete(SessionRecord)
            .where(SessionRecord.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def extend(self, session_id: str, seconds: int, now: datetime) -> bool:
        """Push a live session's expiry further out; expired rows are left alone."""
        record = await self.find_live(session_id, now)
        if record is None:
            return False
        record.expires_at = record.expires_at + timedelta(seconds=seconds)
        await self._session.flush()
        return True

    async def count_active(self, now: datetime) -> int:
        """Number of sessions that have not expired."""
        result = await self._session.execute(
            select(func.count())
            .select_from(SessionRecord)
            .where(SessionRecord.expires_at > now)
        )
        return int(result.scalar_one())
