"""Conversation repository for conversation and message database operations."""

from dataclasses import dataclass
from typing import Any, Literal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chatbot_service.core.database import dialect_insert
from chatbot_service.models.conversation import Conversation
from chatbot_service.models.message import Message

Role = Literal["user", "assistant", "system"]
ConversationStatus = Literal["active", "ended"]


@dataclass(frozen=True)
class ConversationWithMessages:
    """Immutable result of a conversation lookup with its full history."""

    conversation: Conversation
    messages: list[Message]


class ConversationRepository:
    """Encapsulates conversation and message queries.

    The caller owns the transaction: nothing here commits, so a failure in any
    step of a multi-statement operation rolls back with the caller's session.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, session_id: str, patient_id: str | None = None
    ) -> Conversation:
        """Create an active conversation for a session."""
        conversation = Conversation(
            session_id=session_id,
            patient_id=patient_id or None,
            status="active",
            meta={},
        )
        self._session.add(conversation)
        await self._session.flush()
        await self._session.refresh(conversation)
        return conversation

    async def find_by_session_id(self, session_id: str) -> Conversation | None:
        """Find the conversation for a session id."""
        result = await self._session.execute(
            select(Conversation)
            .where(Conversation.session_id == session_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_or_create(
        self, session_id: str, patient_id: str | None = None
    ) -> tuple[Conversation, bool]:
        """Atomically fetch or create the conversation for a session.

        Returns:
            Tuple of (conversation, created).
        """
        stmt = (
            dialect_insert(self._session, Conversation.__table__)
            .values(
                session_id=session_id,
                patient_id=patient_id or None,
                status="active",
                metadata={},
            )
            .on_conflict_do_nothing(index_elements=["session_id"])
        )
        result = await self._session.execute(stmt)
        conversation = await self.find_by_session_id(session_id)
        if conversation is None:
            raise RuntimeError(f"Conversation for session {session_id} vanished")
        return conversation, bool(result.rowcount)

    async def add_message(
        self,
        conversation_id: int,
        role: Role,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> Message:
        """Append a message and bump the conversation's last activity."""
        message = Message(
            conversation_id=conversation_id,
            role=role,
            content=content,
            meta=metadata or {},
        )
        self._session.add(message)
        await self._session.flush()
        await self._session.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(last_activity=func.now())
            .execution_options(synchronize_session=False)
        )
        await self._session.refresh(message)
        return message

    async def get_messages(
        self, conversation_id: int, limit: int | None = None
    ) -> list[Message]:
        """Messages in chronological order, optionally only the latest ``limit``."""
        if limit:
            latest = (
                select(Message.id)
                .where(Message.conversation_id == conversation_id)
                .order_by(Message.timestamp.desc(), Message.id.desc())
                .limit(limit)
            )
            stmt = select(Message).where(Message.id.in_(latest))
        else:
            stmt = select(Message).where(Message.conversation_id == conversation_id)
        result = await self._session.execute(
            stmt.order_by(Message.timestamp.asc(), Message.id.asc())
        )
        return list(result.scalars().all())

    async def get_with_messages(
        self, session_id: str
    ) -> ConversationWithMessages | None:
        """Conversation plus all of its messages, oldest first."""
        conversation = await self.find_by_session_id(session_id)
        if conversation is None:
            return None
        messages = await self.get_messages(conversation.id)
        return ConversationWithMessages(conversation=conversation, messages=messages)

    async def update_status(self, session_id: str, status: ConversationStatus) -> None:
        """Set the status of a session's conversation."""
        await self._session.execute(
            update(Conversation)
            .where(Conversation.session_id == session_id)
            .values(status=status, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )

    async def get_patient_history(
        self, patient_id: str, limit: int = 10
    ) -> list[Conversation]:
        """Most recent conversations of a patient, newest first."""
        result = await self._session.execute(
            select(Conversation)
            .where(Conversation.patient_id == patient_id)
            .order_by(Conversation.start_time.desc(), Conversation.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_message_count(self, conversation_id: int) -> int:
        """Number of messages stored for a conversation."""
        result = await self._session.execute(
            select(func.count())
            .select_from(Message)
            .where(Message.conversation_id == conversation_id)
        )
        return int(result.scalar_one())
