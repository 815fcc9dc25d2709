"""Chat orchestration: persistence, history replay and AI replies."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chatbot_service.core.database import session_scope
from chatbot_service.core.exceptions import AIProviderError, NotFoundError, ValidationError
from chatbot_service.repositories.conversation_repo import ConversationRepository
from chatbot_service.schemas.chat_schema import ChatMessageIn, ChatReply
from chatbot_service.schemas.conversation_schema import (
    ConversationHistory,
    ConversationResponse,
    MessageResponse,
)
from chatbot_service.schemas.session_schema import SessionData
from chatbot_service.services.ai_provider import (
    GENERIC_FAILURE_MESSAGE,
    AIProvider,
    HistoryTurn,
)
from chatbot_service.services.session_service import DEFAULT_TTL_SECONDS, SessionService

logger = structlog.get_logger()

EMPTY_REPLY_FALLBACK = "Sorry, I could not generate a response."

HEALTHCARE_KEYWORDS: tuple[str, ...] = (
    # Symptoms and conditions
    "pain", "ache", "hurt", "fever", "cough", "headache", "nausea", "dizzy",
    "chest pain", "shortness of breath", "vomiting", "diarrhea", "rash",
    "sore throat", "runny nose", "fatigue", "weakness", "swelling",
    # Care actions
    "appointment", "schedule", "book", "see doctor", "check-up", "exam",
    "prescription", "medication", "medicine", "treatment", "therapy",
    # Facilities and staff
    "clinic", "hospital", "doctor", "nurse", "physician", "specialist",
    "emergency", "urgent care", "pharmacy", "lab work", "test results",
    # Administrative
    "insurance", "billing", "medical records", "health records",
    "symptoms", "diagnosis", "condition", "illness", "disease",
    # Chronic and mental health
    "blood pressure", "cholesterol", "diabetes", "asthma", "allergy",
    "mental health", "depression", "anxiety", "stress", "sleep",
)  # fmt: skip


def is_healthcare_related(message: str) -> bool:
    """Keyword check used to tag replies to health-related messages."""
    lowered = message.lower()
    return any(keyword in lowered for keyword in HEALTHCARE_KEYWORDS)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(frozen=True)
class OpenedSession:
    """State prepared for a newly connected client."""

    session: SessionData
    conversation_id: int
    resumed: bool


class ChatService:
    """Orchestrates a chat turn across conversations, sessions and the AI provider."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        session_service: SessionService,
        ai_provider: AIProvider,
        session_ttl_seconds: int = DEFAULT_TTL_SECONDS,
        history_limit: int = 0,
    ) -> None:
        self._session_factory = session_factory
        self._session_service = session_service
        self._ai_provider = ai_provider
        self._session_ttl = session_ttl_seconds
        self._history_limit = history_limit

    async def open_session(
        self, session_id: str, patient_id: str | None = None
    ) -> OpenedSession:
        """Load or create the session state and conversation for a connection."""
        session = await self._session_service.get(session_id)
        if session is None:
            session = SessionData(session_id=session_id, patient_id=patient_id)
            await self._session_service.set(session_id, session, self._session_ttl)

        async with session_scope(self._session_factory) as db:
            conversation, created = await ConversationRepository(db).get_or_create(
                session_id, patient_id
            )
        return OpenedSession(
            session=session, conversation_id=conversation.id, resumed=not created
        )

    async def process_message(
        self,
        session_id: str,
        user_message: ChatMessageIn,
        patient_id: str | None = None,
    ) -> ChatReply:
        """Store the user's message, get an AI reply, store it and return it.

        Raises:
            ValidationError: Message content is empty.
            AIProviderError: The provider could not produce a reply.
        """
        content = user_message.content
        if not content or not content.strip():
            raise ValidationError("Message content cannot be empty")

        async with session_scope(self._session_factory) as db:
            repo = ConversationRepository(db)
            conversation, _ = await repo.get_or_create(session_id, patient_id)
            conversation_id = conversation.id
            stored = await repo.add_message(
                conversation_id, "user", content, user_message.metadata
            )
            window = await repo.get_messages(
                conversation_id, limit=self._history_limit or None
            )
            history = [
                HistoryTurn(role=m.role, content=m.content)
                for m in window
                if m.id != stored.id
            ]

        result = await self._ai_provider.chat(content, history)
        if not result.success:
            raise AIProviderError(
                result.response or GENERIC_FAILURE_MESSAGE, detail=result.error
            )
        reply = result.response or EMPTY_REPLY_FALLBACK

        metadata: dict[str, Any] = {
            "ai_provider": self._ai_provider.name,
            "is_healthcare": is_healthcare_related(content),
        }
        async with session_scope(self._session_factory) as db:
            await ConversationRepository(db).add_message(
                conversation_id, "assistant", reply, metadata
            )

        await self._record_activity(session_id, patient_id)

        return ChatReply(
            message=reply,
            timestamp=_now_iso(),
            conversation_id=conversation_id,
        )

    async def get_conversation_history(self, session_id: str) -> ConversationHistory:
        """Conversation and messages of a session."""
        async with session_scope(self._session_factory) as db:
            data = await ConversationRepository(db).get_with_messages(session_id)
            if data is None:
                raise NotFoundError("Conversation")
            return ConversationHistory(
                conversation=ConversationResponse.model_validate(data.conversation),
                messages=[MessageResponse.model_validate(m) for m in data.messages],
            )

    async def get_patient_history(
        self, patient_id: str, limit: int = 10
    ) -> dict[str, Any]:
        """Most recent conversations of a patient."""
        if not patient_id or not patient_id.strip():
            raise ValidationError("Patient ID is required")
        async with session_scope(self._session_factory) as db:
            conversations = await ConversationRepository(db).get_patient_history(
                patient_id, limit
            )
            items = [ConversationResponse.model_validate(c) for c in conversations]
        return {"patientId": patient_id, "count": len(items), "conversations": items}

    async def end_conversation(self, session_id: str) -> dict[str, Any]:
        """Mark the conversation ended and drop the session; safe to repeat."""
        async with session_scope(self._session_factory) as db:
            await ConversationRepository(db).update_status(session_id, "ended")
        await self._session_service.delete(session_id)
        logger.info("Conversation ended", session_id=session_id)
        return {"sessionId": session_id, "status": "ended", "timestamp": _now_iso()}

    async def get_stats(self) -> dict[str, Any]:
        """Active session count."""
        active = await self._session_service.get_active_count()
        return {"activeSessions": active, "timestamp": _now_iso()}

    async def _record_activity(self, session_id: str, patient_id: str | None) -> None:
        session = await self._session_service.get(session_id)
        if session is None:
            session = SessionData(session_id=session_id, patient_id=patient_id)
        session.touch()
        await self._session_service.set(session_id, session, self._session_ttl)
