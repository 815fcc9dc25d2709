"""Conversation and message response schemas."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ConversationResponse(BaseModel):
    """Conversation row as returned by the API."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    session_id: str
    patient_id: str | None = None
    status: str
    metadata: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("meta", "metadata")
    )
    start_time: datetime | None = None
    last_activity: datetime | None = None


class MessageResponse(BaseModel):
    """Single message within a conversation."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    conversation_id: int
    role: str
    content: str
    metadata: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("meta", "metadata")
    )
    timestamp: datetime | None = None


class ConversationHistory(BaseModel):
    """A conversation with its messages in chronological order."""

    model_config = ConfigDict(frozen=True)

    conversation: ConversationResponse
    messages: list[MessageResponse]

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready ``{conversation, messages}`` mapping."""
        return self.model_dump(mode="json")
