"""Chat message request and reply schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChatMessageIn(BaseModel):
    """Message sent by a client over the socket."""

    content: str = ""
    metadata: dict[str, Any] | None = None


class ChatReply(BaseModel):
    """Assistant reply returned to the client."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    message: str
    timestamp: str
    conversation_id: int | None = Field(default=None)

    def to_event(self) -> dict[str, Any]:
        """Payload of the ``response`` socket event."""
        return self.model_dump(mode="json", by_alias=True)
