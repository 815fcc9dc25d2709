"""Chat session state schema."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class SessionData(BaseModel):
    """Opaque per-connection state stored in the sessions table."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str
    patient_id: str | None = None
    start_time: str = Field(default_factory=_now_iso)
    message_count: int = 0
    last_activity: str = Field(default_factory=_now_iso)
    context: dict[str, Any] | None = None

    def to_storage(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used in the stored blob."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def touch(self) -> None:
        """Record one more exchanged message."""
        self.message_count += 1
        self.last_activity = _now_iso()
