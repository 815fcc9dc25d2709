"""Chat session lifetime configuration."""

from pydantic import BaseModel


class SessionConfig(BaseModel, frozen=True):
    """Session TTL, sweep interval and history window settings."""

    ttl_seconds: int
    cleanup_interval_seconds: int
    history_limit: int
