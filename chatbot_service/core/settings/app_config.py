"""Chatbot service identity and deployment environment."""

from typing import Literal

from pydantic import BaseModel


class AppConfig(BaseModel, frozen=True):
    """Service name and version reported by ``/health`` and the OpenAPI doc."""

    name: str
    version: str
    env: Literal["development", "staging", "production"]
    debug: bool

    @property
    def is_development(self) -> bool:
        return self.env == "development"

    @property
    def auto_create_tables(self) -> bool:
        """Create chat tables at startup instead of relying on Alembic."""
        return self.is_development

    @property
    def echo_sql(self) -> bool:
        """Log SQL statements; only honoured in development."""
        return self.debug and self.is_development
