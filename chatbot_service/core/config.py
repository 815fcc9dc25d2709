"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from chatbot_service.core.settings import (
    AppConfig,
    DatabaseConfig,
    KeycloakConfig,
    LLMConfig,
    ServerConfig,
    SessionConfig,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.llm.provider).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # AI Provider
    ai_provider: Literal["openai", "gemini", "anthropic"] = Field(
        default="gemini",
        description="AI provider to use",
    )

    # OpenAI
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model name",
    )

    # Gemini
    gemini_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Google Gemini API key",
    )
    gemini_model: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model name",
    )

    # Anthropic
    anthropic_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Anthropic API key",
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Anthropic model name",
    )

    # Generation
    ai_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    ai_max_tokens: int = Field(
        default=1000,
        ge=1,
        le=8192,
        description="Maximum tokens in a reply",
    )
    ai_top_p: float = Field(
        default=0.9,
        gt=0.0,
        le=1.0,
        description="Nucleus sampling probability mass",
    )

    # App
    app_name: str = Field(
        default="chatbot-service",
        description="Application name",
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version reported by health checks",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        description="Server port",
    )
    websocket_cors_origin: str = Field(
        default="http://localhost:4200",
        description="Allowed origin for Socket.IO and HTTP CORS",
    )
    rate_limit: str = Field(
        default="120/minute",
        description="Default HTTP rate limit per client address",
    )

    # Sessions
    session_ttl_seconds: int = Field(
        default=1800,
        ge=1,
        description="Chat session time-to-live in seconds",
    )
    session_cleanup_interval_seconds: int = Field(
        default=300,
        ge=1,
        description="Interval between expired session sweeps",
    )
    chat_history_limit: int = Field(
        default=20,
        ge=0,
        description="Most recent messages replayed to the AI provider (0 = all)",
    )

    # Database
    database_url: SecretStr | None = Field(
        default=None,
        description="Async database URL override (postgresql+asyncpg://...)",
    )
    postgres_host: str = Field(default="localhost", description="PostgreSQL host")
    postgres_port: int = Field(
        default=5430, ge=1, le=65535, description="PostgreSQL port"
    )
    postgres_user: str = Field(default="admin", description="PostgreSQL user")
    postgres_password: SecretStr = Field(
        default=SecretStr("admin"), description="PostgreSQL password"
    )
    chatbot_database: str = Field(
        default="chatbot", description="Chatbot database name"
    )

    # Keycloak
    keycloak_url: str = Field(
        default="http://localhost:8081",
        description="Keycloak base URL",
    )
    keycloak_realm: str = Field(
        default="public-realm",
        description="Realm whose roles are assigned",
    )
    keycloak_admin_user: str = Field(
        default="",
        description="Keycloak admin username",
    )
    keycloak_admin_password: SecretStr = Field(
        default=SecretStr(""),
        description="Keycloak admin password",
    )

    # --- Domain properties ---

    @cached_property
    def llm(self) -> LLMConfig:
        """AI provider configuration."""
        return LLMConfig(
            provider=self.ai_provider,
            openai_api_key=self.openai_api_key,
            openai_model=self.openai_model,
            gemini_api_key=self.gemini_api_key,
            gemini_model=self.gemini_model,
            anthropic_api_key=self.anthropic_api_key,
            anthropic_model=self.anthropic_model,
            temperature=self.ai_temperature,
            max_tokens=self.ai_max_tokens,
            top_p=self.ai_top_p,
        )

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            version=self.app_version,
            env=self.app_env,
            debug=self.debug,
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.host,
            port=self.port,
            cors_origin=self.websocket_cors_origin,
            rate_limit=self.rate_limit,
        )

    @cached_property
    def session(self) -> SessionConfig:
        """Chat session lifetime configuration."""
        return SessionConfig(
            ttl_seconds=self.session_ttl_seconds,
            cleanup_interval_seconds=self.session_cleanup_interval_seconds,
            history_limit=self.chat_history_limit,
        )

    @cached_property
    def database(self) -> DatabaseConfig:
        """Database connection configuration."""
        return DatabaseConfig(
            url=self.database_url,
            host=self.postgres_host,
            port=self.postgres_port,
            user=self.postgres_user,
            password=self.postgres_password,
            name=self.chatbot_database,
        )

    @cached_property
    def keycloak(self) -> KeycloakConfig:
        """Keycloak admin configuration."""
        return KeycloakConfig(
            url=self.keycloak_url,
            realm=self.keycloak_realm,
            admin_user=self.keycloak_admin_user,
            admin_password=self.keycloak_admin_password,
        )

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development


# Global settings instance
settings = Settings()
