"""Domain-specific configuration models."""

from chatbot_service.core.settings.app_config import AppConfig
from chatbot_service.core.settings.database_config import DatabaseConfig
from chatbot_service.core.settings.keycloak_config import KeycloakConfig
from chatbot_service.core.settings.llm_config import LLMConfig
from chatbot_service.core.settings.server_config import ServerConfig
from chatbot_service.core.settings.session_config import SessionConfig

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "KeycloakConfig",
    "LLMConfig",
    "ServerConfig",
    "SessionConfig",
]
