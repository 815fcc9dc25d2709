"""Global dependencies for the application."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chatbot_service.core.config import settings
from chatbot_service.core.database import get_async_session, get_session_factory
from chatbot_service.repositories.practitioner_repo import PractitionerRepository
from chatbot_service.repositories.user_patient_repo import UserPatientRepository
from chatbot_service.services.ai_provider import AIProvider, get_ai_provider
from chatbot_service.services.chat_service import ChatService
from chatbot_service.services.keycloak_admin import KeycloakAdminClient
from chatbot_service.services.practitioner_service import PractitionerService
from chatbot_service.services.session_service import SessionService
from chatbot_service.services.user_patient_service import UserPatientService

SessionFactoryDep = Annotated[
    async_sessionmaker[AsyncSession], Depends(get_session_factory)
]
DbSessionDep = Annotated[AsyncSession, Depends(get_async_session)]


# --- Chat dependencies ---


def get_session_service(factory: SessionFactoryDep) -> SessionService:
    """Get SessionService running its own units of work."""
    return SessionService(factory)


def get_chat_service(
    factory: SessionFactoryDep,
    session_service: Annotated[SessionService, Depends(get_session_service)],
    ai_provider: Annotated[AIProvider, Depends(get_ai_provider)],
) -> ChatService:
    """Get ChatService wired with the configured provider and session policy."""
    return ChatService(
        session_factory=factory,
        session_service=session_service,
        ai_provider=ai_provider,
        session_ttl_seconds=settings.session.ttl_seconds,
        history_limit=settings.session.history_limit,
    )


# --- Mapping dependencies ---


def get_user_patient_repository(session: DbSessionDep) -> UserPatientRepository:
    """Get UserPatientRepository bound to the current session."""
    return UserPatientRepository(session)


def get_user_patient_service(
    repo: Annotated[UserPatientRepository, Depends(get_user_patient_repository)],
) -> UserPatientService:
    return UserPatientService(repo)


def get_practitioner_repository(session: DbSessionDep) -> PractitionerRepository:
    """Get PractitionerRepository bound to the current session."""
    return PractitionerRepository(session)


@lru_cache
def get_keycloak_client() -> KeycloakAdminClient:
    """Get the Keycloak admin client built from settings."""
    return KeycloakAdminClient(settings.keycloak)


def get_practitioner_service(
    repo: Annotated[PractitionerRepository, Depends(get_practitioner_repository)],
    keycloak: Annotated[KeycloakAdminClient, Depends(get_keycloak_client)],
) -> PractitionerService:
    return PractitionerService(repo, keycloak)
