"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from chatbot_service.core.database import Base
from chatbot_service.core.settings import KeycloakConfig, LLMConfig
from chatbot_service.models.conversation import Conversation  # noqa: F401
from chatbot_service.models.message import Message  # noqa: F401
from chatbot_service.models.session import SessionRecord  # noqa: F401
from chatbot_service.models.user_patient_mapping import UserPatientMapping  # noqa: F401
from chatbot_service.models.user_practitioner_mapping import (  # noqa: F401
    UserPractitionerMapping,
)
from chatbot_service.services.ai_provider import AIProvider
from chatbot_service.services.chat_service import ChatService
from chatbot_service.services.keycloak_admin import KeycloakAdminClient
from chatbot_service.services.session_service import SessionService

# --- Test DB (SQLite in-memory) ---

test_engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
testing_session_factory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(autouse=True)
async def setup_db() -> AsyncGenerator[None, None]:
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a test database session."""
    async with testing_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def override_get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Provide the test session factory."""
    return testing_session_factory


# --- Clock ---


class FakeClock:
    """Manually advanced UTC clock for expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# --- Mock LLM and provider ---


def make_llm_config(provider: str = "gemini", api_key: str = "test-key") -> LLMConfig:
    """Build an LLMConfig with the key set for ``provider`` only."""
    keys = {name: SecretStr("") for name in ("openai", "gemini", "anthropic")}
    keys[provider] = SecretStr(api_key)
    return LLMConfig(
        provider=provider,  # type: ignore[arg-type]
        openai_api_key=keys["openai"],
        openai_model="gpt-4o-mini",
        gemini_api_key=keys["gemini"],
        gemini_model="gemini-2.0-flash",
        anthropic_api_key=keys["anthropic"],
        anthropic_model="claude-3-5-sonnet-latest",
        temperature=0.7,
        max_tokens=1000,
        top_p=0.9,
    )


@pytest.fixture
def mock_llm() -> MagicMock:
    """Create a mock LLM for testing."""
    mock = MagicMock(spec=BaseChatModel)
    mock.ainvoke = AsyncMock(return_value=AIMessage(content="Test response"))
    return mock


@pytest.fixture
def ai_provider(mock_llm: MagicMock) -> AIProvider:
    """Gemini-configured provider backed by the mock LLM."""
    return AIProvider(make_llm_config(), llm=mock_llm)


# --- Services ---


@pytest.fixture
def session_service(clock: FakeClock) -> SessionService:
    return SessionService(testing_session_factory, clock=clock)


@pytest.fixture
def chat_service_factory(
    session_service: SessionService, ai_provider: AIProvider
) -> Callable[..., ChatService]:
    """Build a ChatService over the test database with overridable policy."""

    def _build(history_limit: int = 20, session_ttl_seconds: int = 1800) -> ChatService:
        return ChatService(
            session_factory=testing_session_factory,
            session_service=session_service,
            ai_provider=ai_provider,
            session_ttl_seconds=session_ttl_seconds,
            history_limit=history_limit,
        )

    return _build


@pytest.fixture
def chat_service(chat_service_factory: Callable[..., ChatService]) -> ChatService:
    return chat_service_factory()


@pytest.fixture
def keycloak_client() -> MagicMock:
    """Keycloak client whose role assignment succeeds."""
    mock = MagicMock(spec=KeycloakAdminClient)
    mock.assign_realm_role = AsyncMock(return_value=True)
    return mock


def make_keycloak_config(admin_user: str = "admin", admin_password: str = "secret") -> KeycloakConfig:
    return KeycloakConfig(
        url="http://keycloak.test",
        realm="healthcare",
        admin_user=admin_user,
        admin_password=SecretStr(admin_password),
    )


# --- App override & client fixtures ---


def _get_app(ai_provider: AIProvider, keycloak_client: MagicMock):  # type: ignore[no-untyped-def]
    """Import app lazily and apply overrides."""
    from chatbot_service.core.database import get_async_session, get_session_factory
    from chatbot_service.dependencies import get_keycloak_client
    from chatbot_service.main import app, limiter
    from chatbot_service.services.ai_provider import get_ai_provider

    limiter.reset()
    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_session_factory] = override_get_session_factory
    app.dependency_overrides[get_ai_provider] = lambda: ai_provider
    app.dependency_overrides[get_keycloak_client] = lambda: keycloak_client
    return app


@pytest.fixture
async def async_client(
    ai_provider: AIProvider, keycloak_client: MagicMock
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client for async tests."""
    application = _get_app(ai_provider, keycloak_client)
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    application.dependency_overrides.clear()


# --- DB session for tests ---


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a raw async session for repository tests."""
    async with testing_session_factory() as session:
        yield session
