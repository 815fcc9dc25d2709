"""Unit tests for the AI provider adapter."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from chatbot_service.services.ai_provider import (
    BUSY_MESSAGE,
    GENERIC_FAILURE_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    SYSTEM_PROMPT,
    AIProvider,
    AIProviderNotConfiguredError,
    HistoryTurn,
    build_chat_model,
    chat_with_ai,
)
from tests.conftest import make_llm_config


class RateLimitError(Exception):
    status_code = 429


class AuthError(Exception):
    status_code = 401


class TestBuildMessages:
    def test_system_prompt_history_then_message(self) -> None:
        history = [
            HistoryTurn(role="user", content="Hi"),
            HistoryTurn(role="assistant", content="Hello, how can I help?"),
        ]

        messages = AIProvider.build_messages("I have a headache", history)

        assert isinstance(messages[0], SystemMessage)
        assert messages[0].content == SYSTEM_PROMPT
        assert isinstance(messages[1], HumanMessage)
        assert isinstance(messages[2], AIMessage)
        assert isinstance(messages[-1], HumanMessage)
        assert messages[-1].content == "I have a headache"
        assert len(messages) == 4

    def test_unknown_roles_skipped(self) -> None:
        messages = AIProvider.build_messages("q", [HistoryTurn(role="system", content="x")])
        assert len(messages) == 2


class TestChat:
    @pytest.mark.asyncio
    async def test_success(self, ai_provider: AIProvider, mock_llm: MagicMock) -> None:
        result = await ai_provider.chat("Hello", [HistoryTurn("user", "earlier")])

        assert result.success is True
        assert result.response == "Test response"
        sent = mock_llm.ainvoke.call_args.args[0]
        assert [m.content for m in sent[1:]] == ["earlier", "Hello"]

    @pytest.mark.asyncio
    async def test_content_blocks_joined(self, mock_llm: MagicMock) -> None:
        mock_llm.ainvoke = AsyncMock(
            return_value=AIMessage(
                content=[{"type": "text", "text": "Part one. "}, "Part two."]
            )
        )
        provider = AIProvider(make_llm_config(), llm=mock_llm)

        result = await provider.chat("Hello")

        assert result.response == "Part one. Part two."

    @pytest.mark.asyncio
    async def test_rate_limit_maps_to_busy(self, mock_llm: MagicMock) -> None:
        mock_llm.ainvoke = AsyncMock(side_effect=RateLimitError("Too many requests"))
        provider = AIProvider(make_llm_config(), llm=mock_llm)

        result = await provider.chat("Hello")

        assert result.success is False
        assert result.response == BUSY_MESSAGE
        assert result.error == "Rate limit exceeded"

    @pytest.mark.asyncio
    async def test_auth_failure_maps_to_not_configured(
        self, mock_llm: MagicMock
    ) -> None:
        mock_llm.ainvoke = AsyncMock(side_effect=AuthError("invalid key"))
        provider = AIProvider(make_llm_config(), llm=mock_llm)

        result = await provider.chat("Hello")

        assert result.success is False
        assert result.response == NOT_CONFIGURED_MESSAGE

    @pytest.mark.asyncio
    async def test_other_failure_is_generic(self, mock_llm: MagicMock) -> None:
        mock_llm.ainvoke = AsyncMock(side_effect=ConnectionError("socket closed"))
        provider = AIProvider(make_llm_config(), llm=mock_llm)

        result = await provider.chat("Hello")

        assert result.success is False
        assert result.response == GENERIC_FAILURE_MESSAGE
        assert result.error == "socket closed"

    @pytest.mark.asyncio
    async def test_missing_key_never_raises(self) -> None:
        provider = AIProvider(make_llm_config("openai", api_key=""))

        result = await provider.chat("Hello")

        assert result.success is False
        assert result.response == NOT_CONFIGURED_MESSAGE


class TestProviderInfo:
    def test_provider_info(self, ai_provider: AIProvider) -> None:
        assert ai_provider.name == "gemini"
        assert ai_provider.provider_info() == {
            "provider": "gemini",
            "model": "gemini-2.0-flash",
            "configured": True,
        }

    def test_build_chat_model_requires_key(self) -> None:
        with pytest.raises(AIProviderNotConfiguredError):
            build_chat_model(make_llm_config("anthropic", api_key=""))


class TestChatWithAI:
    @pytest.mark.asyncio
    async def test_uses_default_provider(
        self, ai_provider: AIProvider, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            "chatbot_service.services.ai_provider.get_ai_provider", lambda: ai_provider
        )

        result = await chat_with_ai("Hello")

        assert result.success is True
        assert result.response == "Test response"
