"""AI provider adapter routing chat turns to OpenAI, Gemini or Anthropic."""

from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import structlog
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from chatbot_service.core.config import settings
from chatbot_service.core.settings import LLMConfig

logger = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are a courteous assistant for a healthcare clinic's patient portal.\n\n"
    "You can answer general health questions, gather symptoms before a visit, "
    "help with appointment requests and explain common procedures.\n"
    "Keep replies short and plain. Do not diagnose. If the user describes "
    "an emergency, tell them to call emergency services or go to the nearest "
    "emergency department right away. When in doubt, recommend speaking with "
    "a clinician."
)

NOT_CONFIGURED_MESSAGE = (
    "Sorry, the AI service is not properly configured. Please contact support."
)
BUSY_MESSAGE = "The AI service is currently busy. Please try again in a moment."
GENERIC_FAILURE_MESSAGE = "Sorry, I encountered an error. Please try again."


class AIProviderNotConfiguredError(Exception):
    """The selected provider has no API key."""


@dataclass(frozen=True)
class HistoryTurn:
    """Role/content pair replayed to the model."""

    role: str
    content: str


@dataclass(frozen=True)
class AIResult:
    """Normalized outcome of a single provider call.

    On failure ``response`` holds a message fit for end users and ``error``
    the reason for logs.
    """

    success: bool
    response: str | None = None
    error: str | None = None


def build_chat_model(llm_config: LLMConfig) -> BaseChatModel:
    """Create the LangChain chat model for the configured provider."""
    if not llm_config.is_configured:
        raise AIProviderNotConfiguredError(
            f"{llm_config.provider.upper()}_API_KEY is not configured"
        )
    match llm_config.provider:
        case "openai":
            return ChatOpenAI(
                model=llm_config.openai_model,
                api_key=llm_config.openai_api_key,
                temperature=llm_config.temperature,
                max_tokens=llm_config.max_tokens,
                top_p=llm_config.top_p,
                max_retries=0,
            )
        case "gemini":
            return ChatGoogleGenerativeAI(
                model=llm_config.gemini_model,
                google_api_key=llm_config.gemini_api_key,
                temperature=llm_config.temperature,
                max_output_tokens=llm_config.max_tokens,
                top_p=llm_config.top_p,
                max_retries=0,
            )
        case "anthropic":
            return ChatAnthropic(  # type: ignore[call-arg]
                model_name=llm_config.anthropic_model,
                api_key=llm_config.anthropic_api_key,
                temperature=llm_config.temperature,
                max_tokens=llm_config.max_tokens,
                max_retries=0,
            )
        case _:
            raise ValueError(f"Unsupported AI provider: {llm_config.provider}")


def _status_of(exc: BaseException) -> Any:
    for attr in ("status_code", "status", "code"):
        value = getattr(exc, attr, None)
        if value is not None:
            return value
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)


def _is_rate_limited(exc: BaseException) -> bool:
    status = _status_of(exc)
    if status == 429 or str(status) == "429":
        return True
    return "429" in str(exc) and "rate" in str(exc).lower()


def _is_auth_failure(exc: BaseException) -> bool:
    if isinstance(exc, AIProviderNotConfiguredError):
        return True
    text = str(exc)
    return "API_KEY" in text or "not configured" in text or _status_of(exc) == 401


class AIProvider:
    """Sends one chat turn to the configured provider and normalizes the result."""

    def __init__(
        self, llm_config: LLMConfig, llm: BaseChatModel | None = None
    ) -> None:
        self._config = llm_config
        self._llm = llm

    @property
    def name(self) -> str:
        """Configured provider name."""
        return self._config.provider

    def provider_info(self) -> dict[str, Any]:
        """Provider, model and whether an API key is present."""
        return {
            "provider": self._config.provider,
            "model": self._config.active_model,
            "configured": self._config.is_configured,
        }

    async def chat(
        self, message: str, history: Sequence[HistoryTurn] = ()
    ) -> AIResult:
        """Send ``message`` with prior ``history``; never raises."""
        try:
            llm = self._get_llm()
            reply = await llm.ainvoke(self.build_messages(message, history))
            return AIResult(success=True, response=_text_of(reply))
        except Exception as exc:
            logger.error(
                "AI provider call failed",
                provider=self._config.provider,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            if _is_auth_failure(exc):
                return AIResult(
                    success=False,
                    response=NOT_CONFIGURED_MESSAGE,
                    error="Invalid or missing API key",
                )
            if _is_rate_limited(exc):
                return AIResult(
                    success=False,
                    response=BUSY_MESSAGE,
                    error="Rate limit exceeded",
                )
            return AIResult(
                success=False,
                response=GENERIC_FAILURE_MESSAGE,
                error=str(exc) or type(exc).__name__,
            )

    @staticmethod
    def build_messages(
        message: str, history: Sequence[HistoryTurn] = ()
    ) -> list[BaseMessage]:
        """System prompt, replayed user/assistant turns, then the new message."""
        messages: list[BaseMessage] = [SystemMessage(content=SYSTEM_PROMPT)]
        for turn in history:
            if turn.role == "user":
                messages.append(HumanMessage(content=turn.content))
            elif turn.role == "assistant":
                messages.append(AIMessage(content=turn.content))
        messages.append(HumanMessage(content=message))
        return messages

    def _get_llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = build_chat_model(self._config)
        return self._llm


def _text_of(reply: BaseMessage) -> str:
    content = reply.content
    if isinstance(content, str):
        return content
    # Gemini and Anthropic may return a list of content blocks
    parts = [
        block if isinstance(block, str) else str(block.get("text", ""))
        for block in content
    ]
    return "".join(parts)


@lru_cache
def get_ai_provider() -> AIProvider:
    """Process-wide provider built from settings."""
    return AIProvider(settings.llm)


async def chat_with_ai(
    message: str, history: Sequence[HistoryTurn] = ()
) -> AIResult:
    """Send a chat turn through the default provider."""
    return await get_ai_provider().chat(message, history)
