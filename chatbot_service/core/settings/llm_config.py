"""LLM provider configuration."""

from typing import Literal

from pydantic import BaseModel, SecretStr

Provider = Literal["openai", "gemini", "anthropic"]


class LLMConfig(BaseModel, frozen=True):
    """LLM provider settings."""

    provider: Provider
    openai_api_key: SecretStr
    openai_model: str
    gemini_api_key: SecretStr
    gemini_model: str
    anthropic_api_key: SecretStr
    anthropic_model: str
    temperature: float
    max_tokens: int
    top_p: float

    @property
    def active_model(self) -> str:
        """Model name of the selected provider."""
        match self.provider:
            case "openai":
                return self.openai_model
            case "anthropic":
                return self.anthropic_model
            case _:
                return self.gemini_model

    @property
    def active_api_key(self) -> SecretStr:
        """API key of the selected provider."""
        match self.provider:
            case "openai":
                return self.openai_api_key
            case "anthropic":
                return self.anthropic_api_key
            case _:
                return self.gemini_api_key

    @property
    def is_configured(self) -> bool:
        """Check whether the selected provider has an API key."""
        return bool(self.active_api_key.get_secret_value())
