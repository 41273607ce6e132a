"""LLM Client Package"""

from enum import Enum

from sage.llm.base import (
    LLMClient, LLMError, AiResponse, TokenUsage, ProviderCredentials,
    NetworkError, AuthError, ResponseError, NoResponseError, UnsupportedProviderError,
)
from sage.llm.claude import ClaudeClient
from sage.llm.openai import OpenAIClient


class Provider(str, Enum):
    """Supported providers. Every member must have an entry in PROVIDERS."""
    OPENAI = "openai"
    CLAUDE = "claude"


PROVIDERS: dict[Provider, type[LLMClient]] = {
    Provider.OPENAI: OpenAIClient,
    Provider.CLAUDE: ClaudeClient,
}


def resolve_provider(provider: str | Provider) -> Provider:
    """Map a provider name to its Provider member, or raise UnsupportedProviderError."""
    try:
        return Provider(provider)
    except ValueError:
        raise UnsupportedProviderError(str(provider), [p.value for p in Provider])


def get_client(provider: str | Provider, credentials: ProviderCredentials) -> LLMClient:
    """Get an LLM client for a provider name like 'openai' or 'claude'."""
    return PROVIDERS[resolve_provider(provider)](credentials)


def generate(provider: str | Provider, credentials: ProviderCredentials,
             prompt: str, max_tokens: int | None = None) -> AiResponse:
    """Run one generation request against a provider and return the normalized response."""
    return get_client(provider, credentials).generate(prompt, max_tokens)


__all__ = [
    "LLMClient",
    "LLMError",
    "AiResponse",
    "TokenUsage",
    "ProviderCredentials",
    "NetworkError",
    "AuthError",
    "ResponseError",
    "NoResponseError",
    "UnsupportedProviderError",
    "ClaudeClient",
    "OpenAIClient",
    "Provider",
    "PROVIDERS",
    "resolve_provider",
    "get_client",
    "generate",
]
