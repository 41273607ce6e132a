"""LLM Base Classes and Shared Code"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import ModuleType


TEMPERATURE = 0.7


@dataclass(frozen=True)
class TokenUsage:
    """Token accounting normalized across providers."""
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_counts(cls, input_tokens, output_tokens, total_tokens=None) -> 'TokenUsage':
        """Build usage from raw counts. A reported total is trusted as-is."""
        input_tokens = _as_count(input_tokens)
        output_tokens = _as_count(output_tokens)
        if total_tokens is None:
            total = input_tokens + output_tokens
        else:
            total = _as_count(total_tokens)
        return cls(input_tokens=input_tokens, output_tokens=output_tokens, total_tokens=total)


def _as_count(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return 0
    return value


@dataclass
class AiResponse:
    """Structured response from any LLM provider."""
    message: str
    usage: TokenUsage


@dataclass
class ProviderCredentials:
    """API key plus optional model override for one provider."""
    api_key: str
    model: str | None = None

    def __repr__(self) -> str:
        return f"ProviderCredentials(api_key='***', model={self.model!r})"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class LLMError(Exception):
    """Raised when LLM operations fail."""

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider


class NetworkError(LLMError):
    """Transport failed before an HTTP response arrived."""

    def __init__(self, provider: str, details: str):
        super().__init__(
            provider,
            f"Network error connecting to {provider}: {details}\n\n"
            "Tip: Check your internet connection and API endpoint availability"
        )
        self.details = details


class AuthError(LLMError):
    """Provider rejected the credentials (401/403)."""

    def __init__(self, provider: str):
        super().__init__(
            provider,
            f"Authentication failed for {provider}\n\n"
            "Tip: Verify your API key with 'sage config -s' and update if needed"
        )


class ResponseError(LLMError):
    """Provider answered with an error status or an unreadable body."""

    def __init__(self, provider: str, details: str):
        super().__init__(
            provider,
            f"{provider} API error: {details}\n\n"
            "Tip: Check the API status page or try again later"
        )
        self.details = details


class NoResponseError(LLMError):
    """Successful status, but the body held no generated text."""

    def __init__(self, provider: str):
        super().__init__(
            provider,
            f"No response from {provider} API\n\n"
            "Tip: The API may be experiencing issues. Try again later"
        )


class UnsupportedProviderError(LLMError):
    """Provider name is not in the supported set."""

    def __init__(self, provider: str, supported: list[str] | None = None):
        names = ", ".join(supported or [])
        super().__init__(
            provider,
            f"Unsupported provider: {provider}\n\n"
            f"Tip: Supported providers are: {names}"
        )


# ---------------------------------------------------------------------------
# Client base
# ---------------------------------------------------------------------------

class LLMClient(ABC):
    """Abstract base for LLM clients.

    Subclasses own their wire schema (``build_request`` / ``parse_response``)
    and their vendor SDK; the single SDK call and the error mapping are shared.
    Both vendor SDKs expose the same exception names, so ``SDK`` is all the
    mapping needs to know.
    """

    SDK: ModuleType
    ENDPOINT: str = ""
    DEFAULT_MODEL: str = ""
    DISPLAY_NAME: str = ""

    def __init__(self, credentials: ProviderCredentials):
        self.api_key = credentials.api_key
        self.model = credentials.model or self.DEFAULT_MODEL
        self._client = self._create_client()

    @property
    def name(self) -> str:
        return f"{self.DISPLAY_NAME} ({self.model})"

    @abstractmethod
    def _create_client(self):
        """Return the SDK client. Retries stay off: one call, one request."""

    @abstractmethod
    def build_request(self, prompt: str, max_tokens: int | None = None) -> dict:
        """Return the keyword arguments for one SDK create call."""

    @abstractmethod
    def _send(self, request: dict):
        """Make the SDK create call and return its reply."""

    @abstractmethod
    def parse_response(self, data: dict) -> AiResponse:
        """Extract message and usage from a decoded 2xx body."""

    def generate(self, prompt: str, max_tokens: int | None = None) -> AiResponse:
        request = self.build_request(prompt, max_tokens)
        sdk = self.SDK

        try:
            reply = self._send(request)
        except (sdk.AuthenticationError, sdk.PermissionDeniedError):
            raise AuthError(self.DISPLAY_NAME)
        except sdk.APIStatusError as e:
            raise ResponseError(self.DISPLAY_NAME, _error_body(e))
        except sdk.APIConnectionError as e:
            raise NetworkError(self.DISPLAY_NAME, _connection_details(e))
        except sdk.APIError as e:
            raise ResponseError(self.DISPLAY_NAME, f"Failed to parse response: {e.message}")
        except json.JSONDecodeError as e:
            raise ResponseError(self.DISPLAY_NAME, f"Failed to parse response: {e}")

        data = reply.to_dict() if hasattr(reply, "to_dict") else reply
        if isinstance(data, (str, bytes)):
            # Non-JSON 2xx body handed back as raw text
            raise ResponseError(self.DISPLAY_NAME, "Failed to parse response: body is not JSON")
        if not isinstance(data, dict):
            raise NoResponseError(self.DISPLAY_NAME)
        return self.parse_response(data)


def _error_body(error) -> str:
    try:
        body = error.response.text
    except (AttributeError, UnicodeDecodeError):
        body = ""
    return body or f"HTTP {error.status_code}"


def _connection_details(error) -> str:
    cause = error.__cause__
    if cause is not None and str(cause):
        return str(cause)
    return error.message
