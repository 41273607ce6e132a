"""
Tests for the provider gateway: request shape, response parsing, error mapping.

No network access; the openai and anthropic SDK clients are replaced per test.

Run with:
    pytest tests/test_llm.py -v
"""

import json
from types import SimpleNamespace

import anthropic
import httpx
import openai
import pytest

from sage.cli.args import PROVIDER_CHOICES
from sage.llm import (
    PROVIDERS, Provider, ProviderCredentials, TokenUsage, ClaudeClient, OpenAIClient,
    AuthError, LLMError, NetworkError, NoResponseError, ResponseError, UnsupportedProviderError,
    generate, get_client,
)
from sage.prompts import OPENAI_SYSTEM_PROMPT

API_KEY = "sk-test-secret"

SDKS = {"openai": openai, "claude": anthropic}
ENDPOINTS = {
    "openai": "https://api.openai.com/v1/chat/completions",
    "claude": "https://api.anthropic.com/v1/messages",
}


class FakeReply:
    """Stands in for an SDK model object."""

    def __init__(self, data):
        self._data = data

    def to_dict(self):
        return self._data


@pytest.fixture
def sdk(monkeypatch):
    """Replace both SDK client classes; record calls and reply or raise as configured."""
    class _Sdk:
        clients = []
        requests = []
        reply = FakeReply({})
        error = None

        def respond(self, data):
            self.reply = FakeReply(data)

        def fail_with_status(self, provider, code, body=""):
            module = SDKS[provider]
            request = httpx.Request("POST", ENDPOINTS[provider])
            response = httpx.Response(code, request=request, text=body)
            error_cls = {
                401: module.AuthenticationError,
                403: module.PermissionDeniedError,
                429: module.RateLimitError,
            }.get(code, module.InternalServerError)
            self.error = error_cls("status error", response=response, body=None)

        def _create(self, **kwargs):
            self.requests.append(kwargs)
            if self.error is not None:
                raise self.error
            return self.reply

        def client(self, **kwargs):
            self.clients.append(kwargs)
            return SimpleNamespace(
                chat=SimpleNamespace(completions=SimpleNamespace(create=self._create)),
                messages=SimpleNamespace(create=self._create),
            )

        @property
        def last_request(self):
            return self.requests[-1]

    fake = _Sdk()
    fake.clients = []
    fake.requests = []
    monkeypatch.setattr(openai, "OpenAI", fake.client)
    monkeypatch.setattr(anthropic, "Anthropic", fake.client)
    return fake


def _openai_reply(content="feat: add thing", usage=None):
    data = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    if usage is not None:
        data["usage"] = usage
    return data


def _claude_reply(content=None, usage=None):
    data = {"content": content if content is not None else [{"type": "text", "text": "feat: add thing"}]}
    if usage is not None:
        data["usage"] = usage
    return data


# ---------------------------------------------------------------------------
# Provider registry
# ---------------------------------------------------------------------------

class TestProviderRegistry:

    def test_every_provider_has_client(self):
        assert set(PROVIDERS) == set(Provider)

    def test_cli_choices_follow_enum(self):
        assert PROVIDER_CHOICES == [p.value for p in Provider]

    @pytest.mark.parametrize("name, client_cls", [
        ("openai", OpenAIClient),
        ("claude", ClaudeClient),
        (Provider.CLAUDE, ClaudeClient),
    ])
    def test_get_client(self, sdk, name, client_cls):
        assert isinstance(get_client(name, ProviderCredentials(API_KEY)), client_cls)

    def test_sdk_client_without_retries(self, sdk):
        get_client("openai", ProviderCredentials(API_KEY))
        get_client("claude", ProviderCredentials(API_KEY))

        assert [c["api_key"] for c in sdk.clients] == [API_KEY, API_KEY]
        assert all(c["max_retries"] == 0 for c in sdk.clients)
        assert sdk.clients[1]["default_headers"] == {"anthropic-version": "2023-06-01"}

    def test_unsupported_provider_never_sends(self, sdk):
        with pytest.raises(UnsupportedProviderError) as exc_info:
            generate("gemini", ProviderCredentials(API_KEY), "prompt")

        assert exc_info.value.provider == "gemini"
        assert "openai, claude" in str(exc_info.value)
        assert sdk.clients == []
        assert sdk.requests == []

    def test_default_and_override_model(self, sdk):
        assert get_client("openai", ProviderCredentials(API_KEY)).model == OpenAIClient.DEFAULT_MODEL
        assert get_client("claude", ProviderCredentials(API_KEY, "claude-3-haiku")).model == "claude-3-haiku"

    def test_credentials_repr_hides_key(self):
        assert API_KEY not in repr(ProviderCredentials(API_KEY, "gpt-4o"))


# ---------------------------------------------------------------------------
# OpenAI wire format
# ---------------------------------------------------------------------------

class TestOpenAIClient:

    def test_request(self, sdk):
        sdk.respond(_openai_reply())
        generate("openai", ProviderCredentials(API_KEY), "the prompt", max_tokens=300)

        assert sdk.last_request == {
            "model": "gpt-4-turbo",
            "messages": [
                {"role": "system", "content": OPENAI_SYSTEM_PROMPT},
                {"role": "user", "content": "the prompt"},
            ],
            "temperature": 0.7,
            "max_tokens": 300,
        }

    def test_max_tokens_omitted_when_unset(self, sdk):
        sdk.respond(_openai_reply())
        generate("openai", ProviderCredentials(API_KEY), "p")
        assert "max_tokens" not in sdk.last_request

    def test_single_request_per_call(self, sdk):
        sdk.respond(_openai_reply())
        generate("openai", ProviderCredentials(API_KEY), "p")
        assert len(sdk.requests) == 1

    def test_response_trimmed(self, sdk):
        sdk.respond(_openai_reply("  fix: handle null \n"))
        response = generate("openai", ProviderCredentials(API_KEY), "p")
        assert response.message == "fix: handle null"

    def test_usage_reported_total_trusted(self, sdk):
        sdk.respond(_openai_reply(usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 20}))
        response = generate("openai", ProviderCredentials(API_KEY), "p")
        assert response.usage == TokenUsage(10, 5, 20)

    def test_usage_missing(self, sdk):
        sdk.respond(_openai_reply())
        response = generate("openai", ProviderCredentials(API_KEY), "p")
        assert response.usage == TokenUsage(0, 0, 0)

    @pytest.mark.parametrize("data", [
        {"choices": []},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {}}]},
        {},
    ])
    def test_no_content(self, sdk, data):
        sdk.respond(data)
        with pytest.raises(NoResponseError):
            generate("openai", ProviderCredentials(API_KEY), "p")


# ---------------------------------------------------------------------------
# Claude wire format
# ---------------------------------------------------------------------------

class TestClaudeClient:

    def test_request(self, sdk):
        sdk.respond(_claude_reply())
        generate("claude", ProviderCredentials(API_KEY), "the prompt", max_tokens=300)

        assert sdk.last_request == {
            "model": "claude-3-sonnet-20240229",
            "messages": [
                {"role": "user", "content": [{"type": "text", "text": "the prompt"}]},
            ],
            "temperature": 0.7,
            "max_tokens": 300,
        }

    def test_max_tokens_falls_back(self, sdk):
        sdk.respond(_claude_reply())
        generate("claude", ProviderCredentials(API_KEY), "p")
        assert sdk.last_request["max_tokens"] == ClaudeClient.DEFAULT_MAX_TOKENS

    def test_usage_total_computed(self, sdk):
        sdk.respond(_claude_reply(usage={"input_tokens": 12, "output_tokens": 8}))
        response = generate("claude", ProviderCredentials(API_KEY), "p")
        assert response.message == "feat: add thing"
        assert response.usage == TokenUsage(12, 8, 20)

    def test_first_block_must_be_text(self, sdk):
        sdk.respond(_claude_reply([
            {"type": "tool_use", "id": "x"},
            {"type": "text", "text": "feat: ignored"},
        ]))
        with pytest.raises(NoResponseError):
            generate("claude", ProviderCredentials(API_KEY), "p")

    def test_empty_content(self, sdk):
        sdk.respond({"content": []})
        with pytest.raises(NoResponseError) as exc_info:
            generate("claude", ProviderCredentials(API_KEY), "p")
        assert exc_info.value.provider == "Claude"


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

class TestErrorMapping:

    @pytest.mark.parametrize("provider, display", [("openai", "OpenAI"), ("claude", "Claude")])
    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_failure(self, sdk, provider, display, status):
        sdk.fail_with_status(provider, status, '{"error": "invalid key"}')

        with pytest.raises(AuthError) as exc_info:
            generate(provider, ProviderCredentials(API_KEY), "p")

        assert exc_info.value.provider == display
        assert f"Authentication failed for {display}" in str(exc_info.value)
        assert API_KEY not in str(exc_info.value)

    @pytest.mark.parametrize("provider", ["openai", "claude"])
    def test_server_error_includes_body(self, sdk, provider):
        sdk.fail_with_status(provider, 500, '{"error": {"message": "overloaded"}}')

        with pytest.raises(ResponseError) as exc_info:
            generate(provider, ProviderCredentials(API_KEY), "p")

        assert "overloaded" in exc_info.value.details
        assert not isinstance(exc_info.value, AuthError)

    def test_error_without_body(self, sdk):
        sdk.fail_with_status("claude", 429)
        with pytest.raises(ResponseError) as exc_info:
            generate("claude", ProviderCredentials(API_KEY), "p")
        assert exc_info.value.details == "HTTP 429"

    @pytest.mark.parametrize("provider, display", [("openai", "OpenAI"), ("claude", "Claude")])
    def test_transport_failure(self, sdk, provider, display):
        request = httpx.Request("POST", ENDPOINTS[provider])
        sdk.error = SDKS[provider].APIConnectionError(message="Connection refused", request=request)

        with pytest.raises(NetworkError) as exc_info:
            generate(provider, ProviderCredentials(API_KEY), "p")

        assert exc_info.value.provider == display
        assert "Connection refused" in str(exc_info.value)

    def test_timeout_is_network_error(self, sdk):
        sdk.error = openai.APITimeoutError(request=httpx.Request("POST", ENDPOINTS["openai"]))
        with pytest.raises(NetworkError):
            generate("openai", ProviderCredentials(API_KEY), "p")

    def test_invalid_json(self, sdk):
        sdk.reply = "<html>gateway timeout</html>"
        with pytest.raises(ResponseError, match="Failed to parse response"):
            generate("openai", ProviderCredentials(API_KEY), "p")

    def test_json_decode_error(self, sdk):
        try:
            json.loads("<html>")
        except json.JSONDecodeError as e:
            sdk.error = e
        with pytest.raises(ResponseError, match="Failed to parse response"):
            generate("claude", ProviderCredentials(API_KEY), "p")

    def test_response_validation_error(self, sdk):
        request = httpx.Request("POST", ENDPOINTS["claude"])
        response = httpx.Response(200, request=request, text="<html>")
        sdk.error = anthropic.APIResponseValidationError(response=response, body=None)
        with pytest.raises(ResponseError, match="Failed to parse response"):
            generate("claude", ProviderCredentials(API_KEY), "p")

    def test_non_object_body(self, sdk):
        sdk.reply = ["not", "an", "object"]
        with pytest.raises(NoResponseError):
            generate("claude", ProviderCredentials(API_KEY), "p")

    def test_all_errors_share_base(self, sdk):
        sdk.fail_with_status("openai", 401)
        with pytest.raises(LLMError):
            generate("openai", ProviderCredentials(API_KEY), "p")


class TestTokenUsage:

    @pytest.mark.parametrize("counts, expected", [
        ((3, 4, None), TokenUsage(3, 4, 7)),
        ((3, 4, 100), TokenUsage(3, 4, 100)),
        ((None, None, None), TokenUsage(0, 0, 0)),
        ((-1, "7", None), TokenUsage(0, 0, 0)),
        ((True, 2, None), TokenUsage(0, 2, 2)),
    ])
    def test_from_counts(self, counts, expected):
        assert TokenUsage.from_counts(*counts) == expected
