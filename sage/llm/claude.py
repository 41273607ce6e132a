"""Claude (Anthropic) Messages Client"""

import anthropic

from sage.llm.base import LLMClient, AiResponse, NoResponseError, TokenUsage, TEMPERATURE


class ClaudeClient(LLMClient):
    """Claude messages API. The SDK sends x-api-key and the pinned API version."""

    SDK = anthropic
    ENDPOINT = "https://api.anthropic.com/v1/messages"
    DEFAULT_MODEL = "claude-3-sonnet-20240229"
    DISPLAY_NAME = "Claude"
    API_VERSION = "2023-06-01"
    # The messages API rejects requests without max_tokens
    DEFAULT_MAX_TOKENS = 300

    def _create_client(self):
        return anthropic.Anthropic(
            api_key=self.api_key,
            max_retries=0,
            default_headers={"anthropic-version": self.API_VERSION},
        )

    def build_request(self, prompt: str, max_tokens: int | None = None) -> dict:
        return {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [{"type": "text", "text": prompt}],
                }
            ],
            "temperature": TEMPERATURE,
            "max_tokens": max_tokens if max_tokens is not None else self.DEFAULT_MAX_TOKENS,
        }

    def _send(self, request: dict):
        return self._client.messages.create(**request)

    def parse_response(self, data: dict) -> AiResponse:
        content = data.get("content")
        if not isinstance(content, list) or not content:
            raise NoResponseError(self.DISPLAY_NAME)

        # Only the first block counts, and only when it is text
        block = content[0]
        if not isinstance(block, dict) or block.get("type") != "text":
            raise NoResponseError(self.DISPLAY_NAME)
        text = block.get("text")
        if not isinstance(text, str):
            raise NoResponseError(self.DISPLAY_NAME)

        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}

        return AiResponse(
            message=text.strip(),
            usage=TokenUsage.from_counts(usage.get("input_tokens"), usage.get("output_tokens")),
        )
