"""OpenAI Chat Completions Client"""

import openai

from sage.llm.base import LLMClient, AiResponse, NoResponseError, TokenUsage, TEMPERATURE
from sage.prompts import OPENAI_SYSTEM_PROMPT


class OpenAIClient(LLMClient):
    """OpenAI-style chat completion API. The SDK sends the bearer token."""

    SDK = openai
    ENDPOINT = "https://api.openai.com/v1/chat/completions"
    DEFAULT_MODEL = "gpt-4-turbo"
    DISPLAY_NAME = "OpenAI"

    def _create_client(self):
        return openai.OpenAI(api_key=self.api_key, max_retries=0)

    def build_request(self, prompt: str, max_tokens: int | None = None) -> dict:
        request = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": OPENAI_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": TEMPERATURE,
        }
        if max_tokens is not None:
            request["max_tokens"] = max_tokens
        return request

    def _send(self, request: dict):
        return self._client.chat.completions.create(**request)

    def parse_response(self, data: dict) -> AiResponse:
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise NoResponseError(self.DISPLAY_NAME)

        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise NoResponseError(self.DISPLAY_NAME)

        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}

        return AiResponse(
            message=content.strip(),
            usage=TokenUsage.from_counts(
                usage.get("prompt_tokens"),
                usage.get("completion_tokens"),
                usage.get("total_tokens"),
            ),
        )
