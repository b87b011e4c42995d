"""OpenAI chat-completions adapter.

Also the base for other chat-completions-compatible backends:
- Auth: Authorization: Bearer <key>
- Body: {"model", "messages": [{"role": "user", ...}], "response_format": {"type": "json_object"}}
- Text: choices[0].message.content
"""

from typing import Any

from repolens.llm.providers.base import Provider, ProviderRequest


class ChatCompletionsProvider(Provider):
    """Shared envelope handling for chat-completions-style backends."""

    def build_headers(self, api_key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    def build_request(self, api_key: str, prompt: str) -> ProviderRequest:
        return ProviderRequest(
            url=f"{self.base_url}/chat/completions",
            headers=self.build_headers(api_key),
            body={
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "response_format": {"type": "json_object"},
            },
        )

    def extract_text(self, payload: dict[str, Any]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise self.invalid_envelope("missing choices")

        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(message, dict):
            raise self.invalid_envelope("missing choices[0].message")

        content = message.get("content")
        if not isinstance(content, str):
            raise self.invalid_envelope("missing choices[0].message.content")
        return content


class OpenAIProvider(ChatCompletionsProvider):
    """OpenAI API."""

    provider_id = "openai"
    display_name = "OpenAI"
    default_base_url = "https://api.openai.com/v1"
