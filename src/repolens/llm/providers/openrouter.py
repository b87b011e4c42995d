"""OpenRouter adapter.

OpenRouter speaks the chat-completions protocol behind a bearer header; the
model id is namespaced by upstream vendor (e.g. "openai/gpt-4o").
"""

from repolens.llm.providers.openai import ChatCompletionsProvider

APP_TITLE = "repolens"


class OpenRouterProvider(ChatCompletionsProvider):
    """OpenRouter API."""

    provider_id = "openrouter"
    display_name = "OpenRouter"
    default_base_url = "https://openrouter.ai/api/v1"

    def build_headers(self, api_key: str) -> dict[str, str]:
        # X-Title attributes the traffic to this app on OpenRouter dashboards
        return {**super().build_headers(api_key), "X-Title": APP_TITLE}
