"""Google Gemini generate-content adapter.

- Auth: API key in the "key" query parameter
- Body: {"contents": [{"parts": [{"text": ...}]}], "generationConfig": {"responseMimeType": "application/json"}}
- Text: candidates[0].content.parts[*].text
"""

from typing import Any

from repolens.llm.providers.base import Provider, ProviderRequest


class GeminiProvider(Provider):
    """Gemini API (v1beta generateContent)."""

    provider_id = "gemini"
    display_name = "Gemini"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"

    def build_request(self, api_key: str, prompt: str) -> ProviderRequest:
        return ProviderRequest(
            url=f"{self.base_url}/models/{self.model}:generateContent",
            params={"key": api_key},
            body={
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {"responseMimeType": "application/json"},
            },
        )

    def extract_text(self, payload: dict[str, Any]) -> str:
        candidates = payload.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            feedback = payload.get("promptFeedback")
            if isinstance(feedback, dict) and feedback.get("blockReason"):
                raise self.invalid_envelope(f"prompt blocked ({feedback['blockReason']})")
            raise self.invalid_envelope("missing candidates")

        first = candidates[0]
        content = first.get("content") if isinstance(first, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list) or not parts:
            raise self.invalid_envelope("missing candidates[0].content.parts")

        texts = [
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        if not texts:
            raise self.invalid_envelope("no text in candidates[0].content.parts")
        return "".join(texts)
