"""Abstract base class for LLM provider adapters.

Each adapter:
1. Builds its backend's request envelope (auth, body shape, JSON-output hint)
2. Issues exactly one HTTP call, no retry, no streaming
3. Extracts the generated text from its backend's response envelope
4. Decodes that text into the canonical AnalysisResult

Adapters hold no mutable state: the API key arrives with every call.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

import httpx

from repolens.errors import ProviderError
from repolens.llm.parsing import parse_analysis_text
from repolens.models.analysis import AnalysisResult

logger = logging.getLogger(__name__)

# Maximum characters of backend error text kept on ProviderError
MAX_DETAIL_LENGTH = 500


@dataclass
class ProviderRequest:
    """Backend-specific HTTP request.

    Attributes:
        url: Endpoint URL
        body: JSON body
        headers: Request headers (auth included where the backend uses a header)
        params: Query parameters (auth included where the backend uses the URL)
    """

    url: str
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)


class Provider(ABC):
    """Translates a neutral prompt into one backend's wire protocol.

    Attributes:
        provider_id: Provider identifier (matches ProviderConfig.provider_id)
        display_name: Human-readable backend name used in error messages
        default_base_url: Endpoint base used when no override is configured
    """

    provider_id: ClassVar[str]
    display_name: ClassVar[str]
    default_base_url: ClassVar[str]

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        model: str,
        base_url: str | None = None,
        timeout: float = 120.0,
    ) -> None:
        """Initialize the adapter.

        Args:
            http_client: Shared async HTTP client
            model: Model identifier for this backend
            base_url: Endpoint base URL override
            timeout: Request timeout in seconds
        """
        self._http = http_client
        self.model = model
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.timeout = timeout

    @abstractmethod
    def build_request(self, api_key: str, prompt: str) -> ProviderRequest:
        """Build the backend request envelope for a prompt."""
        pass

    @abstractmethod
    def extract_text(self, payload: dict[str, Any]) -> str:
        """Extract the generated text from the backend response envelope.

        Raises:
            ProviderError: If the expected envelope fields are absent
        """
        pass

    async def analyze(self, api_key: str, prompt: str) -> AnalysisResult:
        """Run one analysis call.

        Args:
            api_key: API key for this backend
            prompt: Provider-neutral prompt text

        Returns:
            Canonical AnalysisResult

        Raises:
            ProviderError: Transport, auth or envelope failure
            ParseError: Generated text does not match the canonical shape
        """
        request = self.build_request(api_key, prompt)
        logger.info(
            "Sending analysis request to %s (model=%s, %d prompt chars)",
            self.display_name,
            self.model,
            len(prompt),
        )

        payload = await self._send(request)
        text = self.extract_text(payload)
        return parse_analysis_text(self.provider_id, text)

    async def _send(self, request: ProviderRequest) -> dict[str, Any]:
        try:
            response = await self._http.post(
                request.url,
                json=request.body,
                headers={"Content-Type": "application/json", **request.headers},
                params=request.params or None,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            # The exception text is not echoed: for URL-keyed backends it may carry the key
            raise ProviderError(
                self.provider_id,
                f"{self.display_name} API request failed: {type(e).__name__}",
            ) from e

        if not response.is_success:
            detail = self._error_detail(response)
            raise ProviderError(
                self.provider_id,
                f"{self.display_name} API error: {response.status_code} "
                f"{response.reason_phrase} - {detail}",
                status_code=response.status_code,
                detail=detail,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(
                self.provider_id,
                f"Invalid response from {self.display_name} API: body is not JSON",
                status_code=response.status_code,
            ) from e

        if not isinstance(payload, dict):
            raise self.invalid_envelope("top-level value is not an object")
        return payload

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        """Backend message text: error.message when present, else the raw body."""
        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"][:MAX_DETAIL_LENGTH]
            if isinstance(error, str):
                return error[:MAX_DETAIL_LENGTH]

        return response.text.strip()[:MAX_DETAIL_LENGTH]

    def invalid_envelope(self, reason: str) -> ProviderError:
        """Build the error for a success response missing expected fields."""
        return ProviderError(
            self.provider_id, f"Invalid response from {self.display_name} API: {reason}"
        )
