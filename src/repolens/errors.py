"""Error taxonomy for repolens.

Every failure raised by the analysis pipeline derives from RepoLensError:

- NotFoundError: repository or file absent on the hosting API (HTTP 404)
- RateLimitedError: hosting API budget exhausted (HTTP 403)
- TransportError: any other non-2xx or connection failure on the hosting API
- ProviderError: LLM backend failed or returned an unusable envelope
- ParseError: LLM output does not decode into the canonical result shape
- ConfigError: credentials missing, rejected before any network call
"""


class RepoLensError(Exception):
    """Base exception for repolens errors."""

    pass


class ConfigError(RepoLensError):
    """Raised when the provider or GitHub credentials are not configured."""

    pass


class HostingError(RepoLensError):
    """Base class for hosting API failures.

    Attributes:
        status_code: HTTP status returned by the hosting API (None if unreachable)
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(HostingError):
    """Repository, branch or file does not exist."""

    def __init__(self, message: str = "Repository or file not found.") -> None:
        super().__init__(message, status_code=404)


class RateLimitedError(HostingError):
    """Hosting API rate limit exhausted. Not retried automatically."""

    def __init__(
        self,
        message: str = "GitHub API rate limit exceeded. Please try again later.",
    ) -> None:
        super().__init__(message, status_code=403)


class TransportError(HostingError):
    """Any other non-success response or connection failure."""

    pass


class ProviderError(RepoLensError):
    """LLM backend reachable but the call failed or the envelope is unusable.

    Attributes:
        provider: Provider id (openrouter, gemini, openai)
        status_code: HTTP status code (None for connection or envelope errors)
        detail: Backend-provided message text
    """

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int | None = None,
        detail: str = "",
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.detail = detail


class ParseError(RepoLensError):
    """The model did not follow the requested output schema.

    Attributes:
        provider: Provider id that produced the text
        excerpt: Leading part of the raw generated text, for diagnostics
    """

    EXCERPT_LENGTH = 200

    def __init__(self, provider: str, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.provider = provider
        self.excerpt = raw_text[: self.EXCERPT_LENGTH]
