"""LLM provider configuration entities.

ProviderConfig is the resolved credential a single analysis run uses.
ProviderSettings is the user-editable, persisted form: the active provider
plus one API key per provider.
"""

from dataclasses import dataclass, field

# Valid LLM providers
VALID_PROVIDERS = ("openrouter", "gemini", "openai")

DEFAULT_PROVIDER = "openrouter"


def _validate_provider(provider_id: str) -> str:
    provider_id = provider_id.lower().strip()
    if provider_id not in VALID_PROVIDERS:
        raise ValueError(
            f"Invalid provider '{provider_id}'. Must be one of: {list(VALID_PROVIDERS)}"
        )
    return provider_id


@dataclass(frozen=True)
class ProviderConfig:
    """Credential for one analysis run.

    Attributes:
        provider_id: LLM provider (openrouter, gemini, openai)
        api_key: API key for that provider
    """

    provider_id: str
    api_key: str = field(repr=False)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        object.__setattr__(self, "provider_id", _validate_provider(self.provider_id))
        if not self.api_key or not self.api_key.strip():
            raise ValueError(f"api_key is required for {self.provider_id} provider")


@dataclass(frozen=True)
class ProviderSettings:
    """Persisted provider selection and API keys.

    Attributes:
        provider: Active provider id
        api_keys: Map of provider id to API key ("" when unset)
    """

    provider: str = DEFAULT_PROVIDER
    api_keys: dict[str, str] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "provider", _validate_provider(self.provider))
        keys = {provider_id: "" for provider_id in VALID_PROVIDERS}
        for provider_id, key in self.api_keys.items():
            keys[_validate_provider(provider_id)] = (key or "").strip()
        object.__setattr__(self, "api_keys", keys)

    @property
    def is_configured(self) -> bool:
        """True when the active provider has an API key."""
        return bool(self.api_keys.get(self.provider))

    def active_config(self) -> ProviderConfig | None:
        """Return the credential for the active provider, or None if unset."""
        if not self.is_configured:
            return None
        return ProviderConfig(provider_id=self.provider, api_key=self.api_keys[self.provider])

    def with_provider(self, provider: str) -> "ProviderSettings":
        """Return a copy with a different active provider."""
        return ProviderSettings(provider=provider, api_keys=dict(self.api_keys))

    def with_api_key(self, provider: str, api_key: str) -> "ProviderSettings":
        """Return a copy with the API key of one provider replaced."""
        keys = dict(self.api_keys)
        keys[_validate_provider(provider)] = api_key
        return ProviderSettings(provider=self.provider, api_keys=keys)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {"provider": self.provider, "api_keys": dict(self.api_keys)}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ProviderSettings":
        """Create ProviderSettings from a dictionary, ignoring unknown providers."""
        provider = data.get("provider") or DEFAULT_PROVIDER
        raw_keys = data.get("api_keys")
        keys: dict[str, str] = {}
        if isinstance(raw_keys, dict):
            keys = {
                str(k): str(v or "")
                for k, v in raw_keys.items()
                if str(k) in VALID_PROVIDERS
            }
        return cls(provider=str(provider), api_keys=keys)
