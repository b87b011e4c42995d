"""repolens configuration system.

Configuration is YAML-based with environment variable substitution (${VAR}).
Provider selection and API keys are NOT part of this file: they are user
state persisted by repolens.stores.ProviderSettingsStore.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.repolens/config.yaml
3. ./repolens.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from repolens.models.llm_config import VALID_PROVIDERS

# =============================================================================
# Configuration Dataclasses
# =============================================================================

DEFAULT_MODELS = {
    "openrouter": "openai/gpt-4o",
    "gemini": "gemini-2.5-flash",
    "openai": "gpt-4o",
}


@dataclass
class GitHubConfig:
    """Hosting API configuration.

    Attributes:
        token: GitHub token (falls back to the GITHUB_TOKEN env var)
        api_url: REST API base URL
        timeout: Request timeout in seconds
        max_concurrency: Maximum parallel file fetches per analysis run
    """

    token: str | None = None
    api_url: str = "https://api.github.com"
    timeout: float = 30.0
    max_concurrency: int = 5

    def __post_init__(self) -> None:
        """Validate GitHub configuration."""
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1 (got {self.max_concurrency})")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive (got {self.timeout})")
        self.api_url = self.api_url.rstrip("/")

    def resolve_token(self) -> str | None:
        """Return the configured token, or GITHUB_TOKEN from the environment."""
        return self.token or os.environ.get("GITHUB_TOKEN") or None


@dataclass
class LLMConfig:
    """LLM backend configuration.

    Attributes:
        timeout: Request timeout in seconds for one analysis call
        models: Model name per provider id
        base_urls: Optional endpoint base URL override per provider id
    """

    timeout: float = 120.0
    models: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_MODELS))
    base_urls: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate provider ids and fill in default models."""
        for mapping in (self.models, self.base_urls):
            unknown = set(mapping) - set(VALID_PROVIDERS)
            if unknown:
                raise ValueError(
                    f"Invalid LLM provider: {sorted(unknown)}. Valid: {list(VALID_PROVIDERS)}"
                )
        self.models = {**DEFAULT_MODELS, **self.models}
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive (got {self.timeout})")

    def model_for(self, provider_id: str) -> str:
        return self.models[provider_id]


@dataclass
class StorageConfig:
    """Local persistence configuration.

    Attributes:
        state_dir: Directory holding the key/value store file
    """

    state_dir: str = "~/.repolens"

    @property
    def path(self) -> Path:
        return Path(self.state_dir).expanduser()


@dataclass
class RepoLensConfig:
    """Top-level repolens configuration.

    Attributes:
        github: Hosting API settings
        llm: LLM backend settings
        storage: Local state location
    """

    github: GitHubConfig = field(default_factory=GitHubConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    # Runtime overrides (set by loader)
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${GITHUB_TOKEN} -> value of GITHUB_TOKEN

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.repolens/config.yaml
    2. ./repolens.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".repolens" / "config.yaml",
        start_path / "repolens.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(data: dict[str, Any]) -> RepoLensConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        RepoLensConfig instance
    """
    data = substitute_env_vars(data)

    config = RepoLensConfig()

    if "github" in data:
        github_data = data["github"] or {}
        config.github = GitHubConfig(
            token=github_data.get("token") or None,
            api_url=github_data.get("api_url", config.github.api_url),
            timeout=float(github_data.get("timeout", config.github.timeout)),
            max_concurrency=int(
                github_data.get("max_concurrency", config.github.max_concurrency)
            ),
        )

    if "llm" in data:
        llm_data = data["llm"] or {}
        config.llm = LLMConfig(
            timeout=float(llm_data.get("timeout", config.llm.timeout)),
            models=dict(llm_data.get("models") or {}),
            base_urls=dict(llm_data.get("base_urls") or {}),
        )

    if "storage" in data:
        storage_data = data["storage"] or {}
        config.storage = StorageConfig(
            state_dir=storage_data.get("state_dir", config.storage.state_dir),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> RepoLensConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        RepoLensConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path) as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = RepoLensConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# repolens configuration
# Provider selection and API keys are managed with `repolens provider ...`

# Hosting API
github:
  # token: "${GITHUB_TOKEN}"  # defaults to the GITHUB_TOKEN env var
  api_url: "https://api.github.com"
  timeout: 30
  max_concurrency: 5     # parallel file fetches per analysis

# LLM backends
llm:
  timeout: 120
  models:
    openrouter: "openai/gpt-4o"
    gemini: "gemini-2.5-flash"
    openai: "gpt-4o"
  # base_urls:
  #   openai: "https://api.openai.com/v1"

# Local state (analysis cache, provider settings)
storage:
  state_dir: "~/.repolens"
'''
