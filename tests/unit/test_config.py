"""Unit tests for configuration system."""

from pathlib import Path

import pytest

from repolens.config import (
    DEFAULT_MODELS,
    GitHubConfig,
    LLMConfig,
    create_default_config,
    find_config_file,
    load_config,
    load_config_from_dict,
    substitute_env_vars,
)


class TestSubstituteEnvVars:
    """Tests for environment variable substitution."""

    def test_substitute_string(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substituting env var in string."""
        monkeypatch.setenv("TEST_VAR", "test_value")

        assert substitute_env_vars("prefix_${TEST_VAR}_suffix") == "prefix_test_value_suffix"

    def test_substitute_nested(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substitution inside dicts and lists."""
        monkeypatch.setenv("TOKEN", "secret123")

        result = substitute_env_vars({"github": {"token": "${TOKEN}"}, "list": ["${TOKEN}", 3]})

        assert result == {"github": {"token": "secret123"}, "list": ["secret123", 3]}

    def test_missing_env_var_raises(self) -> None:
        """Test that missing env var raises ValueError."""
        with pytest.raises(ValueError, match="Environment variable not set"):
            substitute_env_vars("${REPOLENS_NONEXISTENT_VAR}")


class TestGitHubConfig:
    """Tests for GitHubConfig."""

    def test_defaults(self) -> None:
        config = GitHubConfig()

        assert config.api_url == "https://api.github.com"
        assert config.timeout == 30.0
        assert config.max_concurrency == 5

    def test_token_falls_back_to_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")

        assert GitHubConfig().resolve_token() == "ghp_env"
        assert GitHubConfig(token="ghp_file").resolve_token() == "ghp_file"

    def test_no_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)

        assert GitHubConfig().resolve_token() is None

    def test_invalid_concurrency(self) -> None:
        with pytest.raises(ValueError, match="max_concurrency"):
            GitHubConfig(max_concurrency=0)


class TestLLMConfig:
    """Tests for LLMConfig."""

    def test_default_models(self) -> None:
        config = LLMConfig()

        assert config.model_for("openrouter") == "openai/gpt-4o"
        assert config.model_for("gemini") == "gemini-2.5-flash"
        assert config.model_for("openai") == "gpt-4o"

    def test_partial_override_keeps_other_defaults(self) -> None:
        config = LLMConfig(models={"openai": "gpt-4o-mini"})

        assert config.model_for("openai") == "gpt-4o-mini"
        assert config.model_for("gemini") == DEFAULT_MODELS["gemini"]

    def test_unknown_provider_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid LLM provider"):
            LLMConfig(models={"claude": "sonnet"})


class TestLoadConfig:
    """Tests for config loading."""

    def test_load_from_dict(self, tmp_path: Path) -> None:
        """Test every section is read."""
        config = load_config_from_dict(
            {
                "github": {"token": "ghp_x", "max_concurrency": 2},
                "llm": {"timeout": 60, "base_urls": {"openai": "http://localhost:8080/v1"}},
                "storage": {"state_dir": str(tmp_path)},
            }
        )

        assert config.github.token == "ghp_x"
        assert config.github.max_concurrency == 2
        assert config.llm.timeout == 60.0
        assert config.llm.base_urls == {"openai": "http://localhost:8080/v1"}
        assert config.storage.path == tmp_path

    def test_empty_sections_use_defaults(self) -> None:
        config = load_config_from_dict({"github": None, "llm": None})

        assert config.github.api_url == "https://api.github.com"
        assert config.llm.models == DEFAULT_MODELS

    def test_explicit_path_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "missing.yaml")

    def test_load_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "repolens.yaml"
        path.write_text("github:\n  api_url: https://ghe.example.com/api/v3/\n")

        config = load_config(config_path=path)

        assert config.github.api_url == "https://ghe.example.com/api/v3"
        assert config.config_path == path

    def test_default_config_loads(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the init template parses without any environment variable set."""
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(create_default_config())

        config = load_config(config_path=path)

        assert config.github.token is None
        assert config.llm.models == DEFAULT_MODELS


class TestFindConfigFile:
    """Tests for config file discovery."""

    def test_none_found(self, tmp_path: Path) -> None:
        assert find_config_file(tmp_path) is None

    def test_dot_directory_preferred(self, tmp_path: Path) -> None:
        (tmp_path / ".repolens").mkdir()
        preferred = tmp_path / ".repolens" / "config.yaml"
        preferred.write_text("{}")
        (tmp_path / "repolens.yaml").write_text("{}")

        assert find_config_file(tmp_path) == preferred.resolve()

    def test_root_file(self, tmp_path: Path) -> None:
        (tmp_path / "repolens.yaml").write_text("{}")

        assert find_config_file(tmp_path) == (tmp_path / "repolens.yaml").resolve()
