"""repolens CLI interface.

Commands:
- analyze: Analyze a GitHub repository with the active LLM provider
- show: Print the cached analysis of a repository
- invalidate: Drop the cached analysis of a repository
- provider: Show or edit the provider selection and API keys
- check: Validate credentials before analyzing
- init: Write a default configuration file

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --version: Show version and exit
"""

import asyncio
import json
from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import httpx
import typer

from repolens import __version__
from repolens.config import RepoLensConfig, create_default_config, load_config
from repolens.errors import ConfigError, RepoLensError
from repolens.models.analysis import AnalysisResult, AnalysisState
from repolens.models.llm_config import VALID_PROVIDERS, ProviderConfig, ProviderSettings
from repolens.models.repository import RepoKey
from repolens.stores import AnalysisCache, LocalStore, ProviderSettingsStore
from repolens.utils.logging import configure_from_cli, get_logger

# Create Typer app
app = typer.Typer(
    name="repolens",
    help="LLM-assisted code review of GitHub repositories",
    add_completion=False,
    no_args_is_help=True,
)
provider_app = typer.Typer(help="Show or edit the LLM provider settings", no_args_is_help=True)
app.add_typer(provider_app, name="provider")

# Global state
_config: RepoLensConfig | None = None
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"repolens {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """repolens - code review of GitHub repositories by an LLM.

    Samples the most relevant source files of a repository, asks the
    configured LLM provider for a structured review and caches the result.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, OSError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


# =============================================================================
# Helpers
# =============================================================================


def _get_config() -> RepoLensConfig:
    return _config or RepoLensConfig()


def _repo_key(owner: str, repo: str, branch: str) -> RepoKey:
    try:
        return RepoKey(owner=owner, name=repo, branch=branch)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _open_stores(config: RepoLensConfig) -> tuple[AnalysisCache, ProviderSettingsStore]:
    store = LocalStore.in_directory(config.storage.path)
    return AnalysisCache(store), ProviderSettingsStore(store)


def _create_http_client(timeout: float) -> httpx.AsyncClient:
    """Build the shared HTTP client for hosting and LLM calls."""
    return httpx.AsyncClient(timeout=timeout)


def _emit(content: str, output: Path | None) -> None:
    if output is None:
        typer.echo(content, nl=not content.endswith("\n"))
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding="utf-8")
    _logger.info(f"Report written to {output}")


# =============================================================================
# analyze command
# =============================================================================


async def _run_analysis(config: RepoLensConfig, key: RepoKey, force: bool) -> tuple[AnalysisState, str]:
    from repolens.github import GitHubClient
    from repolens.orchestrator import AnalysisOrchestrator
    from repolens.pipeline import AnalysisPipeline

    cache, settings_store = _open_stores(config)

    token = config.github.resolve_token()
    if not token:
        raise ConfigError("GitHub token not configured. Set github.token or GITHUB_TOKEN.")

    async with _create_http_client(config.github.timeout) as http_client:
        github = GitHubClient(
            token,
            api_url=config.github.api_url,
            timeout=config.github.timeout,
            http_client=http_client,
        )
        pipeline = AnalysisPipeline(github, http_client, config=config)
        orchestrator = AnalysisOrchestrator(pipeline, cache, settings_store=settings_store)

        if force:
            orchestrator.invalidate(key)
        state = orchestrator.view(key)
        if state.result is None:
            _logger.info(f"Analyzing {key} with {orchestrator.settings.provider}")
            state = await orchestrator.analyze_and_wait(key)
        else:
            _logger.info(f"Using cached analysis for {key}")

    return state, orchestrator.settings.provider


@app.command()
def analyze(
    owner: Annotated[str, typer.Argument(help="Repository owner")],
    repo: Annotated[str, typer.Argument(help="Repository name")],
    branch: Annotated[
        str,
        typer.Option(
            "--branch",
            "-b",
            help="Branch to analyze",
        ),
    ] = "main",
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Drop any cached analysis and run again",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output the result as JSON",
        ),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the report to a file instead of stdout",
        ),
    ] = None,
) -> None:
    """Analyze a repository and print the review.

    A cached result is reused unless --force is given.

    Exit codes:
        0: Analysis available
        1: Configuration or analysis error
    """
    from repolens.templates import ReportRenderer

    key = _repo_key(owner, repo, branch)
    config = _get_config()

    try:
        state, provider = asyncio.run(_run_analysis(config, key, force))
    except RepoLensError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except OSError as e:
        _logger.error(f"Could not update the analysis cache: {e}")
        raise typer.Exit(1)

    if state.result is None:
        _logger.error(state.error or f"No analysis available for {key}")
        raise typer.Exit(1)

    if json_output:
        content = ReportRenderer.render_json(key, state.result)
    else:
        content = ReportRenderer().render(key, state.result, provider=provider)
    _emit(content, output)


# =============================================================================
# show / invalidate commands
# =============================================================================


@app.command()
def show(
    owner: Annotated[str, typer.Argument(help="Repository owner")],
    repo: Annotated[str, typer.Argument(help="Repository name")],
    branch: Annotated[str, typer.Option("--branch", "-b", help="Branch")] = "main",
    json_output: Annotated[bool, typer.Option("--json", help="Output the result as JSON")] = False,
) -> None:
    """Print the cached analysis of a repository without any network call."""
    from repolens.templates import ReportRenderer

    key = _repo_key(owner, repo, branch)
    cache, _ = _open_stores(_get_config())

    result = cache.get(key)
    if result is None:
        _logger.error(f"No cached analysis for {key}")
        raise typer.Exit(1)

    if json_output:
        _emit(ReportRenderer.render_json(key, result), None)
    else:
        _emit(ReportRenderer().render(key, result), None)


@app.command()
def invalidate(
    owner: Annotated[str, typer.Argument(help="Repository owner")],
    repo: Annotated[str, typer.Argument(help="Repository name")],
    branch: Annotated[str, typer.Option("--branch", "-b", help="Branch")] = "main",
) -> None:
    """Drop the cached analysis of a repository."""
    key = _repo_key(owner, repo, branch)
    cache, _ = _open_stores(_get_config())

    try:
        removed = cache.invalidate(key)
    except OSError as e:
        _logger.error(f"Could not drop cached analysis for {key}: {e}")
        raise typer.Exit(1)
    if removed:
        _logger.info(f"Invalidated cached analysis for {key}")
    else:
        _logger.info(f"No cached analysis for {key}")


# =============================================================================
# provider commands
# =============================================================================


class _SettingsOnlyPipeline:
    """Pipeline for commands that only edit settings and never analyze."""

    async def run(self, key: RepoKey, provider_config: ProviderConfig | None) -> AnalysisResult:
        raise ConfigError(f"Analysis is not available from this command ({key})")


def _apply_settings_change(update: Callable[[ProviderSettings], ProviderSettings]) -> None:
    """Apply a settings change through the orchestrator so caches are dropped."""
    from repolens.orchestrator import AnalysisOrchestrator

    cache, settings_store = _open_stores(_get_config())
    orchestrator = AnalysisOrchestrator(_SettingsOnlyPipeline(), cache, settings_store=settings_store)
    try:
        new_settings = update(orchestrator.settings)
    except ValueError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    try:
        orchestrator.on_provider_config_changed(new_settings)
    except OSError as e:
        _logger.error(f"Could not save provider settings: {e}")
        raise typer.Exit(1)


def _check_provider(provider: str) -> str:
    provider = provider.lower().strip()
    if provider not in VALID_PROVIDERS:
        raise typer.BadParameter(f"Must be one of: {', '.join(VALID_PROVIDERS)}")
    return provider


@provider_app.command("show")
def provider_show(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show the active provider and which API keys are set (masked)."""
    from repolens.utils.preflight import mask_secret

    _, settings_store = _open_stores(_get_config())
    settings = settings_store.load()
    masked = {provider_id: mask_secret(key) for provider_id, key in settings.api_keys.items()}

    if json_output:
        typer.echo(json.dumps({"provider": settings.provider, "api_keys": masked}, indent=2))
        return

    typer.echo(f"Active provider: {settings.provider}")
    for provider_id in VALID_PROVIDERS:
        marker = "*" if provider_id == settings.provider else " "
        typer.echo(f"  {marker} {provider_id}: {masked[provider_id]}")


@provider_app.command("use")
def provider_use(
    provider: Annotated[str, typer.Argument(help="openrouter, gemini or openai")],
) -> None:
    """Select the active provider."""
    provider = _check_provider(provider)
    _apply_settings_change(lambda settings: settings.with_provider(provider))
    typer.echo(f"Active provider: {provider}")


@provider_app.command("set-key")
def provider_set_key(
    provider: Annotated[str, typer.Argument(help="openrouter, gemini or openai")],
    api_key: Annotated[str, typer.Argument(help="API key for the provider")],
) -> None:
    """Store the API key of a provider."""
    provider = _check_provider(provider)
    if not api_key.strip():
        raise typer.BadParameter("API key must not be empty")
    _apply_settings_change(lambda settings: settings.with_api_key(provider, api_key))
    typer.echo(f"API key saved for {provider}")


@provider_app.command("clear-key")
def provider_clear_key(
    provider: Annotated[str, typer.Argument(help="openrouter, gemini or openai")],
) -> None:
    """Remove the API key of a provider."""
    provider = _check_provider(provider)
    _apply_settings_change(lambda settings: settings.with_api_key(provider, ""))
    typer.echo(f"API key cleared for {provider}")


# =============================================================================
# check command
# =============================================================================


@app.command()
def check(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results as JSON",
        ),
    ] = False,
) -> None:
    """Validate credentials before analyzing.

    Exit codes:
        0: All required checks passed
        1: A GitHub token or provider API key is missing
    """
    from repolens.utils.preflight import PreflightChecker

    config = _get_config()
    _, settings_store = _open_stores(config)
    result = PreflightChecker().check_all(config, settings_store.load())

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        raise typer.Exit(0 if result.success else 1)

    typer.echo("\nPreflight Check Results\n")
    for check_result in result.checks:
        status = "ok" if check_result.passed else "FAIL"
        required_str = " [required]" if check_result.required else " [optional]"
        typer.echo(f"  [{status}] {check_result.name}{required_str}")
        typer.echo(f"     └─ {check_result.message}")
    typer.echo()

    if result.errors:
        typer.echo("Preflight check FAILED")
        for error in result.errors:
            typer.echo(f"   • {error}")
        raise typer.Exit(1)

    for warning in result.warnings:
        typer.echo(f"   • {warning}")
    typer.echo("All required preflight checks passed")


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Initialize repolens configuration.

    Writes .repolens/config.yaml with commented defaults. API keys are not
    part of the file; set them with `repolens provider set-key`.
    """
    config_dir = Path(".repolens")
    config_file = config_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_dir.mkdir(exist_ok=True)
    config_file.write_text(create_default_config(), encoding="utf-8")
    typer.echo(f"Created {config_file}")
    typer.echo("Next: repolens provider set-key <provider> <KEY>")


if __name__ == "__main__":
    app()
