"""Analysis pipeline: one run of select -> fetch -> build -> provider.

The pipeline has no state between runs. Caching, deduplication and
invalidation belong to repolens.orchestrator.
"""

import logging
from collections.abc import Callable

import httpx

from repolens.analyzers.fetcher import ContentFetcher
from repolens.analyzers.selector import select_files
from repolens.config import LLMConfig, RepoLensConfig
from repolens.errors import ConfigError
from repolens.github.client import GitHubClient
from repolens.llm.prompts import build_analysis_prompt
from repolens.llm.providers import Provider, create_provider
from repolens.models.analysis import AnalysisResult
from repolens.models.llm_config import ProviderConfig
from repolens.models.repository import RepoKey, RepositorySample

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[str, httpx.AsyncClient, LLMConfig], Provider]


class AnalysisPipeline:
    """Runs the analysis stages for one repository key.

    The pipeline sequence:
    1. Tree retrieval (fatal on failure)
    2. File selection (pure)
    3. Concurrent content fetch (per-file failures drop the file)
    4. Prompt construction
    5. One provider call, decoded into the canonical result
    """

    def __init__(
        self,
        github: GitHubClient,
        http_client: httpx.AsyncClient,
        config: RepoLensConfig | None = None,
        provider_factory: ProviderFactory = create_provider,
    ) -> None:
        """Initialize the analysis pipeline.

        Args:
            github: Authenticated hosting API client
            http_client: Async HTTP client used for LLM calls
            config: repolens configuration (uses defaults if None)
            provider_factory: Builds the adapter for a provider id
        """
        self.config = config or RepoLensConfig()
        self._http = http_client
        self._provider_factory = provider_factory
        self._fetcher = ContentFetcher(github, max_concurrency=self.config.github.max_concurrency)

    async def collect_sample(self, key: RepoKey) -> RepositorySample:
        """Fetch the tree, select files and fetch their contents."""
        tree = await self._fetcher.fetch_tree(key.owner, key.name, key.branch)
        selected = select_files(tree)
        logger.info("Selected %d of %d tree entries for %s", len(selected), len(tree), key)
        return await self._fetcher.fetch_all(key.owner, key.name, key.branch, tree, selected)

    async def run(self, key: RepoKey, provider_config: ProviderConfig | None) -> AnalysisResult:
        """Execute the full pipeline.

        Args:
            key: Repository to analyze
            provider_config: Credential for this run, read once at the start

        Returns:
            Canonical AnalysisResult

        Raises:
            ConfigError: If no provider credential is given
            RepoLensError: Any stage failure (see repolens.errors)
        """
        if provider_config is None:
            raise ConfigError(
                "LLM provider not configured. Please set up your API key in settings."
            )

        # Resolve the adapter before touching the network
        provider = self._provider_factory(provider_config.provider_id, self._http, self.config.llm)

        logger.info("Starting analysis pipeline for %s", key)
        sample = await self.collect_sample(key)
        logger.info("Fetched %d files for %s", len(sample.files), key)

        prompt = build_analysis_prompt(sample)
        result = await provider.analyze(provider_config.api_key, prompt)

        logger.info(
            "Analysis of %s complete: %d file reviews, %d suggestions",
            key,
            len(result.files),
            len(result.general_suggestions),
        )
        return result
