"""Per-repository analysis state machine.

Idle -> Loading -> Analyzed, or Idle -> Loading -> Failed -> Idle.

- At most one pipeline per RepoKey is in flight; repeated requests while
  Loading or Analyzed are no-ops.
- Results are committed only if the key's generation still matches the one
  the run started under. invalidate() and provider settings changes bump
  the generation, so a result produced under an old credential is discarded.
- Provider settings changes drop every cached result. If the cache cannot
  be cleared, hydration stays off until a later clear succeeds.
- A result whose cache write fails is still surfaced for this process.

Everything runs on one event loop; no locks are needed.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from repolens.errors import RepoLensError
from repolens.models.analysis import AnalysisResult, AnalysisState, AnalysisStatus
from repolens.models.llm_config import ProviderConfig, ProviderSettings
from repolens.models.repository import RepoKey
from repolens.stores.analysis_cache import AnalysisCache
from repolens.stores.provider_settings import ProviderSettingsStore

logger = logging.getLogger(__name__)

StateListener = Callable[[RepoKey, AnalysisState], None]

NOT_CONFIGURED_MESSAGE = "LLM provider not configured. Please set up your API key in settings."


class PipelineRunner(Protocol):
    async def run(self, key: RepoKey, provider_config: ProviderConfig | None) -> AnalysisResult:
        ...


class AnalysisOrchestrator:
    """Coordinates analysis runs, the result cache and provider settings.

    Attributes:
        settings: Current provider settings (owned here, passed to runs)
    """

    def __init__(
        self,
        pipeline: PipelineRunner,
        cache: AnalysisCache,
        settings: ProviderSettings | None = None,
        settings_store: ProviderSettingsStore | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            pipeline: Runs one analysis for a key
            cache: Persistent result cache
            settings: Initial provider settings (loaded from settings_store if None)
            settings_store: Where settings changes are persisted
        """
        self._pipeline = pipeline
        self._cache = cache
        self._settings_store = settings_store
        if settings is None:
            settings = settings_store.load() if settings_store else ProviderSettings()
        self._settings = settings

        self._states: dict[RepoKey, AnalysisState] = {}
        self._tasks: dict[RepoKey, asyncio.Task[None]] = {}
        self._generations: dict[RepoKey, int] = {}
        self._config_epoch = 0
        self._listeners: list[StateListener] = []
        self._cache_needs_clear = False

    @property
    def settings(self) -> ProviderSettings:
        return self._settings

    # =========================================================================
    # Observation
    # =========================================================================

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a transition listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_state(self, key: RepoKey) -> AnalysisState:
        return self._states.get(key, AnalysisState())

    def is_in_flight(self, key: RepoKey) -> bool:
        return key in self._tasks

    def _set_state(self, key: RepoKey, state: AnalysisState) -> None:
        previous = self._states.get(key, AnalysisState()).status
        self._states[key] = state
        logger.debug("%s: %s -> %s", key, previous.value, state.status.value)
        for listener in list(self._listeners):
            try:
                listener(key, state)
            except Exception:
                logger.exception("State listener failed for %s", key)

    # =========================================================================
    # View & hydration
    # =========================================================================

    def view(self, key: RepoKey) -> AnalysisState:
        """Hydrate the key being viewed from the cache and return its state."""
        self.hydrate(key)
        return self.get_state(key)

    def hydrate(self, key: RepoKey) -> bool:
        """Move an idle key to Analyzed from the persisted cache, without network.

        Returns:
            True on a cache hit
        """
        if self.get_state(key).status is not AnalysisStatus.IDLE:
            return False
        if self._cache_needs_clear and not self._clear_cache():
            return False
        cached = self._cache.get(key)
        if cached is None:
            return False
        logger.debug("Hydrated %s from cache", key)
        self._set_state(key, AnalysisState(status=AnalysisStatus.ANALYZED, result=cached))
        return True

    # =========================================================================
    # Analysis
    # =========================================================================

    def _generation(self, key: RepoKey) -> tuple[int, int]:
        return (self._config_epoch, self._generations.get(key, 0))

    def analyze(self, key: RepoKey) -> None:
        """Request an analysis (fire-and-forget).

        Must be called from a running event loop. The outcome is observed
        through get_state() or subscribed listeners.
        """
        if key in self._tasks:
            logger.debug("Analysis for %s already in flight", key)
            return

        if self.hydrate(key) or self.get_state(key).status is AnalysisStatus.ANALYZED:
            logger.debug("Analysis for %s already available", key)
            return

        provider_config = self._settings.active_config()
        if provider_config is None:
            logger.warning("Cannot analyze %s: %s", key, NOT_CONFIGURED_MESSAGE)
            self._set_state(key, AnalysisState(error=NOT_CONFIGURED_MESSAGE))
            return

        generation = self._generation(key)
        self._set_state(key, AnalysisState(status=AnalysisStatus.LOADING))
        task = asyncio.get_running_loop().create_task(
            self._run(key, provider_config, generation),
            name=f"repolens-analysis-{key}",
        )
        self._tasks[key] = task

    async def wait(self, key: RepoKey) -> AnalysisState:
        """Wait for the in-flight analysis of a key (if any) and return its state."""
        task = self._tasks.get(key)
        if task is not None:
            await asyncio.shield(task)
        return self.get_state(key)

    async def analyze_and_wait(self, key: RepoKey) -> AnalysisState:
        self.analyze(key)
        return await self.wait(key)

    async def _run(
        self,
        key: RepoKey,
        provider_config: ProviderConfig,
        generation: tuple[int, int],
    ) -> None:
        result: AnalysisResult | None = None
        error: str | None = None
        try:
            result = await self._pipeline.run(key, provider_config)
        except asyncio.CancelledError:
            self._tasks.pop(key, None)
            self._set_state(key, AnalysisState())
            raise
        except RepoLensError as e:
            logger.error("Analysis of %s failed: %s", key, e)
            error = str(e)
        except Exception as e:
            logger.exception("Unexpected error while analyzing %s", key)
            error = f"Unexpected error: {e}"

        self._tasks.pop(key, None)

        if generation != self._generation(key):
            logger.info("Discarding stale analysis for %s", key)
            self._set_state(key, AnalysisState())
            return

        if error is not None:
            self._set_state(key, AnalysisState(status=AnalysisStatus.FAILED, error=error))
            self._set_state(key, AnalysisState(status=AnalysisStatus.IDLE, error=error))
            return

        assert result is not None
        try:
            self._cache.store(key, result)
        except OSError as e:
            logger.error("Could not cache analysis of %s: %s", key, e)
        self._set_state(key, AnalysisState(status=AnalysisStatus.ANALYZED, result=result))

    # =========================================================================
    # Invalidation
    # =========================================================================

    def invalidate(self, key: RepoKey) -> None:
        """Drop the cached result for a key and reset it to Idle.

        A run in flight for the key keeps the key Loading until it finishes;
        its result is then discarded.
        """
        self._generations[key] = self._generations.get(key, 0) + 1
        self._cache.invalidate(key)
        if key not in self._tasks:
            self._set_state(key, AnalysisState())
        logger.info("Invalidated analysis for %s", key)

    def on_provider_config_changed(self, settings: ProviderSettings) -> None:
        """Apply new provider settings.

        Any settings write invalidates every cached result and resets every
        key to Idle; runs in flight finish under their original credential
        and their results are discarded. The settings are persisted last, so
        a failed save still leaves nothing from the old credential visible.
        """
        self._config_epoch += 1
        self._settings = settings
        for key, state in list(self._states.items()):
            if key not in self._tasks and (
                state.status is not AnalysisStatus.IDLE or state.error
            ):
                self._set_state(key, AnalysisState())
        self._clear_cache()
        logger.info("Provider settings changed (active: %s)", settings.provider)

        if self._settings_store is not None:
            self._settings_store.save(settings)

    def _clear_cache(self) -> bool:
        try:
            self._cache.invalidate_all()
        except OSError as e:
            logger.error("Could not drop cached analyses: %s", e)
            self._cache_needs_clear = True
            return False
        self._cache_needs_clear = False
        return True

