"""Persistent cache of analysis results, one record per repository key."""

import logging

from repolens.models.analysis import AnalysisResult
from repolens.models.repository import RepoKey
from repolens.stores.local_store import LocalStore

logger = logging.getLogger(__name__)

CACHE_PREFIX = "repo-analysis-"


class AnalysisCache:
    """Keyed store of AnalysisResult values over a LocalStore."""

    def __init__(self, store: LocalStore) -> None:
        self._store = store

    def get(self, key: RepoKey) -> AnalysisResult | None:
        """Return the cached result, or None (unreadable records count as misses)."""
        payload = self._store.get(key.cache_key)
        if payload is None:
            return None
        try:
            return AnalysisResult.from_dict(payload)
        except ValueError as e:
            logger.warning("Ignoring invalid cache record for %s: %s", key, e)
            return None

    def store(self, key: RepoKey, result: AnalysisResult) -> None:
        self._store.set(key.cache_key, result.to_dict())
        logger.debug("Cached analysis for %s", key)

    def invalidate(self, key: RepoKey) -> bool:
        """Drop one record. Returns True if there was one."""
        return self._store.remove(key.cache_key)

    def invalidate_all(self) -> int:
        """Drop every cached analysis. Returns the number removed."""
        removed = self._store.remove_prefix(CACHE_PREFIX)
        if removed:
            logger.info("Invalidated %d cached analyses", removed)
        return removed
