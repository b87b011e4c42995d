"""Persistence of the provider selection and API keys."""

import logging

from repolens.models.llm_config import ProviderSettings
from repolens.stores.local_store import LocalStore

logger = logging.getLogger(__name__)

PROVIDER_KEY = "llmProvider"
API_KEYS_KEY = "llmApiKeys"


class ProviderSettingsStore:
    """Loads and saves ProviderSettings as two plain-text records."""

    def __init__(self, store: LocalStore) -> None:
        self._store = store

    def load(self) -> ProviderSettings:
        """Return the stored settings, or defaults when absent or invalid."""
        data = {
            "provider": self._store.get(PROVIDER_KEY),
            "api_keys": self._store.get(API_KEYS_KEY),
        }
        try:
            return ProviderSettings.from_dict(data)
        except ValueError as e:
            logger.warning("Ignoring invalid provider settings: %s", e)
            return ProviderSettings()

    def save(self, settings: ProviderSettings) -> None:
        self._store.set(PROVIDER_KEY, settings.provider)
        self._store.set(API_KEYS_KEY, dict(settings.api_keys))
