"""Local persistence: analysis cache and provider settings."""

from repolens.stores.analysis_cache import AnalysisCache
from repolens.stores.local_store import LocalStore
from repolens.stores.provider_settings import ProviderSettingsStore

__all__ = ["AnalysisCache", "LocalStore", "ProviderSettingsStore"]
