"""repolens data models.

This module exports all core entities used throughout the application:
- RepoKey: (owner, name, branch) identifying an analyzable repository
- TreeEntry / SourceFile / RepositorySample: fetched repository content
- AnalysisResult: Canonical provider-independent review
- AnalysisState: Per-repository state machine snapshot
- ProviderConfig / ProviderSettings: LLM credentials
"""

from repolens.models.analysis import (
    AnalysisResult,
    AnalysisState,
    AnalysisStatus,
    FileAnalysis,
    GeneralSuggestion,
)
from repolens.models.llm_config import VALID_PROVIDERS, ProviderConfig, ProviderSettings
from repolens.models.repository import (
    EntryKind,
    RepoKey,
    RepositorySample,
    SourceFile,
    TreeEntry,
)

__all__ = [
    "AnalysisResult",
    "AnalysisState",
    "AnalysisStatus",
    "EntryKind",
    "FileAnalysis",
    "GeneralSuggestion",
    "ProviderConfig",
    "ProviderSettings",
    "RepoKey",
    "RepositorySample",
    "SourceFile",
    "TreeEntry",
    "VALID_PROVIDERS",
]
