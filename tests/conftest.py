"""Shared pytest fixtures for repolens tests.

Fixtures are organized by category:
- Model fixtures: repository keys, trees and analysis results
- Store fixtures: in-memory and on-disk key/value stores
- Remote API fixtures: fake GitHub and LLM backends (see tests.fixtures)
"""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from repolens.models import (
    AnalysisResult,
    EntryKind,
    FileAnalysis,
    GeneralSuggestion,
    ProviderSettings,
    RepoKey,
    TreeEntry,
)
from repolens.stores import AnalysisCache, LocalStore, ProviderSettingsStore
from repolens.utils.logging import ROOT_LOGGER
from tests.fixtures import FakeGitHub, FakeLLM

# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo CLI logging setup so records reach caplog again."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def repo_key() -> RepoKey:
    return RepoKey(owner="octo", name="demo", branch="main")


@pytest.fixture
def other_key() -> RepoKey:
    return RepoKey(owner="octo", name="other", branch="dev")


@pytest.fixture
def sample_tree() -> list[TreeEntry]:
    """A tree with one entry per selector rule."""
    return [
        TreeEntry("src", EntryKind.DIR),
        TreeEntry("src/app.js", EntryKind.FILE, 500),
        TreeEntry("logo.png", EntryKind.FILE, 200),
        TreeEntry("node_modules/x.js", EntryKind.FILE, 10),
        TreeEntry("src/util.py", EntryKind.FILE, 300),
        TreeEntry("huge.js", EntryKind.FILE, 200 * 1024),
    ]


@pytest.fixture
def sample_result() -> AnalysisResult:
    return AnalysisResult(
        overview="A small demo project.",
        files=(
            FileAnalysis("src/app.js", "Entry point.", "Use ES modules."),
            FileAnalysis("src/util.py", "Helpers.", ""),
        ),
        general_suggestions=(
            GeneralSuggestion("Add unit tests.", "Testing"),
            GeneralSuggestion("Document the setup."),
        ),
    )


@pytest.fixture
def configured_settings() -> ProviderSettings:
    return ProviderSettings(provider="openrouter", api_keys={"openrouter": "sk-or-old"})


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def memory_store() -> LocalStore:
    """Store that never touches the filesystem."""
    return LocalStore(None)


@pytest.fixture
def disk_store(tmp_path: Path) -> LocalStore:
    return LocalStore.in_directory(tmp_path / "state")


@pytest.fixture
def cache(memory_store: LocalStore) -> AnalysisCache:
    return AnalysisCache(memory_store)


@pytest.fixture
def settings_store(memory_store: LocalStore) -> ProviderSettingsStore:
    return ProviderSettingsStore(memory_store)


# =============================================================================
# Remote API Fixtures
# =============================================================================


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()
