"""Analysis result entities.

This module contains the canonical, provider-independent review shape and the
per-repository state observed by the presentation layer:
- FileAnalysis: Review of one sampled file
- GeneralSuggestion: Repository-wide improvement suggestion
- AnalysisResult: Canonical result every provider adapter produces
- AnalysisStatus: Idle / Loading / Analyzed / Failed
- AnalysisState: Snapshot of one repository key's state
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_CATEGORY = "General"


@dataclass(frozen=True)
class FileAnalysis:
    """Review of a single file.

    Attributes:
        path: File path as reported by the model
        summary: What the file does and its role in the project
        suggestions: Improvement suggestions for the file
    """

    path: str
    summary: str = ""
    suggestions: str = ""

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {"path": self.path, "summary": self.summary, "suggestions": self.suggestions}


@dataclass(frozen=True)
class GeneralSuggestion:
    """Repository-wide suggestion.

    Attributes:
        category: Suggestion category (e.g., "Security", "Testing")
        text: Suggestion text
    """

    text: str
    category: str = DEFAULT_CATEGORY

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {"category": self.category, "text": self.text}


@dataclass(frozen=True)
class AnalysisResult:
    """Canonical analysis result.

    Serialized with the camelCase keys of the requested output schema
    (overview, files, generalSuggestions) so the persisted cache record and
    the model's answer share one format.

    Attributes:
        overview: High-level overview of the repository
        files: Per-file reviews, in the order the model returned them
        general_suggestions: Repository-wide suggestions
    """

    overview: str = ""
    files: tuple[FileAnalysis, ...] = field(default_factory=tuple)
    general_suggestions: tuple[GeneralSuggestion, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", tuple(self.files))
        object.__setattr__(self, "general_suggestions", tuple(self.general_suggestions))

    @property
    def is_empty(self) -> bool:
        """True when the result carries nothing to display."""
        return not self.overview and not self.files and not self.general_suggestions

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "overview": self.overview,
            "files": [f.to_dict() for f in self.files],
            "generalSuggestions": [s.to_dict() for s in self.general_suggestions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisResult":
        """Create an AnalysisResult from its canonical dictionary form.

        Args:
            data: Dictionary with overview, files and generalSuggestions

        Returns:
            AnalysisResult instance

        Raises:
            ValueError: If a field has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected an object, got {type(data).__name__}")

        overview = data.get("overview", "")
        if not isinstance(overview, str):
            raise ValueError("'overview' must be a string")

        raw_files = data.get("files", [])
        if not isinstance(raw_files, list):
            raise ValueError("'files' must be a list")
        files = []
        for item in raw_files:
            if not isinstance(item, dict) or not isinstance(item.get("path"), str):
                raise ValueError("each entry of 'files' must be an object with a 'path'")
            summary = item.get("summary", "")
            suggestions = item.get("suggestions", "")
            if not isinstance(summary, str) or not isinstance(suggestions, str):
                raise ValueError(f"'summary' and 'suggestions' of {item['path']} must be strings")
            files.append(FileAnalysis(path=item["path"], summary=summary, suggestions=suggestions))

        raw_suggestions = data.get("generalSuggestions", [])
        if not isinstance(raw_suggestions, list):
            raise ValueError("'generalSuggestions' must be a list")
        suggestions_out = []
        for item in raw_suggestions:
            if not isinstance(item, dict) or not isinstance(item.get("text"), str):
                raise ValueError("each entry of 'generalSuggestions' must have a 'text'")
            category = item.get("category") or DEFAULT_CATEGORY
            if not isinstance(category, str):
                raise ValueError("'category' must be a string")
            suggestions_out.append(GeneralSuggestion(text=item["text"], category=category))

        return cls(overview=overview, files=tuple(files), general_suggestions=tuple(suggestions_out))


class AnalysisStatus(Enum):
    """Status of one repository key in the orchestrator."""

    IDLE = "idle"
    LOADING = "loading"
    ANALYZED = "analyzed"
    FAILED = "failed"


@dataclass(frozen=True)
class AnalysisState:
    """Snapshot of a repository key's analysis state.

    Attributes:
        status: Current status
        result: Analysis result (only when ANALYZED)
        error: Message of the last failure (kept after the reset to IDLE)
    """

    status: AnalysisStatus = AnalysisStatus.IDLE
    result: AnalysisResult | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "status": self.status.value,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
        }
