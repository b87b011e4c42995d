"""Markdown rendering of analysis results.

Renders an AnalysisResult with a Jinja2 template shipped in this package.
Output is deterministic: the same result always renders the same text.
"""

import json
import logging
from pathlib import Path

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from repolens.models.analysis import AnalysisResult
from repolens.models.repository import RepoKey

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "analysis.md.j2"


def indent_continuation(text: str, width: int = 2) -> str:
    """Indent every line after the first so multi-line text stays in its list item."""
    lines = text.strip().splitlines() or [""]
    padding = " " * width
    return "\n".join([lines[0], *(f"{padding}{line}" if line else line for line in lines[1:])])


class ReportRenderer:
    """Renders analysis results to Markdown or JSON."""

    def __init__(self) -> None:
        self._env = Environment(
            loader=PackageLoader("repolens", "templates"),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self._env.filters["indent_continuation"] = indent_continuation

    def render(
        self,
        key: RepoKey,
        result: AnalysisResult | None,
        provider: str | None = None,
        template_name: str = DEFAULT_TEMPLATE,
    ) -> str:
        """Render a result to Markdown.

        Args:
            key: Repository the result belongs to
            result: Analysis result (None renders the empty-state text)
            provider: Provider name shown in the report header
            template_name: Template file to use

        Returns:
            Rendered Markdown

        Raises:
            ValueError: If the template is missing or fails to render
        """
        try:
            template = self._env.get_template(template_name)
            rendered = template.render(repository=str(key), result=result, provider=provider)
        except TemplateError as e:
            logger.error("Template rendering failed: %s", e)
            raise ValueError(f"Template rendering failed: {e}") from e

        logger.debug("Rendered report for %s (%d characters)", key, len(rendered))
        return rendered

    @staticmethod
    def render_json(key: RepoKey, result: AnalysisResult | None) -> str:
        return json.dumps(
            {"repository": str(key), "analysis": result.to_dict() if result else None},
            indent=2,
        )

    def render_to_file(
        self,
        key: RepoKey,
        result: AnalysisResult | None,
        output_path: Path,
        provider: str | None = None,
    ) -> Path:
        """Render and write the Markdown report.

        Returns:
            Path to the written file
        """
        content = self.render(key, result, provider=provider)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        logger.info("Report written to %s", output_path)
        return output_path
