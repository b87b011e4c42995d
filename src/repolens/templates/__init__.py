"""Report rendering (Jinja2 templates shipped with the package)."""

from repolens.templates.renderer import ReportRenderer

__all__ = ["ReportRenderer"]
