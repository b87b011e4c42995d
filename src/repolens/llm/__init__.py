"""LLM integration for repolens.

- prompts: provider-neutral analysis prompt
- parsing: generated text -> canonical AnalysisResult
- providers: OpenRouter, Gemini and OpenAI wire adapters
"""

from repolens.llm.parsing import parse_analysis_text
from repolens.llm.prompts import OUTPUT_SCHEMA, build_analysis_prompt
from repolens.llm.providers import PROVIDER_CLASSES, Provider, create_provider

__all__ = [
    "OUTPUT_SCHEMA",
    "PROVIDER_CLASSES",
    "Provider",
    "build_analysis_prompt",
    "create_provider",
    "parse_analysis_text",
]
