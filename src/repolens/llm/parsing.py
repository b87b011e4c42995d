"""Decoding of generated text into the canonical AnalysisResult.

Shared by all provider adapters. A decode failure is a ParseError: the
backend answered, but the model did not follow the requested schema.
"""

import json
import logging
import re
from typing import Any

from repolens.errors import ParseError
from repolens.models.analysis import DEFAULT_CATEGORY, AnalysisResult

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"^\s*```(?:json)?\s*\n(.*?)\n?\s*```\s*$", re.DOTALL)


def _unwrap_code_fence(text: str) -> str:
    match = _FENCED_JSON.match(text)
    return match.group(1) if match else text


def _normalize_suggestions(value: Any) -> Any:
    # Older prompts asked for a single string
    if isinstance(value, str):
        return [{"category": DEFAULT_CATEGORY, "text": value}] if value.strip() else []
    if isinstance(value, list):
        return [
            {"category": DEFAULT_CATEGORY, "text": item} if isinstance(item, str) else item
            for item in value
        ]
    return value


def _normalize_files(value: Any) -> Any:
    if not isinstance(value, list):
        return value
    normalized = []
    for item in value:
        if isinstance(item, dict) and isinstance(item.get("suggestions"), list):
            suggestions = item["suggestions"]
            if all(isinstance(s, str) for s in suggestions):
                item = {**item, "suggestions": "\n".join(suggestions)}
        normalized.append(item)
    return normalized


def normalize_payload(data: dict[str, Any]) -> dict[str, Any]:
    """Coerce known legacy variants into the canonical dictionary form."""
    normalized = dict(data)
    if "generalSuggestions" in normalized:
        normalized["generalSuggestions"] = _normalize_suggestions(normalized["generalSuggestions"])
    if "files" in normalized:
        normalized["files"] = _normalize_files(normalized["files"])
    return normalized


def parse_analysis_text(provider: str, text: str) -> AnalysisResult:
    """Decode the generated text payload of a provider.

    Args:
        provider: Provider id, for error reporting
        text: Generated text (expected to be a JSON object)

    Returns:
        Canonical AnalysisResult

    Raises:
        ParseError: If the text is not JSON or does not match the shape
    """
    candidate = _unwrap_code_fence(text)

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        logger.warning("Response from %s is not valid JSON: %s", provider, e)
        raise ParseError(provider, f"Failed to parse JSON response from {provider}", text) from e

    if not isinstance(data, dict):
        raise ParseError(
            provider,
            f"Response from {provider} is a JSON {type(data).__name__}, expected an object",
            text,
        )

    try:
        return AnalysisResult.from_dict(normalize_payload(data))
    except ValueError as e:
        logger.warning("Response from %s does not match the result shape: %s", provider, e)
        raise ParseError(
            provider, f"Response from {provider} does not match the result shape: {e}", text
        ) from e
