"""Utilities for extracting JSON objects from model responses."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

logger = logging.getLogger(__name__)

_STRUCTURAL_NEIGHBOURS = set(":,[{}]")


def _strip_code_fences(text: str) -> str:
    stripped = text.strip()
    # Fences can appear anywhere when the model wraps prose around the JSON
    stripped = re.sub(r"```(?:json)?\s*\n?", "", stripped)
    return stripped.strip()


def _sanitize_trailing_commas(text: str) -> str:
    # Remove trailing commas before } or ]
    return re.sub(r",(\s*[}\]])", r"\1", text)


def _escape_inner_quotes(text: str) -> str:
    """Escape double quotes that are not next to a JSON delimiter."""
    chars = list(text)
    out = []
    for i, ch in enumerate(chars):
        if ch == '"' and i > 0 and chars[i - 1] != "\\":
            before = text[:i].rstrip()[-1:] if text[:i].rstrip() else ""
            after = text[i + 1:].lstrip()[:1]
            if before not in _STRUCTURAL_NEIGHBOURS and after not in _STRUCTURAL_NEIGHBOURS:
                out.append('\\"')
                continue
        out.append(ch)
    return "".join(out)


def _quote_bare_keys(text: str) -> str:
    return re.sub(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)\s*:", r'\1"\2":', text)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Extract a JSON object from free-form model output.

    Handles fenced code blocks, extra prose and trailing commas. When the
    first parse fails, stray inner quotes are escaped, then bare property
    names are quoted.

    Raises:
        ValueError: If no JSON object can be found or parsed
    """
    if not text:
        raise ValueError("Empty response; no JSON to parse")

    cleaned = _strip_code_fences(text)

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("No JSON object found in response")

    candidate = _sanitize_trailing_commas(cleaned[start : end + 1].strip())

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as first_error:
        logger.info("First parse failed (%s), escaping inner quotes", first_error)

    fixed = _escape_inner_quotes(candidate)
    try:
        return json.loads(fixed)
    except json.JSONDecodeError:
        logger.info("Second parse failed, quoting bare property names")

    fixed = _quote_bare_keys(fixed)
    try:
        return json.loads(fixed)
    except json.JSONDecodeError as e:
        snippet = candidate[:300]
        raise ValueError(f"JSON decode failed: {e}; candidate snippet: {snippet}") from e


def require_resources(document: Any) -> Dict[str, Any]:
    """Check that a generated document carries a non-empty resources list.

    Raises:
        ValueError: If the resources array is missing, not a list or empty
    """
    if not isinstance(document, dict):
        raise ValueError("Generated JSON is not an object")
    resources = document.get("resources")
    if not isinstance(resources, list):
        raise ValueError("Generated JSON does not contain a valid resources array")
    if not resources:
        raise ValueError("Generated JSON contains an empty resources array")
    return document
