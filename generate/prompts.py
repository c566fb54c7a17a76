"""Prompt assembly for resource generation."""

import logging
from pathlib import Path

from config.automation_config import PROMPT_PATH

logger = logging.getLogger(__name__)

CURATOR_PREAMBLE = (
    "You are an expert AI researcher who curates high-quality resources for developers. "
    "Generate ONLY valid JSON with no additional text. Requirements: "
    "1) Use REAL, ACTUAL resources with genuine URLs (never use example.com or placeholder links), "
    "2) Include 15-25 diverse resources from reputable sources like official documentation, "
    "established publishers (O'Reilly, Manning, Pragmatic Programmers), respected blogs "
    "(Martin Fowler, Stack Overflow), and popular podcasts, "
    "3) Ensure all property names and string values are properly quoted with double quotes."
)

SYSTEM_MESSAGE = "You are a resource curator. Respond only with valid JSON."


def load_prompt(path: Path = PROMPT_PATH) -> str:
    """Read the resource prompt markdown.

    Raises:
        FileNotFoundError: If the prompt file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Prompt file not found at: {path}")
    content = path.read_text(encoding="utf-8")
    logger.info("Prompt loaded from %s (%d characters)", path, len(content))
    return content


def build_generation_prompt(prompt_content: str) -> str:
    return f"{CURATOR_PREAMBLE}\n\n{prompt_content}"
