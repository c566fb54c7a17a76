"""Generate the weekly resource list with an LLM.

Anthropic is the default provider; OpenAI can be selected with
GENERATOR_PROVIDER=openai.
"""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from config.automation_config import (
    ANTHROPIC_API_KEY,
    ANTHROPIC_MODEL,
    GENERATOR_MAX_TOKENS,
    GENERATOR_PROVIDER,
    GENERATOR_TIMEOUT_SECONDS,
    MAX_GENERATION_RETRIES,
    OPENAI_API_KEY,
    OPENAI_MODEL,
)
from generate.json_utils import extract_json_object, require_resources
from generate.prompts import SYSTEM_MESSAGE, build_generation_prompt

logger = logging.getLogger(__name__)


def _get_api_key(provider: str) -> Optional[str]:
    return ANTHROPIC_API_KEY if provider == "anthropic" else OPENAI_API_KEY


def _get_model(provider: str) -> str:
    return ANTHROPIC_MODEL if provider == "anthropic" else OPENAI_MODEL


def _call_llm(provider: str, prompt: str, api_key: str, model: str) -> str:
    """Send the prompt to the provider and return the raw text reply."""
    if provider == "anthropic":
        from anthropic import Anthropic

        client = Anthropic(api_key=api_key)
        response = client.messages.create(
            model=model,
            max_tokens=GENERATOR_MAX_TOKENS,
            messages=[{"role": "user", "content": prompt}],
            timeout=GENERATOR_TIMEOUT_SECONDS,
        )
        return response.content[0].text

    if provider == "openai":
        from openai import OpenAI

        client = OpenAI(api_key=api_key)
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            max_completion_tokens=GENERATOR_MAX_TOKENS,
            timeout=GENERATOR_TIMEOUT_SECONDS,
        )
        return response.choices[0].message.content

    raise ValueError(f"Unknown generator provider: {provider}")


def _failure(model: str, start_time: float, error: str, raw_response: Optional[str]) -> Dict:
    return {
        "success": False,
        "document": None,
        "model": model,
        "latency_ms": int((time.time() - start_time) * 1000),
        "error": error,
        "generated_at": datetime.now().isoformat(),
        "raw_response": raw_response,
    }


def generate_resources(
    prompt_content: str,
    provider: str = GENERATOR_PROVIDER,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    max_retries: int = MAX_GENERATION_RETRIES,
) -> Dict:
    """Generate a resource document from the prompt.

    Args:
        prompt_content: Prompt markdown (the curator preamble is prepended)
        provider: "anthropic" or "openai"
        api_key: Overrides the configured key for the provider
        model: Overrides the configured model for the provider
        max_retries: Attempts before giving up; parse failures count too

    Returns:
        Result dict:
        {
            "success": bool,
            "document": dict or None,
            "model": str,
            "latency_ms": int,
            "error": str or None,
            "generated_at": ISO timestamp,
            "raw_response": str or None  # last reply, kept for debugging
        }
    """
    provider = (provider or "anthropic").lower()
    api_key = api_key or _get_api_key(provider)
    model = model or _get_model(provider)
    start_time = time.time()

    if not api_key:
        return _failure(model, start_time, f"No API key configured for provider '{provider}'", None)

    prompt = build_generation_prompt(prompt_content)
    raw_response = None
    last_error = None

    for attempt in range(max_retries):
        try:
            logger.info(
                "Calling %s (%s) for resource generation (attempt %d/%d)",
                provider,
                model,
                attempt + 1,
                max_retries,
            )
            raw_response = _call_llm(provider, prompt, api_key, model)
            logger.info("Received response (%d characters)", len(raw_response or ""))
        except Exception as e:
            last_error = f"API error: {type(e).__name__}: {e}"
            logger.warning("%s call failed on attempt %d: %s", provider, attempt + 1, e)
            continue

        try:
            document = require_resources(extract_json_object(raw_response))
        except ValueError as e:
            last_error = f"Invalid JSON generated: {e}"
            logger.warning("Failed to parse generated JSON on attempt %d: %s", attempt + 1, e)
            logger.warning("Response snippet: %s", (raw_response or "")[:500])
            continue

        latency_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "Generated %d resources with %s in %d ms",
            len(document["resources"]),
            model,
            latency_ms,
        )
        return {
            "success": True,
            "document": document,
            "model": model,
            "latency_ms": latency_ms,
            "error": None,
            "generated_at": datetime.now().isoformat(),
            "raw_response": raw_response,
        }

    return _failure(
        model,
        start_time,
        f"Generation failed after {max_retries} attempts: {last_error}",
        raw_response,
    )


def save_raw_response(raw_response: str, outdir: Path) -> Path:
    """Write the raw model reply next to the run outputs for debugging."""
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    path = outdir / "raw-response.txt"
    path.write_text(raw_response, encoding="utf-8")
    logger.info("Raw response saved to %s for debugging", path)
    return path
