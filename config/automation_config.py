"""Configuration for the weekly resource update and lane automation.

Defaults live in config/automation.yaml; environment variables override them.

Environment Variables:
- ANTHROPIC_API_KEY: Anthropic API key for resource generation
- OPENAI_API_KEY: OpenAI API key (used when GENERATOR_PROVIDER=openai)
- GENERATOR_PROVIDER: anthropic or openai (default: anthropic)
- ANTHROPIC_MODEL / OPENAI_MODEL: model names for the generator
- GIST_ID: Gist holding resources.json
- GIST_TOKEN: Token with gist scope (falls back to GITHUB_GIST_TOKEN)
- GITHUB_TOKEN: Token for issue and project calls (falls back to TOKEN)
- GITHUB_REPOSITORY: owner/repo of the issue tracker
- PROJECT_OWNER / PROJECT_NUMBER / PROJECT_STATUS_FIELD_NAME: Projects v2 target
- LANE_STATUS_MAP: JSON object mapping lane name to Status option name
- DRY_RUN / LIST_ONLY: 1|true|yes to enable
- GITHUB_STEP_SUMMARY: Path to the Actions step summary file
- GITHUB_EVENT_PATH: Path to the triggering webhook payload (intake)
"""

import json
import os
from pathlib import Path
from typing import Optional

import yaml

CONFIG_PATH = Path(__file__).parent / "automation.yaml"
REPO_ROOT = Path(__file__).resolve().parent.parent


def load_defaults(path: Path = CONFIG_PATH) -> dict:
    """Load YAML defaults; a missing file yields an empty config."""
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def env_flag(name: str, default: str = "") -> bool:
    """Read a boolean flag that accepts 1, true or yes."""
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def parse_lane_status_map(raw: Optional[str]) -> dict:
    """Parse LANE_STATUS_MAP JSON; empty means lane names are used as-is."""
    if not raw:
        return {}
    mapping = json.loads(raw)
    if not isinstance(mapping, dict):
        raise ValueError("LANE_STATUS_MAP must be a JSON object")
    return mapping


_DEFAULTS = load_defaults()
_GENERATOR = _DEFAULTS.get("generator", {})
_STORE = _DEFAULTS.get("store", {})
_GITHUB = _DEFAULTS.get("github", {})
_LANES = _DEFAULTS.get("lanes", {})

# API keys
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")

# Generator
GENERATOR_PROVIDER = os.getenv("GENERATOR_PROVIDER", _GENERATOR.get("provider", "anthropic")).lower()
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", _GENERATOR.get("anthropic_model", "claude-sonnet-4-20250514"))
OPENAI_MODEL = os.getenv("OPENAI_MODEL", _GENERATOR.get("openai_model", "gpt-4o"))
GENERATOR_MAX_TOKENS = int(_GENERATOR.get("max_tokens", 10000))
GENERATOR_TIMEOUT_SECONDS = int(_GENERATOR.get("timeout_seconds", 300))
MAX_GENERATION_RETRIES = int(_GENERATOR.get("max_retries", 2))
PROMPT_PATH = REPO_ROOT / _GENERATOR.get("prompt_path", "prompts/ai-practitioner-resources-json.prompt.md")

# Gist store
GIST_ID = os.getenv("GIST_ID")
GIST_TOKEN = os.getenv("GIST_TOKEN") or os.getenv("GITHUB_GIST_TOKEN")
RESOURCES_FILENAME = _STORE.get("filename", "resources.json")
USER_AGENT = _STORE.get("user_agent", "ai-practitioner-resources-automation")

# GitHub
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN") or os.getenv("TOKEN")
GITHUB_API_URL = os.getenv("GITHUB_API_URL", _GITHUB.get("api_url", "https://api.github.com"))
GITHUB_GRAPHQL_URL = os.getenv("GITHUB_GRAPHQL_URL", _GITHUB.get("graphql_url", "https://api.github.com/graphql"))
GITHUB_API_VERSION = str(_GITHUB.get("api_version", "2022-11-28"))
GITHUB_REPOSITORY = os.getenv("GITHUB_REPOSITORY")
REQUEST_TIMEOUT_SECONDS = int(_GITHUB.get("request_timeout_seconds", 30))
MAX_API_RETRIES = int(_GITHUB.get("max_retries", 4))
API_BASE_DELAY_SECONDS = float(_GITHUB.get("base_delay_seconds", 1.0))

# Lanes and project
LANE_CAPACITY = int(_LANES.get("capacity", 3))
APPROVAL_LABEL = _LANES.get("approval_label", "implementation ready")
NEEDS_APPROVAL_LABEL = _LANES.get("needs_approval_label", "needs-approval")
NEEDS_APPROVAL_COLOR = str(_LANES.get("needs_approval_color", "7d8590"))
NEEDS_APPROVAL_DESCRIPTION = _LANES.get(
    "needs_approval_description",
    "Pending human review; not approved for implementation",
)
PROJECT_OWNER = os.getenv("PROJECT_OWNER")
PROJECT_NUMBER = int(os.getenv("PROJECT_NUMBER", str(_LANES.get("project_number", 1))))
PROJECT_STATUS_FIELD_NAME = os.getenv("PROJECT_STATUS_FIELD_NAME", _LANES.get("status_field", "Status"))
LANE_STATUS_MAP_RAW = os.getenv("LANE_STATUS_MAP", "")

# Run flags
DRY_RUN = env_flag("DRY_RUN")
LIST_ONLY = env_flag("LIST_ONLY")
GITHUB_STEP_SUMMARY = os.getenv("GITHUB_STEP_SUMMARY")
GITHUB_EVENT_PATH = os.getenv("GITHUB_EVENT_PATH")


def split_repository(repository: Optional[str]) -> tuple[str, str]:
    """Split owner/repo into its parts.

    Raises:
        ValueError: If the value is missing or not in owner/repo form
    """
    if not repository or repository.count("/") != 1:
        raise ValueError(f"GITHUB_REPOSITORY must be 'owner/repo', got: {repository!r}")
    owner, repo = repository.split("/")
    if not owner or not repo:
        raise ValueError(f"GITHUB_REPOSITORY must be 'owner/repo', got: {repository!r}")
    return owner, repo


def validate_config(mode: str) -> dict:
    """Validate configuration for an entry point.

    Args:
        mode: "weekly", "rebalance", "intake" or "create"

    Returns:
        Dictionary with validation result:
        {
            "valid": bool,
            "errors": list[str],  # Empty list if valid
            "details": str or None  # Human-readable summary
        }
    """
    errors = []

    if mode == "weekly":
        if GENERATOR_PROVIDER not in ("anthropic", "openai"):
            errors.append(f"Unknown GENERATOR_PROVIDER: {GENERATOR_PROVIDER}")
        elif GENERATOR_PROVIDER == "anthropic" and not ANTHROPIC_API_KEY:
            errors.append("ANTHROPIC_API_KEY environment variable is required")
        elif GENERATOR_PROVIDER == "openai" and not OPENAI_API_KEY:
            errors.append("OPENAI_API_KEY environment variable is required")
        if not GIST_ID:
            errors.append("GIST_ID environment variable is required")
        if not GIST_TOKEN:
            errors.append("GIST_TOKEN environment variable is required")
    elif mode in ("rebalance", "intake", "create"):
        if not GITHUB_TOKEN:
            errors.append("GITHUB_TOKEN not set")
        try:
            split_repository(GITHUB_REPOSITORY)
        except ValueError as e:
            errors.append(str(e))
        if mode == "rebalance":
            try:
                parse_lane_status_map(LANE_STATUS_MAP_RAW)
            except ValueError as e:
                errors.append(f"Invalid LANE_STATUS_MAP: {e}")
        elif mode == "intake" and not GITHUB_EVENT_PATH:
            errors.append("GITHUB_EVENT_PATH not set")
    else:
        errors.append(f"Unknown mode: {mode}")

    if errors:
        return {
            "valid": False,
            "errors": errors,
            "details": f"{len(errors)} configuration error(s) found",
        }

    return {"valid": True, "errors": [], "details": None}
