#!/usr/bin/env python3
"""Weekly update of the AI practitioner resources list.

Steps:
1. Fetch the published resources.json from the gist
2. Generate a new resource list with the LLM
3. Reconcile it against the published list (weeks_on_list continuity)
4. Validate against schema.json; schema errors abort without publishing
5. Publish resources.json plus a dated archive copy to the gist
6. Write the run summary (and the Actions step summary when available)

Usage:
    export ANTHROPIC_API_KEY=... GIST_ID=... GIST_TOKEN=...
    python scripts/weekly_update.py

    # Reconcile local files without calling any API
    python scripts/weekly_update.py --current-file current.json \\
        --generated-file new.json --dry-run
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.automation_config import (
    GENERATOR_PROVIDER,
    GIST_ID,
    GIST_TOKEN,
    GITHUB_STEP_SUMMARY,
    PROMPT_PATH,
    validate_config,
)
from generate.generator import generate_resources, save_raw_response
from generate.prompts import load_prompt
from integrations.gist_store import GistStore
from integrations.github_api import GitHubAPIError
from merge.reconcile import reconcile_documents
from merge.validate import load_schema, validate_document
from output.summary import build_summary, log_summary, save_summary

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_json_file(file_path: Path) -> dict:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If file does not exist
        json.JSONDecodeError: If file is not valid JSON
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json_file(file_path: Path, data: dict) -> None:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.info("Wrote %s", file_path)


def run_weekly_update(
    outdir: Path,
    store: Optional[GistStore] = None,
    current_file: Optional[Path] = None,
    generated_file: Optional[Path] = None,
    prompt_path: Path = PROMPT_PATH,
    provider: str = GENERATOR_PROVIDER,
    schema_path: Optional[Path] = None,
    dry_run: bool = False,
    step_summary_path: Optional[str] = None,
) -> int:
    """Run one weekly cycle.

    Returns:
        Process exit code (0 on success, 1 on any failure)
    """
    # 1. Current list
    if current_file:
        current_doc = load_json_file(current_file)
        logger.info("Loaded current resources from %s", current_file)
    else:
        store.verify_token()
        current_doc = store.fetch_current()
    write_json_file(outdir / "current-resources.json", current_doc)

    # 2. New generation
    if generated_file:
        generated_doc = load_json_file(generated_file)
        logger.info("Loaded generated resources from %s", generated_file)
    else:
        result = generate_resources(load_prompt(prompt_path), provider=provider)
        if not result["success"]:
            logger.error("Failed to generate resources: %s", result["error"])
            if result.get("raw_response"):
                save_raw_response(result["raw_response"], outdir)
            return 1
        generated_doc = result["document"]
    write_json_file(outdir / "new-resources.json", generated_doc)

    # 3. Reconcile
    try:
        reconciled = reconcile_documents(current_doc, generated_doc)
    except ValueError as e:
        logger.error("Cannot reconcile resources: %s", e)
        return 1
    merged_doc = reconciled["document"]
    write_json_file(outdir / "merged-resources.json", merged_doc)

    # 4. Validate
    validation = validate_document(merged_doc, load_schema(schema_path))
    if not validation.ok:
        logger.error("Not publishing: %d schema error(s)", len(validation.errors))
        return 1

    # 5. Publish
    if dry_run:
        logger.info("DRY-RUN: Would publish %d resources", len(merged_doc["resources"]))
    else:
        store.publish(merged_doc)

    # 6. Summary
    summary = build_summary(current_doc, generated_doc, merged_doc)
    log_summary(summary)
    save_summary(summary, outdir, step_summary_path)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Generate, reconcile, validate and publish the weekly resource list"
    )
    parser.add_argument(
        "--outdir",
        type=Path,
        default=Path("data/outputs/weekly"),
        help="Directory for intermediate files and the run summary",
    )
    parser.add_argument(
        "--current-file",
        type=Path,
        help="Use this JSON file as the published list instead of the gist",
    )
    parser.add_argument(
        "--generated-file",
        type=Path,
        help="Use this JSON file as the new generation instead of calling the LLM",
    )
    parser.add_argument(
        "--prompt",
        type=Path,
        default=PROMPT_PATH,
        help="Prompt markdown for generation",
    )
    parser.add_argument(
        "--schema",
        type=Path,
        help="JSON Schema to validate against (default: schema.json)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Do everything except publishing to the gist",
    )
    args = parser.parse_args()

    needs_gist = not args.current_file or not args.dry_run
    needs_llm = not args.generated_file
    if needs_gist or needs_llm:
        config = validate_config("weekly")
        relevant = [
            e for e in config["errors"]
            if (needs_gist and "GIST" in e) or (needs_llm and "GIST" not in e)
        ]
        if relevant:
            for error in relevant:
                logger.error("Configuration error: %s", error)
            sys.exit(1)

    store = GistStore(GIST_ID, GIST_TOKEN) if needs_gist else None

    try:
        exit_code = run_weekly_update(
            outdir=args.outdir,
            store=store,
            current_file=args.current_file,
            generated_file=args.generated_file,
            prompt_path=args.prompt,
            schema_path=args.schema,
            dry_run=args.dry_run,
            step_summary_path=GITHUB_STEP_SUMMARY,
        )
    except (GitHubAPIError, FileNotFoundError, ValueError) as e:
        logger.error("Weekly update failed: %s", e)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
