#!/usr/bin/env python3
"""Create tracker issues from markdown files.

Each file becomes one issue. The title comes from YAML frontmatter when
present, otherwise from the filename ("feature-add-dark-mode.md" becomes
"Feature: Add Dark Mode"). A filename prefix of feature-, bug-, refactor-,
idea-, enhancement- or documentation- adds that type as a label. Issues whose
exact title already exists are skipped. Created issues can be added to a
Projects v2 board.

Usage:
    export GITHUB_TOKEN=... GITHUB_REPOSITORY=owner/repo
    python scripts/create_issue.py issues/feature-add-dark-mode.md

    # Every .md file in a directory, added to Project #3
    python scripts/create_issue.py .github/ISSUE_TEMPLATE --project-number 3
"""

import argparse
import logging
import os
import re
import sys
import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import yaml

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.automation_config import (
    GITHUB_REPOSITORY,
    PROJECT_OWNER,
    split_repository,
    validate_config,
)
from integrations.github_api import GitHubAPIError, GitHubClient

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

ISSUE_TYPES = ("feature", "bug", "refactor", "idea", "enhancement", "documentation")
TYPE_PREFIX_PATTERN = re.compile(rf"^({'|'.join(ISSUE_TYPES)})-")
FRONTMATTER_PATTERN = re.compile(r"^---[ \t]*\n(.*?)\n---[ \t]*(?:\n(.*))?$", re.DOTALL)


def issue_type_from_filename(filename: str) -> Optional[str]:
    match = TYPE_PREFIX_PATTERN.match(Path(filename).name)
    return match.group(1) if match else None


def title_from_filename(filename: str) -> str:
    parts = Path(filename).stem.split("-")
    words = [word[:1].upper() + word[1:] for word in parts[1:] if word]
    return f"{parts[0][:1].upper()}{parts[0][1:]}: {' '.join(words)}"


def _as_list(value) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(item).strip() for item in value if str(item).strip()]


def parse_frontmatter(content: str) -> Tuple[Dict, str]:
    """Split YAML frontmatter from the markdown body.

    Raises:
        ValueError: If the frontmatter is not valid YAML
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}, content.strip()
    try:
        frontmatter = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid frontmatter: {e}") from e
    if not isinstance(frontmatter, dict):
        frontmatter = {}
    return frontmatter, (match.group(2) or "").strip()


def load_issue_file(path: Path) -> Dict:
    """Read one markdown file into title, body, labels and assignees."""
    path = Path(path)
    frontmatter, body = parse_frontmatter(path.read_text(encoding="utf-8").strip())

    labels = _as_list(frontmatter.get("labels"))
    issue_type = issue_type_from_filename(path.name)
    if issue_type and issue_type not in labels:
        labels.append(issue_type)

    return {
        "filename": path.name,
        "title": str(frontmatter.get("title") or title_from_filename(path.name)),
        "body": body,
        "labels": labels,
        "assignees": _as_list(frontmatter.get("assignees")),
    }


def collect_issue_files(paths: Iterable[Path]) -> List[Path]:
    """Expand directories to their .md files, sorted by name.

    Raises:
        FileNotFoundError: If a path does not exist
    """
    files = []
    for path in map(Path, paths):
        if path.is_dir():
            files.extend(sorted(path.glob("*.md")))
        elif path.exists():
            files.append(path)
        else:
            raise FileNotFoundError(f"Issue file not found: {path}")
    return files


def find_existing_issue(client: GitHubClient, owner: str, repo: str, title: str) -> Optional[Dict]:
    """Return an issue with exactly this title, if the search can tell."""
    try:
        items = client.search_issues(owner, repo, title)
    except GitHubAPIError as e:
        logger.warning("Could not check for existing issue '%s': %s", title, e)
        return None
    return next((item for item in items if item.get("title") == title), None)


def create_issue(
    client: GitHubClient,
    owner: str,
    repo: str,
    issue_data: Dict,
    project_id: Optional[str] = None,
) -> Dict:
    """Create one issue unless it already exists.

    Returns:
        {"status": "created" | "skipped" | "failed", "issue": dict or None,
         "error": str or None}
    """
    title = issue_data["title"]

    existing = find_existing_issue(client, owner, repo, title)
    if existing:
        logger.info("Skipped '%s': already exists as #%d", title, existing["number"])
        return {"status": "skipped", "issue": existing, "error": None}

    try:
        issue = client.create_issue(
            owner,
            repo,
            title,
            issue_data["body"],
            labels=issue_data.get("labels"),
            assignees=issue_data.get("assignees"),
        )
    except GitHubAPIError as e:
        logger.error("Failed to create '%s': %s", title, e)
        return {"status": "failed", "issue": None, "error": str(e)}

    logger.info("Created #%d: %s (%s)", issue["number"], title, issue.get("html_url"))

    if project_id:
        try:
            client.add_issue_to_project(project_id, issue["node_id"])
            logger.info("Added #%d to project", issue["number"])
        except GitHubAPIError as e:
            logger.warning("Could not add #%d to project: %s", issue["number"], e)

    return {"status": "created", "issue": issue, "error": None}


def create_issues(
    client: GitHubClient,
    owner: str,
    repo: str,
    files: List[Path],
    project_id: Optional[str] = None,
    delay_seconds: float = 1.0,
) -> Dict[str, List]:
    """Create an issue per file, pausing between calls.

    Returns:
        Results grouped by status: created, skipped, failed
    """
    results = {"created": [], "skipped": [], "failed": []}

    for index, path in enumerate(files):
        if index and delay_seconds:
            time.sleep(delay_seconds)
        result = create_issue(client, owner, repo, load_issue_file(path), project_id)
        if result["status"] == "failed":
            results["failed"].append({"file": path.name, "error": result["error"]})
        else:
            results[result["status"]].append(result["issue"])

    logger.info(
        "Issues created=%d skipped=%d failed=%d",
        len(results["created"]),
        len(results["skipped"]),
        len(results["failed"]),
    )
    return results


def main() -> None:
    parser = argparse.ArgumentParser(description="Create GitHub issues from markdown files")
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markdown files, or directories whose .md files become issues",
    )
    parser.add_argument(
        "--project-number",
        type=int,
        help="Add created issues to this Projects v2 board",
    )
    args = parser.parse_args()

    config = validate_config("create")
    if not config["valid"]:
        for error in config["errors"]:
            logger.error("Configuration error: %s", error)
        sys.exit(1)

    owner, repo = split_repository(GITHUB_REPOSITORY)
    client = GitHubClient()

    try:
        files = collect_issue_files(args.paths)
        project_id = None
        if args.project_number:
            project_id = client.get_project(PROJECT_OWNER or owner, args.project_number)["id"]
        results = create_issues(client, owner, repo, files, project_id)
    except (GitHubAPIError, FileNotFoundError, ValueError) as e:
        logger.error("Issue creation failed: %s", e)
        sys.exit(1)

    sys.exit(1 if results["failed"] else 0)


if __name__ == "__main__":
    main()
