#!/usr/bin/env python3
"""Issue intake on open: bench the issue and request approval.

- Moves the issue to "on the bench" (any other lane label is removed)
- Adds "needs-approval" unless the issue is already implementation ready
- Posts the intake checklist comment

Usage:
    export GITHUB_TOKEN=... GITHUB_REPOSITORY=owner/repo GITHUB_EVENT_PATH=event.json
    python scripts/issue_intake.py
"""

import json
import logging
import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.automation_config import (
    GITHUB_EVENT_PATH,
    GITHUB_REPOSITORY,
    NEEDS_APPROVAL_COLOR,
    NEEDS_APPROVAL_DESCRIPTION,
    NEEDS_APPROVAL_LABEL,
    split_repository,
    validate_config,
)
from integrations.github_api import GitHubAPIError, GitHubClient
from lanes.labels import issue_from_github
from practitioner_types import Issue, Lane

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

INTAKE_COMMENT = """Thanks for opening this issue!

PM intake checklist (baseline):
- [ ] Scope is clear and testable (acceptance criteria provided)
- [ ] Dependencies identified and minimal (or resolved)
- [ ] Risk acceptable
- [ ] Independent enough to run in parallel (label 'independent' or 'independence:high' when true)
- [ ] Priority score provided (label 'priority:NN' or 'score:NN')
- [ ] Size estimated (label 'size:small|medium'). Items labeled size:large will not be approved; please split into smaller sub-issues.

If this issue includes a prompt, please include a short prompt packet: Objective, Inputs, Tools/permissions, Constraints, Steps/strategy, Acceptance criteria, Evaluation, Priority score, Size, Independence, Risks, Links.

If approved, mark it 'implementation ready' and assign a contributor.

Quick commands (replace placeholders):

- Approve:
  - gh issue comment {number} --body "Approved - implementation ready. Rationale: <one-line>"
  - gh issue edit {number} --add-label "implementation ready" --remove-label "{needs_approval}"

This issue has been placed on the bench initially. Lanes are rebalanced only when issues are closed."""


def load_event(event_path: str) -> dict:
    """Load the webhook payload that triggered the run."""
    path = Path(event_path)
    if not path.exists():
        raise FileNotFoundError(f"Event payload not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def intake_labels(issue: Issue) -> set[str]:
    """Labels an issue should carry after intake."""
    issue.set_lane(Lane.ON_THE_BENCH)
    labels = set(issue.labels)
    if not issue.approved:
        labels.add(NEEDS_APPROVAL_LABEL)
    return labels


def run_intake(client: GitHubClient, owner: str, repo: str, number: int) -> set[str]:
    """Apply intake to one issue; returns the labels written."""
    client.ensure_label(owner, repo, NEEDS_APPROVAL_LABEL, NEEDS_APPROVAL_COLOR, NEEDS_APPROVAL_DESCRIPTION)

    issue = issue_from_github(client.get_issue(owner, repo, number))
    labels = intake_labels(issue)
    client.set_issue_labels(owner, repo, number, sorted(labels))
    client.add_comment(
        owner,
        repo,
        number,
        INTAKE_COMMENT.format(number=number, needs_approval=NEEDS_APPROVAL_LABEL),
    )

    logger.info("#%d initialized with lane '%s' and review checklist", number, Lane.ON_THE_BENCH.value)
    return labels


def main() -> None:
    config = validate_config("intake")
    if not config["valid"]:
        for error in config["errors"]:
            logger.error("Configuration error: %s", error)
        sys.exit(1)

    owner, repo = split_repository(GITHUB_REPOSITORY)

    try:
        event = load_event(GITHUB_EVENT_PATH)
        number = (event.get("issue") or {}).get("number")
        if not number:
            raise ValueError("Issue number not found in event payload")
        run_intake(GitHubClient(), owner, repo, int(number))
    except (GitHubAPIError, FileNotFoundError, ValueError) as e:
        logger.error("Issue intake failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
