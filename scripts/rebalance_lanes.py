#!/usr/bin/env python3
"""Rebalance issue lanes when an issue is closed.

Ranks open "implementation ready" issues and fills the at bat, on deck and
in the hole lanes (3 each); everything else goes on the bench. The lane is
written to the Projects v2 Status field and legacy lane labels are removed
from the issue.

Runs triggered by concurrent close events must be serialized by the caller
(e.g. a workflow concurrency group); the last writer wins otherwise.

Usage:
    export GITHUB_TOKEN=... GITHUB_REPOSITORY=owner/repo
    python scripts/rebalance_lanes.py

    # Print the priority ordering only
    LIST_ONLY=1 python scripts/rebalance_lanes.py

    # Log intended changes without mutating anything
    DRY_RUN=1 python scripts/rebalance_lanes.py
"""

import logging
import os
import sys
from typing import Dict, List

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.automation_config import (
    DRY_RUN,
    GITHUB_REPOSITORY,
    LANE_STATUS_MAP_RAW,
    LIST_ONLY,
    PROJECT_NUMBER,
    PROJECT_OWNER,
    PROJECT_STATUS_FIELD_NAME,
    parse_lane_status_map,
    split_repository,
    validate_config,
)
from integrations.github_api import (
    GitHubAPIError,
    GitHubClient,
    find_status_field,
    option_id_by_name,
)
from lanes.labels import issue_from_github, strip_lane_labels
from lanes.ranker import format_issue, lane_counts, rank, sort_issues
from practitioner_types import Issue, Lane

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def print_priority_listing(issues: List[Issue]) -> None:
    approved = sort_issues([i for i in issues if i.approved])
    others = sort_issues([i for i in issues if not i.approved])

    print(f"Priority: implementation ready ({len(approved)}):")
    for issue in approved:
        print("  " + format_issue(issue))

    print(f"\nPriority: others ({len(others)}):")
    for issue in others:
        print("  " + format_issue(issue))


def apply_assignment(
    client: GitHubClient,
    owner: str,
    repo: str,
    issues: List[Issue],
    assignment: Dict[int, Lane],
    project: Dict,
    status_field: Dict,
    lane_status_map: Dict[str, str],
    dry_run: bool = False,
) -> Dict[str, int]:
    """Write each issue's lane to the project and strip legacy lane labels.

    Returns:
        Counts of issues updated and skipped
    """
    updated = 0
    skipped = 0

    for issue in issues:
        desired = assignment.get(issue.number, Lane.ON_THE_BENCH)
        option_id = option_id_by_name(status_field, lane_status_map.get(desired.value, desired.value))
        if not option_id:
            logger.warning("#%d: desired status '%s' not found, skipping", issue.number, desired.value)
            skipped += 1
            continue

        if dry_run:
            logger.info("DRY RUN: #%d would set Project Status → '%s'", issue.number, desired.value)
        else:
            if not issue.node_id:
                issue.node_id = client.get_issue(owner, repo, issue.number).get("node_id")
            item_id = client.get_issue_project_item_id(issue.node_id, project["id"])
            if not item_id:
                item_id = client.add_issue_to_project(project["id"], issue.node_id)
            if not item_id:
                logger.warning("#%d: could not obtain project item id, skipping", issue.number)
                skipped += 1
                continue
            client.set_project_item_status(project["id"], item_id, status_field["id"], option_id)

        clean = strip_lane_labels(issue.labels)
        if clean != issue.labels:
            if dry_run:
                logger.info("DRY RUN: #%d would remove legacy lane labels", issue.number)
            else:
                client.set_issue_labels(owner, repo, issue.number, sorted(clean))
                issue.labels = clean

        if not dry_run:
            logger.info("#%d → %s", issue.number, desired.value)
        updated += 1

    return {"updated": updated, "skipped": skipped}


def rebalance(
    client: GitHubClient,
    owner: str,
    repo: str,
    project_owner: str,
    project_number: int,
    status_field_name: str,
    lane_status_map: Dict[str, str],
    dry_run: bool = False,
    list_only: bool = False,
) -> Dict[int, Lane]:
    """Rank open issues and apply the resulting lanes.

    Returns:
        Mapping of issue number to desired lane
    """
    issues = [issue_from_github(payload) for payload in client.list_open_issues(owner, repo)]
    assignment = rank(issues)

    if list_only:
        print_priority_listing(issues)
        return assignment

    project = client.get_project(project_owner, project_number)
    status_field = find_status_field(project, status_field_name)

    result = apply_assignment(
        client, owner, repo, issues, assignment, project, status_field, lane_status_map, dry_run
    )

    counts = lane_counts(assignment)
    logger.info(
        "Rebalanced: at bat=%d, on deck=%d, in the hole=%d, bench=%d (updated=%d, skipped=%d)",
        counts[Lane.AT_BAT],
        counts[Lane.ON_DECK],
        counts[Lane.IN_THE_HOLE],
        counts[Lane.ON_THE_BENCH],
        result["updated"],
        result["skipped"],
    )
    return assignment


def main() -> None:
    config = validate_config("rebalance")
    if not config["valid"]:
        for error in config["errors"]:
            logger.error("Configuration error: %s", error)
        sys.exit(1)

    owner, repo = split_repository(GITHUB_REPOSITORY)

    try:
        rebalance(
            GitHubClient(),
            owner,
            repo,
            project_owner=PROJECT_OWNER or owner,
            project_number=PROJECT_NUMBER,
            status_field_name=PROJECT_STATUS_FIELD_NAME,
            lane_status_map=parse_lane_status_map(LANE_STATUS_MAP_RAW),
            dry_run=DRY_RUN,
            list_only=LIST_ONLY,
        )
    except (GitHubAPIError, ValueError) as e:
        logger.error("Rebalance failed: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
