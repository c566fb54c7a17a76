"""Rank approved issues and partition them into lanes."""

import logging
from collections import Counter

from config.automation_config import LANE_CAPACITY
from practitioner_types import Issue, Lane

logger = logging.getLogger(__name__)

# Lanes filled from the top of the ranking; everything else is benched
ACTIVE_LANES = [Lane.AT_BAT, Lane.ON_DECK, Lane.IN_THE_HOLE]


def sort_key(issue: Issue) -> tuple:
    """Score desc, independent first, smaller size, older, lower number."""
    return (
        -issue.score,
        not issue.independent,
        issue.size_rank,
        issue.created_at,
        issue.number,
    )


def sort_issues(issues: list[Issue]) -> list[Issue]:
    return sorted(issues, key=sort_key)


def rank(issues: list[Issue], capacity: int = LANE_CAPACITY) -> dict[int, Lane]:
    """Compute the desired lane for every issue.

    Approved issues are ordered by sort_key and the first ``capacity`` go
    at bat, the next ``capacity`` on deck, the next ``capacity`` in the hole.
    Remaining approved issues and all unapproved issues go on the bench.

    Args:
        issues: Issues with decoded labels
        capacity: Slots per active lane

    Returns:
        Mapping of issue number to Lane, covering every input issue
    """
    approved = sort_issues([issue for issue in issues if issue.approved])

    assignment = {}
    for position, issue in enumerate(approved):
        slot = position // capacity
        lane = ACTIVE_LANES[slot] if slot < len(ACTIVE_LANES) else Lane.ON_THE_BENCH
        assignment[issue.number] = lane

    for issue in issues:
        assignment.setdefault(issue.number, Lane.ON_THE_BENCH)

    counts = lane_counts(assignment)
    logger.info(
        "Ranked %d issues (%d approved): at bat=%d, on deck=%d, in the hole=%d, bench=%d",
        len(issues),
        len(approved),
        counts[Lane.AT_BAT],
        counts[Lane.ON_DECK],
        counts[Lane.IN_THE_HOLE],
        counts[Lane.ON_THE_BENCH],
    )
    return assignment


def lane_counts(assignment: dict[int, Lane]) -> Counter:
    counts = Counter({lane: 0 for lane in Lane})
    counts.update(assignment.values())
    return counts


def format_issue(issue: Issue) -> str:
    return (
        f"#{issue.number} [score={issue.score}, indep={str(issue.independent).lower()}, "
        f"size={issue.size_name}, created={issue.created_at.isoformat()}] {issue.title}"
    )
