"""Decode tracker labels into typed issue fields.

Labels are parsed once, when an issue enters the system, so ranking only
ever compares typed values.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Iterable, Optional

from config.automation_config import APPROVAL_LABEL
from practitioner_types import LANE_LABELS, Issue, Lane

logger = logging.getLogger(__name__)

SCORE_PATTERN = re.compile(r"^(?:priority|score):\s*(\d{1,3})$", re.IGNORECASE)
INDEPENDENCE_VALUES = {"high", "yes", "true"}
SIZE_RANKS = {"small": 0, "medium": 1, "large": 2}


def to_label_set(labels: Iterable) -> set[str]:
    """Normalize REST labels (strings or {"name": ...} objects) to names."""
    names = set()
    for label in labels or []:
        name = label if isinstance(label, str) else (label or {}).get("name")
        if name and name.strip():
            names.add(name.strip())
    return names


def has_label(labels: Iterable[str], name: str) -> bool:
    target = name.lower()
    return any(label.lower() == target for label in labels)


def extract_score(labels: Iterable[str]) -> int:
    """Highest priority:NN / score:NN value, clamped to [0, 100]; default 0."""
    score = 0
    for label in labels:
        match = SCORE_PATTERN.match(label.strip())
        if match:
            score = max(score, min(100, max(0, int(match.group(1)))))
    return score


def extract_independence(labels: Iterable[str]) -> bool:
    labels = list(labels)
    if has_label(labels, "independent"):
        return True
    for label in labels:
        lowered = label.lower()
        if lowered.startswith("independence:"):
            return lowered.split(":", 1)[1].strip() in INDEPENDENCE_VALUES
    return False


def extract_size_rank(labels: Iterable[str]) -> int:
    """small=0, medium=1, large=2; missing or unknown size is medium."""
    for label in labels:
        lowered = label.lower()
        if lowered.startswith("size:"):
            return SIZE_RANKS.get(lowered.split(":", 1)[1].strip(), 1)
    return 1


def current_lane(labels: Iterable[str]) -> Optional[Lane]:
    labels = list(labels)
    for lane in Lane:
        if has_label(labels, lane.value):
            return lane
    return None


def strip_lane_labels(labels: Iterable[str]) -> set[str]:
    return {label for label in labels if label.lower() not in LANE_LABELS}


def parse_created_at(value) -> datetime:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    Raises:
        ValueError: If the timestamp is missing or unparseable
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Invalid created_at: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def issue_from_github(payload: dict) -> Issue:
    """Build an Issue from a GitHub REST issue object."""
    labels = to_label_set(payload.get("labels", []))
    issue = Issue(
        number=int(payload["number"]),
        title=payload.get("title", ""),
        created_at=parse_created_at(payload.get("created_at")),
        labels=labels,
        score=extract_score(labels),
        independent=extract_independence(labels),
        size_rank=extract_size_rank(labels),
        approved=has_label(labels, APPROVAL_LABEL),
        lane=current_lane(labels),
        node_id=payload.get("node_id"),
    )
    logger.debug(
        "Decoded #%d: score=%d indep=%s size=%s approved=%s lane=%s",
        issue.number,
        issue.score,
        issue.independent,
        issue.size_name,
        issue.approved,
        issue.lane.value if issue.lane else None,
    )
    return issue
