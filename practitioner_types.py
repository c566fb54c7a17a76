"""Shared data types for the practitioner resources automation."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Lane(Enum):
    """Work-queue bucket for an issue, in priority order."""

    AT_BAT = "at bat"
    ON_DECK = "on deck"
    IN_THE_HOLE = "in the hole"
    ON_THE_BENCH = "on the bench"


LANE_LABELS = {lane.value for lane in Lane}

SIZE_NAMES = {0: "small", 1: "medium", 2: "large"}

RISK_AREAS = [
    "security_vulnerabilities",
    "code_quality",
    "data_privacy",
    "licensing_ip",
    "maintainability",
    "bias_standards",
    "over_reliance",
]


@dataclass
class Issue:
    """An open tracker issue with its labels decoded into typed fields."""

    number: int
    title: str
    created_at: datetime
    labels: set[str] = field(default_factory=set)
    score: int = 0
    independent: bool = False
    size_rank: int = 1
    approved: bool = False
    lane: Optional[Lane] = None
    node_id: Optional[str] = None

    @property
    def size_name(self) -> str:
        return SIZE_NAMES.get(self.size_rank, "medium")

    def set_lane(self, lane: Lane) -> None:
        """Move the issue to ``lane``, dropping any other lane label."""
        self.labels = {
            name for name in self.labels if name.lower() not in LANE_LABELS
        }
        self.labels.add(lane.value)
        self.lane = lane


def resource_key(resource: dict) -> tuple[Optional[str], Optional[str]]:
    """Return the identity key of a resource: exact (title, source).

    Args:
        resource: Resource dictionary

    Returns:
        Tuple of (title, source); a missing field is None
    """
    return resource.get("title"), resource.get("source")


def is_matchable(key: tuple[Optional[str], Optional[str]]) -> bool:
    """A key with a missing part never matches another resource."""
    return key[0] is not None and key[1] is not None
