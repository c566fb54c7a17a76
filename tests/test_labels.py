"""Tests for label decoding at the ingestion boundary."""

from datetime import datetime, timezone

import pytest

from lanes.labels import (
    current_lane,
    extract_independence,
    extract_score,
    extract_size_rank,
    issue_from_github,
    parse_created_at,
    strip_lane_labels,
    to_label_set,
)
from practitioner_types import Issue, Lane


class TestExtractScore:
    """Tests for priority/score label parsing."""

    def test_priority_label(self):
        assert extract_score({"priority:85"}) == 85

    def test_score_label(self):
        assert extract_score({"score:92"}) == 92

    def test_case_and_whitespace(self):
        assert extract_score({"Priority: 40"}) == 40

    def test_clamped_to_100(self):
        assert extract_score({"priority:150"}) == 100

    def test_highest_label_wins(self):
        assert extract_score({"priority:30", "score:70", "bug"}) == 70

    def test_default_zero(self):
        assert extract_score({"bug", "size:small"}) == 0

    def test_four_digits_ignored(self):
        assert extract_score({"priority:1000"}) == 0


class TestExtractIndependence:
    """Tests for independence label parsing."""

    @pytest.mark.parametrize("label", ["independent", "Independent", "independence:high",
                                       "independence:yes", "independence: true"])
    def test_independent(self, label):
        assert extract_independence({label}) is True

    @pytest.mark.parametrize("label", ["independence:low", "independence:no", "bug"])
    def test_not_independent(self, label):
        assert extract_independence({label}) is False

    def test_default_false(self):
        assert extract_independence(set()) is False


class TestExtractSizeRank:
    """Tests for size label parsing."""

    def test_small(self):
        assert extract_size_rank({"size:small"}) == 0

    def test_medium(self):
        assert extract_size_rank({"size:medium"}) == 1

    def test_large(self):
        assert extract_size_rank({"Size:Large"}) == 2

    def test_unknown_defaults_to_medium(self):
        assert extract_size_rank({"size:huge"}) == 1

    def test_missing_defaults_to_medium(self):
        assert extract_size_rank({"bug"}) == 1


def test_to_label_set_accepts_strings_and_objects():
    labels = to_label_set(["bug", {"name": " size:small "}, {"name": ""}, None])

    assert labels == {"bug", "size:small"}


def test_current_lane_prefers_higher_lane():
    assert current_lane({"on the bench", "At Bat"}) == Lane.AT_BAT
    assert current_lane({"bug"}) is None


def test_strip_lane_labels():
    assert strip_lane_labels({"On Deck", "in the hole", "bug"}) == {"bug"}


def test_parse_created_at_handles_z_suffix():
    parsed = parse_created_at("2024-03-01T12:00:00Z")

    assert parsed == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_parse_created_at_naive_is_utc():
    parsed = parse_created_at("2024-03-01T12:00:00")

    assert parsed.tzinfo == timezone.utc


def test_parse_created_at_missing():
    with pytest.raises(ValueError):
        parse_created_at(None)


def test_issue_from_github():
    payload = {
        "number": 42,
        "title": "Add filter panel",
        "created_at": "2024-01-05T09:30:00Z",
        "node_id": "I_kwDO42",
        "labels": [
            {"name": "implementation ready"},
            {"name": "priority:88"},
            {"name": "independence:high"},
            {"name": "size:small"},
            {"name": "on deck"},
        ],
    }

    issue = issue_from_github(payload)

    assert issue.number == 42
    assert issue.title == "Add filter panel"
    assert issue.score == 88
    assert issue.independent is True
    assert issue.size_rank == 0
    assert issue.approved is True
    assert issue.lane == Lane.ON_DECK
    assert issue.node_id == "I_kwDO42"
    assert issue.created_at.year == 2024


def test_issue_from_github_defaults():
    issue = issue_from_github({"number": 7, "created_at": "2024-01-05T09:30:00Z", "labels": []})

    assert issue.score == 0
    assert issue.independent is False
    assert issue.size_rank == 1
    assert issue.approved is False
    assert issue.lane is None


def test_set_lane_is_exclusive():
    issue = Issue(
        number=1,
        title="t",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        labels={"at bat", "On Deck", "bug"},
    )

    issue.set_lane(Lane.ON_THE_BENCH)

    assert issue.lane == Lane.ON_THE_BENCH
    assert issue.labels == {"bug", "on the bench"}
