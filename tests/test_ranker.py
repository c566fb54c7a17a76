"""Tests for lane ranking and partitioning."""

from datetime import datetime, timedelta, timezone
from itertools import combinations

from lanes.labels import issue_from_github
from lanes.ranker import format_issue, lane_counts, rank, sort_issues, sort_key
from practitioner_types import Issue, Lane

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_issue(
    number: int,
    score: int = 50,
    independent: bool = False,
    size_rank: int = 1,
    age_days: int = 0,
    approved: bool = True,
) -> Issue:
    """Helper: larger age_days means an older issue."""
    return Issue(
        number=number,
        title=f"Issue {number}",
        created_at=BASE_TIME - timedelta(days=age_days),
        score=score,
        independent=independent,
        size_rank=size_rank,
        approved=approved,
    )


class TestSortOrder:
    """Tests for the comparator chain."""

    def test_score_descending(self):
        issues = [make_issue(1, score=10), make_issue(2, score=90), make_issue(3, score=50)]

        assert [i.number for i in sort_issues(issues)] == [2, 3, 1]

    def test_independent_breaks_score_tie(self):
        issues = [make_issue(1, independent=False), make_issue(2, independent=True)]

        assert [i.number for i in sort_issues(issues)] == [2, 1]

    def test_smaller_size_breaks_independence_tie(self):
        issues = [make_issue(1, size_rank=2), make_issue(2, size_rank=0), make_issue(3, size_rank=1)]

        assert [i.number for i in sort_issues(issues)] == [2, 3, 1]

    def test_older_breaks_size_tie(self):
        issues = [make_issue(1, age_days=1), make_issue(2, age_days=5)]

        assert [i.number for i in sort_issues(issues)] == [2, 1]

    def test_number_breaks_full_tie(self):
        issues = [make_issue(9), make_issue(3), make_issue(5)]

        assert [i.number for i in sort_issues(issues)] == [3, 5, 9]

    def test_score_outranks_independence(self):
        issues = [make_issue(1, score=60, independent=True), make_issue(2, score=61)]

        assert [i.number for i in sort_issues(issues)] == [2, 1]

    def test_strict_total_order(self):
        issues = [
            make_issue(n, score=s, independent=ind, size_rank=sz, age_days=age)
            for n, (s, ind, sz, age) in enumerate(
                [(50, True, 0, 1), (50, True, 0, 1), (50, False, 0, 1), (70, False, 2, 0)], start=1
            )
        ]

        for a, b in combinations(issues, 2):
            assert sort_key(a) != sort_key(b)


class TestRank:
    """Tests for lane partitioning."""

    def test_ten_approved_issues(self):
        scores = [90, 90, 80, 70, 70, 70, 60, 50, 40, 30]
        issues = [make_issue(n, score=s) for n, s in enumerate(scores, start=1)]

        assignment = rank(issues)

        assert [assignment[n] for n in (1, 2, 3)] == [Lane.AT_BAT] * 3
        assert [assignment[n] for n in (4, 5, 6)] == [Lane.ON_DECK] * 3
        assert [assignment[n] for n in (7, 8, 9)] == [Lane.IN_THE_HOLE] * 3
        assert assignment[10] == Lane.ON_THE_BENCH

    def test_tie_breaks_decide_lane_boundary(self):
        issues = [
            make_issue(1, score=90),
            make_issue(2, score=90),
            make_issue(3, score=80, independent=False),
            make_issue(4, score=80, independent=True),
        ]

        assignment = rank(issues)

        assert assignment[4] == Lane.AT_BAT
        assert assignment[3] == Lane.ON_DECK

    def test_unapproved_always_benched(self):
        issues = [make_issue(1, score=100, approved=False), make_issue(2, score=1)]

        assignment = rank(issues)

        assert assignment[1] == Lane.ON_THE_BENCH
        assert assignment[2] == Lane.AT_BAT

    def test_total_mapping(self):
        issues = [make_issue(n, score=n, approved=n % 2 == 0) for n in range(1, 25)]

        assignment = rank(issues)

        assert set(assignment) == {i.number for i in issues}

    def test_lane_capacity(self):
        issues = [make_issue(n, score=n % 7) for n in range(1, 31)]

        counts = lane_counts(rank(issues))

        assert counts[Lane.AT_BAT] == 3
        assert counts[Lane.ON_DECK] == 3
        assert counts[Lane.IN_THE_HOLE] == 3
        assert counts[Lane.ON_THE_BENCH] == 21

    def test_under_filled_lanes(self):
        issues = [make_issue(1), make_issue(2), make_issue(3), make_issue(4)]

        counts = lane_counts(rank(issues))

        assert counts[Lane.AT_BAT] == 3
        assert counts[Lane.ON_DECK] == 1
        assert counts[Lane.IN_THE_HOLE] == 0
        assert counts[Lane.ON_THE_BENCH] == 0

    def test_no_approved_issues(self):
        issues = [make_issue(1, approved=False), make_issue(2, approved=False)]

        assignment = rank(issues)

        assert set(assignment.values()) == {Lane.ON_THE_BENCH}

    def test_empty_input(self):
        assert rank([]) == {}

    def test_custom_capacity(self):
        issues = [make_issue(n, score=100 - n) for n in range(1, 5)]

        assignment = rank(issues, capacity=1)

        assert [assignment[n] for n in (1, 2, 3, 4)] == [
            Lane.AT_BAT,
            Lane.ON_DECK,
            Lane.IN_THE_HOLE,
            Lane.ON_THE_BENCH,
        ]

    def test_clamped_label_score_ties_with_100(self):
        issues = [
            issue_from_github({
                "number": 1,
                "created_at": "2024-01-02T00:00:00Z",
                "labels": ["implementation ready", "priority:150"],
            }),
            issue_from_github({
                "number": 2,
                "created_at": "2024-01-01T00:00:00Z",
                "labels": ["implementation ready", "priority:100"],
            }),
        ]

        assert issues[0].score == 100
        # Equal clamped scores fall through to age: #2 is older
        assert [i.number for i in sort_issues(issues)] == [2, 1]

    def test_does_not_mutate_issues(self):
        issues = [make_issue(1), make_issue(2, approved=False)]

        rank(issues)

        assert all(i.lane is None for i in issues)


def test_format_issue():
    issue = make_issue(12, score=80, independent=True, size_rank=0)

    line = format_issue(issue)

    assert line.startswith("#12 [score=80, indep=true, size=small, created=2024-01-01")
    assert line.endswith("Issue 12")
