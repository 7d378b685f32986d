"""Tests for record aggregates."""

import pytest

from monteerly.models import BriefStatus, ProjectStatus
from monteerly.sync.aggregates import compute_aggregates, empty_aggregates
from monteerly.sync.materialize import materialize_brief, materialize_project

pytestmark = pytest.mark.unit


def _project(pid: str, **raw):
    return materialize_project(pid, {"ownerId": "u1", **raw})


def test_empty_cache_has_zero_budget():
    aggregates = empty_aggregates(ProjectStatus)

    assert aggregates.total == 0
    assert aggregates.total_budget == 0
    assert aggregates.by_status == {s.value: 0 for s in ProjectStatus}


def test_total_budget_sums_records():
    aggregates = compute_aggregates(
        [_project("a", budget=100), _project("b", budget=250)], ProjectStatus
    )

    assert aggregates.total == 2
    assert aggregates.total_budget == 350


def test_counts_per_status_include_zeros():
    records = [
        _project("a", status="draft"),
        _project("b", status="in_progress"),
        _project("c", status="review"),
        _project("d", status="completed"),
        _project("e", status="hiring"),
        _project("f", status="in-progress"),
    ]

    aggregates = compute_aggregates(records, ProjectStatus)

    assert aggregates.by_status["in_progress"] == 2
    assert aggregates.count(ProjectStatus.IN_PROGRESS, ProjectStatus.REVIEW) == 3
    assert aggregates.count("completed") == 1
    assert aggregates.count(ProjectStatus.HIRING) == 1
    assert sum(aggregates.by_status.values()) == aggregates.total


def test_brief_figures():
    records = [
        materialize_brief("a", {"ownerId": "u1"}),
        materialize_brief("b", {"ownerId": "u1", "status": "accepted", "budget": 40}),
        materialize_brief("c", {"ownerId": "u1", "status": "rejected"}),
    ]

    aggregates = compute_aggregates(records, BriefStatus)

    assert aggregates.count(BriefStatus.PENDING) == 1
    assert aggregates.count(BriefStatus.ACCEPTED) == 1
    assert aggregates.by_status["completed"] == 0
    assert aggregates.total_budget == 40


def test_to_dict_is_plain_data():
    data = compute_aggregates([_project("a", budget=10)], ProjectStatus).to_dict()

    assert data == {
        "total": 1,
        "by_status": {"draft": 1, "hiring": 0, "in_progress": 0, "review": 0, "completed": 0},
        "total_budget": 10.0,
    }
