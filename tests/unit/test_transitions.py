"""Tests for the status transition tables and controller."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from hypothesis import given
from hypothesis import strategies as st

from monteerly.core.exceptions import IllegalTransition, StoreError
from monteerly.models import BriefStatus, ProjectStatus
from monteerly.services import BRIEF_TRANSITIONS, PROJECT_TRANSITIONS, StatusTransitionController
from monteerly.services.transition_service import is_legal, legal_next_states
from monteerly.sync.materialize import materialize_brief, materialize_project

pytestmark = pytest.mark.unit


def _project(status: str, pid: str = "p1"):
    return materialize_project(pid, {"ownerId": "u1", "status": status})


def _brief(status: str, bid: str = "b1"):
    return materialize_brief(bid, {"ownerId": "u1", "status": status})


@pytest.fixture
def store() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def controller(store: AsyncMock) -> StatusTransitionController:
    return StatusTransitionController(store)


class TestTables:
    def test_every_status_has_an_entry(self):
        assert set(PROJECT_TRANSITIONS) == set(ProjectStatus)
        assert set(BRIEF_TRANSITIONS) == set(BriefStatus)

    def test_project_lifecycle_is_linear(self):
        assert legal_next_states(_project("draft")) == {ProjectStatus.HIRING}
        assert legal_next_states(_project("review")) == {ProjectStatus.COMPLETED}
        assert legal_next_states(_project("completed")) == frozenset()

    def test_pending_brief_can_be_accepted_or_rejected(self):
        assert legal_next_states(_brief("pending")) == {
            BriefStatus.ACCEPTED,
            BriefStatus.REJECTED,
        }
        assert legal_next_states(_brief("rejected")) == frozenset()

    def test_is_legal_accepts_enum_or_string(self):
        record = _project("hiring")
        assert is_legal(record, ProjectStatus.IN_PROGRESS)
        assert is_legal(record, "in_progress")
        assert not is_legal(record, "in-progress")
        assert not is_legal(record, "completed")


class TestController:
    async def test_accepting_a_pending_brief_writes_one_field(self, controller, store):
        await controller.transition(_brief("pending"), BriefStatus.ACCEPTED)

        store.update.assert_awaited_once_with("briefs", "b1", {"status": "accepted"})

    async def test_starting_a_pending_brief_is_refused(self, controller, store):
        with pytest.raises(IllegalTransition) as exc_info:
            await controller.transition(_brief("pending"), BriefStatus.IN_PROGRESS)

        assert exc_info.value.current == "pending"
        assert exc_info.value.target == "in_progress"
        store.update.assert_not_awaited()

    async def test_project_advances_one_step(self, controller, store):
        await controller.transition(_project("draft", "p9"), "hiring")

        store.update.assert_awaited_once_with("projects", "p9", {"status": "hiring"})

    async def test_nothing_is_reread_after_the_write(self, controller, store):
        await controller.transition(_project("in_progress"), ProjectStatus.REVIEW)

        store.get.assert_not_awaited()
        store.query.assert_not_awaited()

    async def test_store_failure_propagates(self, controller, store):
        store.update.side_effect = StoreError("write failed")

        with pytest.raises(StoreError):
            await controller.transition(_project("draft"), ProjectStatus.HIRING)

    async def test_concurrent_transitions_last_write_wins(self, controller, store):
        # Both callers read "pending"; neither is rejected and both writes land
        first = _brief("pending")
        second = _brief("pending")

        await controller.transition(first, BriefStatus.ACCEPTED)
        await controller.transition(second, BriefStatus.REJECTED)

        assert [c.args[2] for c in store.update.await_args_list] == [
            {"status": "accepted"},
            {"status": "rejected"},
        ]


@given(
    current=st.sampled_from(list(ProjectStatus)),
    target=st.sampled_from(list(ProjectStatus)) | st.text(max_size=12),
)
def test_illegal_project_targets_never_touch_the_store(current, target):
    store = AsyncMock()
    controller = StatusTransitionController(store)
    record = _project(current.value)
    wanted = target.value if isinstance(target, ProjectStatus) else target

    if any(s.value == wanted for s in PROJECT_TRANSITIONS[current]):
        asyncio.run(controller.transition(record, target))
        store.update.assert_awaited_once_with("projects", "p1", {"status": wanted})
    else:
        with pytest.raises(IllegalTransition):
            asyncio.run(controller.transition(record, target))
        assert store.method_calls == []
