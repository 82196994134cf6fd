"""Tests for the scheduler adapter and the in-memory backend."""

from datetime import timedelta

import pytest

from planner.schemas.notifications import Trigger, TriggerKind, trigger_identifier
from planner.services.errors import SchedulingFailure
from planner.services.scheduler import InMemoryNotificationBackend, SchedulerAdapter


def make_trigger(now, assignment_id="a1", kind=TriggerKind.DUE, hours=5, title="Due Soon"):
    return Trigger(
        identifier=trigger_identifier(assignment_id, kind),
        kind=kind,
        fires_at=now + timedelta(hours=hours),
        title=title,
        body="body",
        assignment_id=assignment_id,
    )


@pytest.fixture
def backend(clock):
    return InMemoryNotificationBackend(clock)


@pytest.fixture
def adapter(backend, clock):
    return SchedulerAdapter(backend, clock)


async def test_schedule_replaces_same_identifier(adapter, backend, now):
    await adapter.schedule(make_trigger(now, title="first"))
    result = await adapter.schedule(make_trigger(now, hours=7, title="second"))

    assert result.status == "scheduled"
    pending = await adapter.pending()
    assert len(pending) == 1
    assert pending[0].title == "second"
    assert pending[0].fires_at == now + timedelta(hours=7)


async def test_past_trigger_is_skipped_and_clears_old_one(adapter, backend, now):
    await adapter.schedule(make_trigger(now))

    result = await adapter.schedule(make_trigger(now, hours=-1))

    assert result.status == "skipped"
    assert backend.triggers == {}


async def test_cancel_unknown_identifier_succeeds(adapter):
    result = await adapter.cancel("assignment-missing-due")
    assert result.ok
    assert result.status == "canceled"


async def test_cancel_all_removes_every_kind_of_one_assignment(adapter, now):
    for kind in (TriggerKind.DUE, TriggerKind.DAY_BEFORE, TriggerKind.DAILY_DIGEST):
        await adapter.schedule(make_trigger(now, kind=kind))
    await adapter.schedule(make_trigger(now, assignment_id="a2"))

    result = await adapter.cancel_all("a1")

    assert result.status == "canceled"
    assert await adapter.list_scheduled() == {trigger_identifier("a2", TriggerKind.DUE)}


async def test_cancel_all_is_idempotent(adapter):
    assert (await adapter.cancel_all("a1")).ok
    assert (await adapter.cancel_all("a1")).ok


async def test_permission_denied_is_reported_not_raised(clock, now):
    backend = InMemoryNotificationBackend(clock, permission_granted=False)
    adapter = SchedulerAdapter(backend, clock)

    result = await adapter.schedule(make_trigger(now))

    assert result.status == "failed"
    assert "permission" in result.error
    assert await adapter.pending() == []


async def test_capacity_limit(clock, now):
    backend = InMemoryNotificationBackend(clock, capacity=2)
    adapter = SchedulerAdapter(backend, clock)
    await adapter.schedule(make_trigger(now, assignment_id="a1"))
    await adapter.schedule(make_trigger(now, assignment_id="a2"))

    rejected = await adapter.schedule(make_trigger(now, assignment_id="a3"))
    replaced = await adapter.schedule(make_trigger(now, assignment_id="a2", title="moved"))

    assert rejected.status == "failed"
    assert replaced.status == "scheduled"
    assert len(backend.triggers) == 2


async def test_pending_is_sorted_and_drops_fired(clock, now):
    backend = InMemoryNotificationBackend(clock)
    adapter = SchedulerAdapter(backend, clock)
    await adapter.schedule(make_trigger(now, assignment_id="late", hours=9))
    await adapter.schedule(make_trigger(now, assignment_id="early", hours=2))
    # Already fired, written straight to the backend
    backend.triggers["stale"] = make_trigger(now, assignment_id="stale", hours=-3)

    pending = await adapter.pending()

    assert [t.assignment_id for t in pending] == ["early", "late"]


class BrokenBackend(InMemoryNotificationBackend):
    async def pending(self):
        raise SchedulingFailure("backend unavailable")

    async def remove(self, identifier):
        raise SchedulingFailure("backend unavailable")


async def test_unreadable_backend_lists_nothing(clock):
    adapter = SchedulerAdapter(BrokenBackend(clock), clock)
    assert await adapter.list_scheduled() == set()


async def test_cancel_failure_is_reported(clock):
    adapter = SchedulerAdapter(BrokenBackend(clock), clock)

    result = await adapter.cancel_all("a1")

    assert result.status == "failed"
    assert "backend unavailable" in result.error
