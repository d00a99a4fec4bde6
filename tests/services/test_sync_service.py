"""Tests for the user-data aggregator."""

import asyncio

import pytest

from nowdo_cli.models.exceptions import RemoteError
from nowdo_cli.services.events import AuthChanged, Collection, EventBus, FetchSettled
from nowdo_cli.services.sync_service import SyncResult, UserDataSync


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def settled(bus):
    events = []
    bus.subscribe(FetchSettled, events.append)
    return events


@pytest.fixture
def sync(client, bus):
    aggregator = UserDataSync(client, bus)
    yield aggregator
    aggregator.close()


def seed_user_data(backend, user_id, title="Task"):
    backend.insert(
        "user_tasks",
        user_id=user_id,
        title=title,
        category="work",
        priority="high",
        status="pending",
    )
    habit = backend.insert("user_habits", user_id=user_id, title="Stretch")
    backend.insert(
        "user_habit_completions",
        user_id=user_id,
        habit_id=habit["id"],
        completion_date="2025-06-02",
        completed=True,
    )
    backend.insert(
        "user_pomodoro_sessions",
        user_id=user_id,
        session_type="work",
        duration=25,
        start_time="2025-06-02T09:00:00+00:00",
    )


class TestUserDataSync:
    @pytest.mark.asyncio
    async def test_sign_in_loads_every_collection(
        self, sync, bus, settled, backend, user
    ):
        seed_user_data(backend, user.id)

        await bus.publish(AuthChanged(user_id=user.id))
        result = await sync.wait()

        assert result.success is True
        assert result.counts == {collection: 1 for collection in Collection}
        assert {event.collection for event in settled} == set(Collection)
        assert all(event.user_id == user.id and event.ok for event in settled)
        assert sync.loading is False

    @pytest.mark.asyncio
    async def test_failed_collection_does_not_block_siblings(
        self, sync, bus, settled, backend, user
    ):
        seed_user_data(backend, user.id)
        backend.fail("GET", "user_habits", body={"message": "timeout"})

        await bus.publish(AuthChanged(user_id=user.id))
        result = await sync.wait()

        assert result.success is False
        assert set(result.errors) == {Collection.HABITS}
        assert result.error == "Failed to fetch habits: timeout"
        assert result.counts[Collection.TASKS] == 1
        assert result.counts[Collection.HABIT_COMPLETIONS] == 1
        failed = [event for event in settled if not event.ok]
        assert [event.collection for event in failed] == [Collection.HABITS]
        with pytest.raises(RemoteError, match="timeout"):
            result.raise_for_error()

    @pytest.mark.asyncio
    async def test_malformed_row_settles_as_collection_error(
        self, sync, bus, settled, backend, user
    ):
        seed_user_data(backend, user.id)
        backend.insert("user_habits", user_id=user.id, title=None)

        await bus.publish(AuthChanged(user_id=user.id))
        result = await sync.wait()

        assert set(result.errors) == {Collection.HABITS}
        assert result.error.startswith("Failed to fetch habits: unexpected data")
        assert result.counts[Collection.HABIT_COMPLETIONS] == 1
        [failed] = [event for event in settled if not event.ok]
        assert failed.collection == Collection.HABITS
        assert isinstance(failed.error, RemoteError)

    @pytest.mark.asyncio
    async def test_null_descriptions_load(self, sync, bus, backend, user):
        seed_user_data(backend, user.id)
        backend.insert("user_habits", user_id=user.id, title="Read", description=None)

        await bus.publish(AuthChanged(user_id=user.id))
        result = await sync.wait()

        assert result.success is True
        assert result.counts[Collection.HABITS] == 2

    @pytest.mark.asyncio
    async def test_user_switch_cancels_stale_fetches(
        self, sync, bus, settled, backend, user, other_user
    ):
        seed_user_data(backend, user.id, title="Ada's")
        seed_user_data(backend, other_user.id, title="Grace's")
        tables = (
            "user_tasks",
            "user_habits",
            "user_habit_completions",
            "user_pomodoro_sessions",
        )
        gates = [backend.gate(table) for table in tables]

        await bus.publish(AuthChanged(user_id=user.id))
        while len(backend.requests) < len(tables):
            await asyncio.sleep(0)
        await bus.publish(AuthChanged(user_id=other_user.id))
        for gate in gates:
            gate.set()
        result = await sync.wait()

        assert result.user_id == other_user.id
        assert {event.user_id for event in settled} == {other_user.id}
        [tasks] = [e for e in settled if e.collection is Collection.TASKS]
        assert [task.title for task in tasks.rows] == ["Grace's"]
        assert sync.results[Collection.TASKS] == tasks.rows

    @pytest.mark.asyncio
    async def test_sign_out_clears_results(self, sync, bus, backend, user):
        seed_user_data(backend, user.id)
        await bus.publish(AuthChanged(user_id=user.id))
        await sync.wait()

        await bus.publish(AuthChanged(user_id=None))

        assert sync.user_id is None
        assert sync.results == {}
        assert sync.loading is False
        assert sync.result().success is False

    @pytest.mark.asyncio
    async def test_same_user_does_not_refetch(self, sync, bus, backend, user):
        await bus.publish(AuthChanged(user_id=user.id))
        await sync.wait()

        await bus.publish(AuthChanged(user_id=user.id))
        await sync.wait()

        assert len(backend.requests_to("user_tasks")) == 1

    @pytest.mark.asyncio
    async def test_pomodoro_history_is_limited(self, client, bus, backend, user):
        sync = UserDataSync(client, bus, pomodoro_limit=7)
        try:
            await bus.publish(AuthChanged(user_id=user.id))
            await sync.wait()
        finally:
            sync.close()

        request = backend.requests_to("user_pomodoro_sessions")[0]
        assert request.url.params["limit"] == "7"

    @pytest.mark.asyncio
    async def test_close_stops_listening(self, sync, bus, backend, user):
        sync.close()

        await bus.publish(AuthChanged(user_id=user.id))

        assert sync.user_id is None
        assert backend.requests == []


def test_sync_result_without_errors_does_not_raise():
    SyncResult("u1").raise_for_error()
