"""Tests for the tasks API against the in-memory backend."""

import json
from datetime import UTC, date, datetime

import pytest

from nowdo_cli.models.core import DateRange, TaskCreate, TaskFilters, TaskUpdate
from nowdo_cli.models.exceptions import RemoteError
from nowdo_cli.models.patch import Patch
from nowdo_cli.services.api.tasks import TasksAPI


def seed_task(backend, user_id, **fields):
    row = {
        "user_id": user_id,
        "title": "Task",
        "description": "",
        "category": "personal",
        "priority": "medium",
        "status": "pending",
        "start_date": "2025-06-01T09:00:00+00:00",
        "end_date": "2025-06-02T09:00:00+00:00",
        "scheduled_date": None,
        "scheduled_time": None,
    }
    row.update(fields)
    return backend.insert("user_tasks", **row)


@pytest.fixture
def api(client):
    return TasksAPI(client)


@pytest.mark.asyncio
async def test_list_is_scoped_to_owner(api, backend, user, other_user):
    seed_task(backend, user.id, title="Mine")
    seed_task(backend, other_user.id, title="Theirs")

    tasks = await api.list_tasks(user.id)

    assert [t.title for t in tasks] == ["Mine"]
    assert tasks[0].user_id == user.id


@pytest.mark.asyncio
async def test_list_applies_equality_filters(api, backend, user):
    seed_task(backend, user.id, title="A", status="pending", priority="high")
    seed_task(backend, user.id, title="B", status="completed", priority="high")
    seed_task(backend, user.id, title="C", status="pending", priority="low")

    tasks = await api.list_tasks(
        user.id, TaskFilters(status="pending", priority="high")
    )

    assert [t.title for t in tasks] == ["A"]


@pytest.mark.asyncio
async def test_all_disables_a_filter(api, backend, user):
    seed_task(backend, user.id, title="A", status="pending")
    seed_task(backend, user.id, title="B", status="completed")

    tasks = await api.list_tasks(user.id, TaskFilters(status="all"))

    assert {t.title for t in tasks} == {"A", "B"}
    params = backend.requests_to("user_tasks")[-1].url.params
    assert "status" not in params


@pytest.mark.asyncio
async def test_list_date_range_is_inclusive(api, backend, user):
    for day in ("2025-06-01", "2025-06-03", "2025-06-05", "2025-06-07"):
        seed_task(backend, user.id, title=day, scheduled_date=day)

    tasks = await api.list_tasks(
        user.id,
        TaskFilters(
            date_range=DateRange(start=date(2025, 6, 3), end=date(2025, 6, 5)),
            sort_by="scheduled_date",
        ),
    )

    assert [t.title for t in tasks] == ["2025-06-03", "2025-06-05"]


@pytest.mark.asyncio
async def test_list_sorts_and_paginates(api, backend, user):
    for title in ("c", "a", "e", "b", "d"):
        seed_task(backend, user.id, title=title)

    tasks = await api.list_tasks(
        user.id, TaskFilters(sort_by="title", sort_order="desc", limit=2, offset=1)
    )

    assert [t.title for t in tasks] == ["d", "c"]


@pytest.mark.asyncio
async def test_offset_without_limit_uses_page_size(api, backend, user):
    for i in range(15):
        seed_task(backend, user.id, title=f"t{i:02d}")

    tasks = await api.list_tasks(user.id, TaskFilters(sort_by="title", offset=2))

    assert len(tasks) == 10
    assert tasks[0].title == "t02"


@pytest.mark.asyncio
async def test_search_matches_title_or_description(api, backend, user):
    seed_task(backend, user.id, title="Buy milk")
    seed_task(backend, user.id, title="Errands", description="get MILK and eggs")
    seed_task(backend, user.id, title="Write report")

    tasks = await api.search_tasks(user.id, "milk")

    assert {t.title for t in tasks} == {"Buy milk", "Errands"}


@pytest.mark.asyncio
async def test_create_returns_persisted_row(api, backend, user):
    task = TaskCreate(
        title="Write report",
        priority="high",
        category="work",
        start_date=datetime(2025, 6, 2, 9, tzinfo=UTC),
        end_date=datetime(2025, 6, 3, 9, tzinfo=UTC),
        scheduled_date=date(2025, 6, 2),
    )

    created = await api.create_task(user.id, task)

    assert created.id
    assert created.user_id == user.id
    assert created.title == "Write report"
    assert created.scheduled_date == date(2025, 6, 2)
    assert backend.tables["user_tasks"][0]["user_id"] == user.id


@pytest.mark.asyncio
async def test_update_changes_only_supplied_field(api, backend, user):
    row = seed_task(backend, user.id, title="Old", priority="low", description="keep")

    updated = await api.update_task(user.id, row["id"], TaskUpdate(title="New"))

    assert updated.title == "New"
    assert updated.priority == "low"
    assert updated.description == "keep"
    request = backend.requests_to("user_tasks", "PATCH")[-1]
    assert json.loads(request.content) == {"title": "New"}


@pytest.mark.asyncio
async def test_update_accepts_patch(api, backend, user):
    row = seed_task(backend, user.id, status="pending")

    updated = await api.update_task(user.id, row["id"], Patch(status="completed"))

    assert updated.status == "completed"


@pytest.mark.asyncio
async def test_empty_update_is_rejected_before_any_request(api, backend, user):
    row = seed_task(backend, user.id)

    with pytest.raises(ValueError, match="Nothing to update"):
        await api.update_task(user.id, row["id"], TaskUpdate())

    assert backend.requests_to("user_tasks", "PATCH") == []


@pytest.mark.asyncio
async def test_update_of_another_users_task_fails(api, backend, user, other_user):
    row = seed_task(backend, other_user.id, title="Theirs")

    with pytest.raises(RemoteError, match="Failed to update task"):
        await api.update_task(user.id, row["id"], TaskUpdate(title="Mine now"))

    assert backend.tables["user_tasks"][0]["title"] == "Theirs"


@pytest.mark.asyncio
async def test_delete_matches_id_and_owner(api, backend, user, other_user):
    mine = seed_task(backend, user.id)
    theirs = seed_task(backend, other_user.id)

    await api.delete_task(user.id, mine["id"])
    await api.delete_task(user.id, theirs["id"])

    assert [r["id"] for r in backend.tables["user_tasks"]] == [theirs["id"]]


@pytest.mark.asyncio
async def test_backend_failure_is_prefixed_with_operation(api, backend, user):
    backend.fail("GET", "user_tasks", body={"message": "timeout"})

    with pytest.raises(RemoteError) as exc_info:
        await api.list_tasks(user.id)

    assert str(exc_info.value) == "Failed to fetch tasks: timeout"


@pytest.mark.asyncio
async def test_null_description_reads_as_empty(api, backend, user):
    seed_task(backend, user.id, title="Legacy", description=None)

    [task] = await api.list_tasks(user.id)

    assert task.title == "Legacy"
    assert task.description == ""


@pytest.mark.asyncio
async def test_malformed_row_is_reported_as_remote_error(api, backend, user):
    seed_task(backend, user.id, priority="urgent")

    with pytest.raises(RemoteError, match="Failed to fetch tasks: unexpected data"):
        await api.list_tasks(user.id)
