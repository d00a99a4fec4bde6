"""Tasks API endpoints."""

from __future__ import annotations

from pydantic import BaseModel

from nowdo_cli.models.core import Task, TaskCreate, TaskFilters, TaskUpdate
from nowdo_cli.models.patch import Patch
from nowdo_cli.services.api.client import APIClient, remote_operation
from nowdo_cli.services.api.query import Query, prefer, rows_of, single_row

TASKS_TABLE = "user_tasks"

# Page size used when an offset is given without a limit.
DEFAULT_PAGE_SIZE = 10
DEFAULT_SEARCH_LIMIT = 20

_EQUALITY_FILTERS = ("status", "priority", "category")


def _apply_equality_filters(query: Query, filters: TaskFilters) -> Query:
    for field in _EQUALITY_FILTERS:
        value = getattr(filters, field)
        if value and value != "all":
            query.eq(field, value)
    return query


def to_patch(update: BaseModel | Patch) -> Patch:
    """Normalize an update model or a ready patch into a non-empty patch."""
    patch = update if isinstance(update, Patch) else Patch.from_model(update)
    return patch.require_fields()


class TasksAPI:
    """Tasks API client."""

    def __init__(self, client: APIClient):
        self.client = client

    @remote_operation("fetch tasks")
    async def list_tasks(
        self, user_id: str, filters: TaskFilters | None = None
    ) -> list[Task]:
        """List the user's tasks.

        Args:
            user_id: Owner of the tasks
            filters: Equality filters, date range on scheduled_date, sort and
                pagination. ``"all"`` disables a status/priority/category filter.

        Returns:
            Matching tasks in the requested order
        """
        filters = filters or TaskFilters()
        query = Query(TASKS_TABLE).select().eq("user_id", user_id)
        _apply_equality_filters(query, filters)

        if filters.scheduled_date:
            query.eq("scheduled_date", filters.scheduled_date)
        if filters.date_range:
            query.between(
                "scheduled_date", filters.date_range.start, filters.date_range.end
            )

        query.order(filters.sort_by, descending=filters.sort_order == "desc")

        if filters.limit:
            query.limit(filters.limit)
        if filters.offset:
            if not filters.limit:
                query.limit(DEFAULT_PAGE_SIZE)
            query.offset(filters.offset)

        response = await self.client.get(query.path, params=query.params)
        return [Task.model_validate(row) for row in rows_of(response)]

    @remote_operation("search tasks")
    async def search_tasks(
        self,
        user_id: str,
        text: str,
        filters: TaskFilters | None = None,
    ) -> list[Task]:
        """Find tasks whose title or description contains ``text``."""
        filters = filters or TaskFilters()
        query = (
            Query(TASKS_TABLE)
            .select()
            .eq("user_id", user_id)
            .search(["title", "description"], text)
        )
        _apply_equality_filters(query, filters)
        query.order("updated_at", descending=True)
        query.limit(filters.limit or DEFAULT_SEARCH_LIMIT)

        response = await self.client.get(query.path, params=query.params)
        return [Task.model_validate(row) for row in rows_of(response)]

    @remote_operation("create task")
    async def create_task(self, user_id: str, task: TaskCreate) -> Task:
        """Create a task owned by ``user_id`` and return the persisted row."""
        row = task.model_dump(mode="json")
        row["user_id"] = user_id
        response = await self.client.post(
            Query(TASKS_TABLE).path, json=row, headers=prefer()
        )
        return Task.model_validate(single_row(response))

    async def update_task(
        self, user_id: str, task_id: str, update: TaskUpdate | Patch
    ) -> Task:
        """Apply a partial update. Raises ValueError for an empty update."""
        return await self._update_task(user_id, task_id, to_patch(update))

    @remote_operation("update task")
    async def _update_task(self, user_id: str, task_id: str, patch: Patch) -> Task:
        query = Query(TASKS_TABLE).eq("id", task_id).eq("user_id", user_id)
        response = await self.client.patch(
            query.path, json=patch.to_dict(), params=query.params, headers=prefer()
        )
        return Task.model_validate(single_row(response))

    @remote_operation("delete task")
    async def delete_task(self, user_id: str, task_id: str) -> None:
        """Delete a task. Deleting a missing task is not an error."""
        query = Query(TASKS_TABLE).eq("id", task_id).eq("user_id", user_id)
        await self.client.delete(query.path, params=query.params)
