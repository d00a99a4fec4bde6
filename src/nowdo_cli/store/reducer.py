"""Pure reducer from (state, action) to the next state."""

from __future__ import annotations

from dataclasses import replace
from typing import TypeVar

from nowdo_cli.models.patch import merge_model
from nowdo_cli.store.actions import (
    Action,
    ClearUserData,
    LoadHabitCompletions,
    LoadHabits,
    LoadPomodoroSessions,
    LoadTasks,
    PatchTask,
    RemoveHabit,
    RemovePomodoroSession,
    RemoveTask,
    SetSystemScheme,
    SetThemeMode,
    UpsertHabit,
    UpsertHabitCompletion,
    UpsertPomodoroSession,
    UpsertTask,
)
from nowdo_cli.store.state import AppState, HabitsState, PomodoroState, TasksState

T = TypeVar("T")


def _upsert(
    items: tuple[T, ...], item: T, same=lambda a, b: a.id == b.id
) -> tuple[T, ...]:
    """Replace the entry matching ``item`` in place, or append it."""
    for index, existing in enumerate(items):
        if same(existing, item):
            return items[:index] + (item,) + items[index + 1 :]
    return items + (item,)


def _same_completion(a, b) -> bool:
    return a.id == b.id or (a.habit_id == b.habit_id and a.date == b.date)


def reduce(state: AppState, action: Action) -> AppState:
    match action:
        case LoadTasks(tasks=tasks):
            return replace(
                state, tasks=TasksState(tasks=tuple(tasks), synced_with_database=True)
            )
        case LoadHabits(habits=habits, completions=completions):
            return replace(
                state,
                habits=HabitsState(
                    habits=tuple(habits),
                    completions=tuple(completions),
                    synced_with_database=True,
                ),
            )
        case LoadHabitCompletions(completions=completions):
            return replace(
                state,
                habits=replace(
                    state.habits,
                    completions=tuple(completions),
                    synced_with_database=True,
                ),
            )
        case LoadPomodoroSessions(sessions=sessions):
            return replace(
                state,
                pomodoro=PomodoroState(
                    sessions=tuple(sessions), synced_with_database=True
                ),
            )
        case SetThemeMode(mode=mode):
            return replace(state, theme=replace(state.theme, mode=mode))
        case SetSystemScheme(scheme=scheme):
            return replace(state, theme=replace(state.theme, system_scheme=scheme))
        case UpsertTask(task=task):
            tasks = _upsert(state.tasks.tasks, task)
            return replace(state, tasks=replace(state.tasks, tasks=tasks))
        case PatchTask(task_id=task_id, patch=patch):
            tasks = tuple(
                merge_model(task, patch) if task.id == task_id else task
                for task in state.tasks.tasks
            )
            return replace(state, tasks=replace(state.tasks, tasks=tasks))
        case RemoveTask(task_id=task_id):
            tasks = tuple(t for t in state.tasks.tasks if t.id != task_id)
            return replace(state, tasks=replace(state.tasks, tasks=tasks))
        case UpsertHabit(habit=habit):
            habits = _upsert(state.habits.habits, habit)
            return replace(state, habits=replace(state.habits, habits=habits))
        case RemoveHabit(habit_id=habit_id):
            return replace(
                state,
                habits=replace(
                    state.habits,
                    habits=tuple(h for h in state.habits.habits if h.id != habit_id),
                    completions=tuple(
                        c for c in state.habits.completions if c.habit_id != habit_id
                    ),
                ),
            )
        case UpsertHabitCompletion(completion=completion):
            completions = _upsert(
                state.habits.completions, completion, same=_same_completion
            )
            return replace(
                state, habits=replace(state.habits, completions=completions)
            )
        case UpsertPomodoroSession(session=session):
            sessions = _upsert(state.pomodoro.sessions, session)
            return replace(state, pomodoro=replace(state.pomodoro, sessions=sessions))
        case RemovePomodoroSession(session_id=session_id):
            sessions = tuple(
                s for s in state.pomodoro.sessions if s.id != session_id
            )
            return replace(state, pomodoro=replace(state.pomodoro, sessions=sessions))
        case ClearUserData():
            return replace(
                state,
                tasks=TasksState(
                    synced_with_database=state.tasks.synced_with_database
                ),
                habits=HabitsState(
                    synced_with_database=state.habits.synced_with_database
                ),
                pomodoro=PomodoroState(
                    synced_with_database=state.pomodoro.synced_with_database
                ),
            )
        case _:
            raise TypeError(f"Unknown action: {action!r}")
