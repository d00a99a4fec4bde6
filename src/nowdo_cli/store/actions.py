"""Store actions.

Each action is a frozen dataclass; the reducer matches on the class. Load
actions replace a whole slice with rows fetched from the backend, the others
apply the persisted result of a single write.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from nowdo_cli.models.core import (
    Habit,
    HabitCompletion,
    PomodoroSession,
    Task,
    ThemeMode,
)
from nowdo_cli.store.state import ColorScheme


@dataclass(frozen=True)
class LoadTasks:
    tasks: tuple[Task, ...]


@dataclass(frozen=True)
class LoadHabits:
    """Replace habits and their completions together."""

    habits: tuple[Habit, ...]
    completions: tuple[HabitCompletion, ...] = ()


@dataclass(frozen=True)
class LoadHabitCompletions:
    completions: tuple[HabitCompletion, ...]


@dataclass(frozen=True)
class LoadPomodoroSessions:
    sessions: tuple[PomodoroSession, ...]


@dataclass(frozen=True)
class SetThemeMode:
    mode: ThemeMode


@dataclass(frozen=True)
class SetSystemScheme:
    scheme: ColorScheme | None


@dataclass(frozen=True)
class UpsertTask:
    task: Task


@dataclass(frozen=True)
class PatchTask:
    task_id: str
    patch: Mapping[str, Any]


@dataclass(frozen=True)
class RemoveTask:
    task_id: str


@dataclass(frozen=True)
class UpsertHabit:
    habit: Habit


@dataclass(frozen=True)
class RemoveHabit:
    habit_id: str


@dataclass(frozen=True)
class UpsertHabitCompletion:
    completion: HabitCompletion


@dataclass(frozen=True)
class UpsertPomodoroSession:
    session: PomodoroSession


@dataclass(frozen=True)
class RemovePomodoroSession:
    session_id: str


@dataclass(frozen=True)
class ClearUserData:
    """Drop every user-owned entry, e.g. after a server-side wipe."""


Action = (
    LoadTasks
    | LoadHabits
    | LoadHabitCompletions
    | LoadPomodoroSessions
    | SetThemeMode
    | SetSystemScheme
    | UpsertTask
    | PatchTask
    | RemoveTask
    | UpsertHabit
    | RemoveHabit
    | UpsertHabitCompletion
    | UpsertPomodoroSession
    | RemovePomodoroSession
    | ClearUserData
)
