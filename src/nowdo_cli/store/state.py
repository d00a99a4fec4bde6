"""Immutable application state held by the store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from nowdo_cli.models.core import (
    Habit,
    HabitCompletion,
    PomodoroSession,
    Task,
    ThemeMode,
)

ColorScheme = Literal["light", "dark"]


@dataclass(frozen=True)
class TasksState:
    tasks: tuple[Task, ...] = ()
    synced_with_database: bool = False


@dataclass(frozen=True)
class HabitsState:
    habits: tuple[Habit, ...] = ()
    completions: tuple[HabitCompletion, ...] = ()
    synced_with_database: bool = False


@dataclass(frozen=True)
class PomodoroState:
    sessions: tuple[PomodoroSession, ...] = ()
    synced_with_database: bool = False


@dataclass(frozen=True)
class ThemeState:
    mode: ThemeMode = "system"
    system_scheme: ColorScheme | None = None

    @property
    def is_dark(self) -> bool:
        """Dark when chosen explicitly, or when following a dark OS scheme."""
        if self.mode == "system":
            return self.system_scheme == "dark"
        return self.mode == "dark"


@dataclass(frozen=True)
class AppState:
    tasks: TasksState = field(default_factory=TasksState)
    habits: HabitsState = field(default_factory=HabitsState)
    pomodoro: PomodoroState = field(default_factory=PomodoroState)
    theme: ThemeState = field(default_factory=ThemeState)
