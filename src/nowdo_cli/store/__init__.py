"""Local state store for tasks, habits, pomodoro sessions and theme."""

from .actions import (
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
from .reducer import reduce
from .state import AppState, HabitsState, PomodoroState, TasksState, ThemeState
from .store import Store

__all__ = [
    "Action",
    "AppState",
    "ClearUserData",
    "HabitsState",
    "LoadHabitCompletions",
    "LoadHabits",
    "LoadPomodoroSessions",
    "LoadTasks",
    "PatchTask",
    "PomodoroState",
    "RemoveHabit",
    "RemovePomodoroSession",
    "RemoveTask",
    "SetSystemScheme",
    "SetThemeMode",
    "Store",
    "TasksState",
    "ThemeState",
    "UpsertHabit",
    "UpsertHabitCompletion",
    "UpsertPomodoroSession",
    "UpsertTask",
    "reduce",
]
