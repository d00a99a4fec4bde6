"""NowDo domain models.

Pydantic models for the records the client reads and writes, the
configuration file, the exception hierarchy and partial-update patches.
"""

from .config_models import AppConfig, Platform
from .core import (
    AuthSession,
    AuthUser,
    DateRange,
    Habit,
    HabitCompletion,
    HabitCreate,
    HabitUpdate,
    PomodoroSession,
    PomodoroSessionCreate,
    PomodoroSessionUpdate,
    Task,
    TaskCreate,
    TaskFilters,
    TaskUpdate,
    UserPreferences,
    UserPreferencesUpdate,
    UserProfile,
    UserProfileUpdate,
    UserSettings,
    UserSettingsUpdate,
)
from .exceptions import AuthError, NotAuthenticatedError, NowDoError, RemoteError
from .patch import Patch, merge

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskFilters",
    "DateRange",
    # Habit models
    "Habit",
    "HabitCreate",
    "HabitUpdate",
    "HabitCompletion",
    # Pomodoro models
    "PomodoroSession",
    "PomodoroSessionCreate",
    "PomodoroSessionUpdate",
    # Per-user records
    "UserPreferences",
    "UserPreferencesUpdate",
    "UserProfile",
    "UserProfileUpdate",
    "UserSettings",
    "UserSettingsUpdate",
    # Auth
    "AuthUser",
    "AuthSession",
    # Config
    "AppConfig",
    "Platform",
    # Errors
    "NowDoError",
    "RemoteError",
    "AuthError",
    "NotAuthenticatedError",
    # Patches
    "Patch",
    "merge",
]
