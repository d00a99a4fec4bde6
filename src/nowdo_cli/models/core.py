"""Domain models for NowDo records.

Field names follow the backend column names so rows round-trip through
``model_validate`` / ``model_dump`` without a translation table. Where the
domain name differs from the column, a pydantic alias carries the column name.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

TaskCategory = Literal["work", "personal", "health", "education"]
TaskPriority = Literal["high", "medium", "low"]
TaskStatus = Literal["pending", "in-progress", "completed"]
SessionType = Literal["work", "break"]
ThemeMode = Literal["light", "dark", "system"]
Language = Literal["en", "es", "fr", "de", "it", "pt", "ja", "ko", "zh"]
SortOrder = Literal["asc", "desc"]

_Date = date


def _none_as_empty(v):
    # Nullable text columns read back as null on older rows
    return "" if v is None else v


class Record(BaseModel):
    """Base for rows read from the backend."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DateRange(BaseModel):
    """Inclusive date range used for the one inequality filter of a list."""

    start: date | datetime
    end: date | datetime

    @field_validator("end")
    @classmethod
    def end_not_before_start(cls, v, info):
        start = info.data.get("start")
        if start is not None and type(start) is type(v) and v < start:
            raise ValueError("date range end must not be before start")
        return v


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class Task(Record):
    """Task model representing a persisted task row.

    Attributes:
        id: Unique identifier
        user_id: Owner
        title: Task title
        description: Optional long description
        category: work, personal, health or education
        priority: high, medium or low
        status: pending, in-progress or completed
        start_date: When work on the task starts
        end_date: Deadline
        scheduled_date: Day the task is planned for
        scheduled_time: Time of day the task is planned for
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    id: str
    user_id: str | None = None
    title: str
    description: str = ""
    category: TaskCategory
    priority: TaskPriority
    status: TaskStatus = "pending"
    start_date: datetime | None = None
    end_date: datetime | None = None
    scheduled_date: date | None = None
    scheduled_time: time | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("description", mode="before")
    @classmethod
    def description_not_null(cls, v):
        return _none_as_empty(v)


class TaskCreate(BaseModel):
    """Model for creating a new task. The owner id is injected by the API."""

    title: str = Field(min_length=1)
    description: str = ""
    category: TaskCategory = "personal"
    priority: TaskPriority = "medium"
    status: TaskStatus = "pending"
    start_date: datetime
    end_date: datetime
    scheduled_date: date | None = None
    scheduled_time: time | None = None


class TaskUpdate(BaseModel):
    """Model for updating an existing task.

    All fields are optional - only provided fields will be updated.
    """

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category: TaskCategory | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    scheduled_date: date | None = None
    scheduled_time: time | None = None


class TaskFilters(BaseModel):
    """Filters for listing tasks.

    ``"all"`` for status, priority or category means no filter on that field.
    """

    status: TaskStatus | Literal["all"] | None = None
    priority: TaskPriority | Literal["all"] | None = None
    category: TaskCategory | Literal["all"] | None = None
    scheduled_date: date | None = None
    date_range: DateRange | None = None
    sort_by: str = "scheduled_time"
    sort_order: SortOrder = "asc"
    limit: int | None = Field(default=None, gt=0)
    offset: int | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------


def _normalize_target_days(v: list[int] | None) -> list[int] | None:
    if v is None:
        return v
    days = sorted(set(v))
    if any(d < 1 or d > 7 for d in days):
        raise ValueError("target days must be weekday indices between 1 and 7")
    return days


class Habit(Record):
    """Habit model representing a persisted habit row."""

    id: str
    user_id: str | None = None
    title: str
    description: str = ""
    category: str = "Health"
    color: str = "#4FC3F7"
    target_days: list[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5, 6, 7])
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("description", mode="before")
    @classmethod
    def description_not_null(cls, v):
        return _none_as_empty(v)

    @field_validator("target_days")
    @classmethod
    def normalize_target_days(cls, v):
        return _normalize_target_days(v)


class HabitCreate(BaseModel):
    """Model for creating a new habit."""

    title: str = Field(min_length=1)
    description: str = ""
    category: str = "Health"
    color: str = "#4FC3F7"
    target_days: list[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5, 6, 7])

    @field_validator("target_days")
    @classmethod
    def normalize_target_days(cls, v):
        return _normalize_target_days(v)


class HabitUpdate(BaseModel):
    """Model for updating an existing habit. Only provided fields change."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category: str | None = None
    color: str | None = None
    target_days: list[int] | None = None

    @field_validator("target_days")
    @classmethod
    def normalize_target_days(cls, v):
        return _normalize_target_days(v)


class HabitCompletion(Record):
    """Completion flag of one habit on one day."""

    id: str
    user_id: str | None = None
    habit_id: str
    date: _Date = Field(alias="completion_date")
    completed: bool = True


# ---------------------------------------------------------------------------
# Pomodoro
# ---------------------------------------------------------------------------


class PomodoroSession(Record):
    """A recorded pomodoro work or break session."""

    id: str
    user_id: str | None = None
    task_id: str | None = None
    type: SessionType = Field(alias="session_type")
    duration: int = Field(gt=0)
    start_time: datetime
    end_time: datetime | None = None
    completed: bool = False


class PomodoroSessionCreate(BaseModel):
    """Model for recording a pomodoro session."""

    model_config = ConfigDict(populate_by_name=True)

    task_id: str | None = None
    type: SessionType = Field(default="work", alias="session_type")
    duration: int = Field(gt=0)
    start_time: datetime
    end_time: datetime | None = None
    completed: bool = False


class PomodoroSessionUpdate(BaseModel):
    """Only the end time and completion flag of a session can change."""

    end_time: datetime | None = None
    completed: bool | None = None


# ---------------------------------------------------------------------------
# Singleton-per-user records
# ---------------------------------------------------------------------------


class UserPreferences(Record):
    """Per-user app preferences (one row per user)."""

    id: str | None = None
    user_id: str
    theme: ThemeMode = "system"
    notifications_enabled: bool = True
    work_duration: int = 25
    short_break_duration: int = 5
    long_break_duration: int = 15
    sessions_until_long_break: int = 4
    first_launch: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserPreferencesUpdate(BaseModel):
    theme: ThemeMode | None = None
    notifications_enabled: bool | None = None
    work_duration: int | None = Field(default=None, gt=0)
    short_break_duration: int | None = Field(default=None, gt=0)
    long_break_duration: int | None = Field(default=None, gt=0)
    sessions_until_long_break: int | None = Field(default=None, gt=0)
    first_launch: bool | None = None


class UserProfile(Record):
    """Per-user profile (one row per user)."""

    id: str | None = None
    user_id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    profile_picture_url: str | None = None
    phone_number: str | None = None
    date_of_birth: date | None = None
    location: str | None = None
    profession: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or (self.email or "")


class UserProfileUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    profile_picture_url: str | None = None
    phone_number: str | None = None
    date_of_birth: date | None = None
    location: str | None = None
    profession: str | None = None


class UserSettings(Record):
    """Per-user settings (one row per user)."""

    id: str | None = None
    user_id: str
    theme_preference: ThemeMode = "dark"
    notifications_enabled: bool = True
    email_notifications: bool = True
    push_notifications: bool = True
    language: Language = "en"
    privacy_analytics: bool = True
    privacy_crash_reports: bool = True
    auto_backup: bool = True
    sound_effects: bool = True
    haptic_feedback: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserSettingsUpdate(BaseModel):
    theme_preference: ThemeMode | None = None
    notifications_enabled: bool | None = None
    email_notifications: bool | None = None
    push_notifications: bool | None = None
    language: Language | None = None
    privacy_analytics: bool | None = None
    privacy_crash_reports: bool | None = None
    auto_backup: bool | None = None
    sound_effects: bool | None = None
    haptic_feedback: bool | None = None


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class AuthUser(Record):
    """The authenticated user as reported by the auth backend."""

    id: str
    email: str | None = None
    user_metadata: dict = Field(default_factory=dict)

    @property
    def full_name(self) -> str | None:
        return self.user_metadata.get("full_name")


class AuthSession(Record):
    """Tokens of a signed-in session."""

    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None
    token_type: str = "bearer"
    user: AuthUser | None = None
