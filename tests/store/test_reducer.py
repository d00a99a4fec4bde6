"""Tests for the store reducer."""

from datetime import date

import pytest

from nowdo_cli.models.core import Habit, HabitCompletion, PomodoroSession, Task
from nowdo_cli.models.patch import Patch
from nowdo_cli.store import (
    AppState,
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
    Store,
    UpsertHabitCompletion,
    UpsertTask,
    reduce,
)


def task(task_id, **fields):
    data = {"id": task_id, "title": task_id, "category": "work", "priority": "low"}
    data.update(fields)
    return Task(**data)


def completion(completion_id, habit_id, day, completed=True):
    return HabitCompletion(
        id=completion_id, habit_id=habit_id, completion_date=day, completed=completed
    )


def session(session_id):
    return PomodoroSession(
        id=session_id,
        session_type="work",
        duration=25,
        start_time="2025-06-02T09:00:00+00:00",
    )


class TestLoads:
    def test_load_replaces_instead_of_merging(self):
        state = reduce(AppState(), LoadTasks((task("A"), task("B"))))

        state = reduce(state, LoadTasks((task("B", title="B2"), task("C"))))

        assert [t.id for t in state.tasks.tasks] == ["B", "C"]
        assert state.tasks.tasks[0].title == "B2"
        assert state.tasks.synced_with_database is True

    def test_load_habits_sets_habits_and_completions(self):
        habits = (Habit(id="h1", title="Stretch"),)
        completions = (completion("c1", "h1", date(2025, 6, 2)),)

        state = reduce(AppState(), LoadHabits(habits, completions))

        assert state.habits.habits == habits
        assert state.habits.completions == completions
        assert state.habits.synced_with_database is True

    def test_load_completions_keeps_habits(self):
        habits = (Habit(id="h1", title="Stretch"),)
        state = reduce(AppState(), LoadHabits(habits))

        state = reduce(
            state, LoadHabitCompletions((completion("c1", "h1", date(2025, 6, 2)),))
        )

        assert state.habits.habits == habits
        assert len(state.habits.completions) == 1

    def test_load_sessions(self):
        state = reduce(AppState(), LoadPomodoroSessions((session("s1"),)))

        assert [s.id for s in state.pomodoro.sessions] == ["s1"]
        assert state.pomodoro.synced_with_database is True


class TestWrites:
    def test_patch_changes_only_the_given_field(self):
        original = task("A", status="pending", description="notes")
        state = reduce(AppState(), LoadTasks((original, task("B"))))

        state = reduce(state, PatchTask("A", Patch(status="completed")))

        patched = state.tasks.tasks[0]
        assert patched.status == "completed"
        assert patched.model_dump(exclude={"status"}) == original.model_dump(
            exclude={"status"}
        )
        assert state.tasks.tasks[1] == task("B")

    def test_upsert_replaces_in_place_or_appends(self):
        state = reduce(AppState(), LoadTasks((task("A"), task("B"))))

        state = reduce(state, UpsertTask(task("A", title="A2")))
        state = reduce(state, UpsertTask(task("C")))

        assert [t.title for t in state.tasks.tasks] == ["A2", "B", "C"]

    def test_remove_task(self):
        state = reduce(AppState(), LoadTasks((task("A"), task("B"))))

        state = reduce(state, RemoveTask("A"))

        assert [t.id for t in state.tasks.tasks] == ["B"]

    def test_completion_upsert_matches_habit_and_day(self):
        day = date(2025, 6, 2)
        state = reduce(
            AppState(), LoadHabitCompletions((completion("c1", "h1", day),))
        )

        state = reduce(
            state, UpsertHabitCompletion(completion("c9", "h1", day, completed=False))
        )

        [only] = state.habits.completions
        assert only.completed is False

    def test_remove_habit_removes_its_completions(self):
        habits = (Habit(id="h1", title="A"), Habit(id="h2", title="B"))
        completions = (
            completion("c1", "h1", date(2025, 6, 2)),
            completion("c2", "h2", date(2025, 6, 2)),
        )
        state = reduce(AppState(), LoadHabits(habits, completions))

        state = reduce(state, RemoveHabit("h1"))

        assert [h.id for h in state.habits.habits] == ["h2"]
        assert [c.id for c in state.habits.completions] == ["c2"]

    def test_remove_session(self):
        state = reduce(
            AppState(), LoadPomodoroSessions((session("s1"), session("s2")))
        )

        state = reduce(state, RemovePomodoroSession("s1"))

        assert [s.id for s in state.pomodoro.sessions] == ["s2"]

    def test_clear_user_data_keeps_sync_flags_and_theme(self):
        state = reduce(AppState(), LoadTasks((task("A"),)))
        state = reduce(state, SetThemeMode("light"))

        state = reduce(state, ClearUserData())

        assert state.tasks.tasks == ()
        assert state.tasks.synced_with_database is True
        assert state.habits.synced_with_database is False
        assert state.theme.mode == "light"

    def test_unknown_action(self):
        with pytest.raises(TypeError, match="Unknown action"):
            reduce(AppState(), object())


class TestTheme:
    def test_theme_actions(self):
        state = reduce(AppState(), SetThemeMode("system"))
        assert state.theme.is_dark is False

        state = reduce(state, SetSystemScheme("dark"))
        assert state.theme.is_dark is True

        state = reduce(state, SetThemeMode("light"))
        assert state.theme.is_dark is False


class TestStore:
    def test_dispatch_notifies_listeners(self):
        store = Store()
        seen = []
        unsubscribe = store.subscribe(lambda state, action: seen.append(action))

        store.dispatch(SetThemeMode("dark"))
        unsubscribe()
        store.dispatch(SetThemeMode("light"))

        assert seen == [SetThemeMode("dark")]
        assert store.state.theme.mode == "light"

    def test_previous_state_is_not_mutated(self):
        store = Store()
        before = store.state

        store.dispatch(LoadTasks((task("A"),)))

        assert before.tasks.tasks == ()
        assert store.state is not before
