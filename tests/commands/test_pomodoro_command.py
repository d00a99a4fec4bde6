"""CLI tests for the pomodoro command group."""

import json

from typer.testing import CliRunner

from nowdo_cli.main import app

runner = CliRunner()


def seed_session(backend, user_id, start_time, **fields):
    row = {
        "user_id": user_id,
        "session_type": "work",
        "duration": 25,
        "start_time": start_time,
        "completed": True,
    }
    row.update(fields)
    return backend.insert("user_pomodoro_sessions", **row)


def test_log_completed_session(cli_backend, signed_in):
    result = runner.invoke(
        app,
        ["pomodoro", "log", "-m", "50", "--start", "2025-06-02T09:00:00+00:00"],
    )

    assert result.exit_code == 0
    assert "Logged 50 min work session" in result.output
    [row] = cli_backend.tables["user_pomodoro_sessions"]
    assert row["session_type"] == "work"
    assert row["completed"] is True
    assert row["end_time"].startswith("2025-06-02T09:50:00")


def test_log_running_break(cli_backend, signed_in):
    result = runner.invoke(
        app, ["pomodoro", "log", "-t", "break", "-m", "5", "--running"]
    )

    assert result.exit_code == 0
    [row] = cli_backend.tables["user_pomodoro_sessions"]
    assert row["session_type"] == "break"
    assert row["completed"] is False
    assert row.get("end_time") is None


def test_log_rejects_zero_duration(cli_backend, signed_in):
    result = runner.invoke(app, ["pomodoro", "log", "-m", "0"])

    assert result.exit_code == 2
    assert cli_backend.tables["user_pomodoro_sessions"] == []


def test_list_most_recent_first(cli_backend, signed_in):
    seed_session(cli_backend, signed_in.id, "2025-06-01T09:00:00+00:00")
    seed_session(cli_backend, signed_in.id, "2025-06-02T09:00:00+00:00", duration=50)

    result = runner.invoke(app, ["pomodoro", "list", "--limit", "1", "-o", "json"])

    assert result.exit_code == 0
    [session] = json.loads(result.output)
    assert session["duration"] == 50


def test_complete_running_session(cli_backend, signed_in):
    row = seed_session(
        cli_backend, signed_in.id, "2025-06-02T09:00:00+00:00", completed=False
    )

    result = runner.invoke(app, ["pomodoro", "complete", row["id"]])

    assert result.exit_code == 0
    assert row["completed"] is True
    assert row["end_time"] is not None


def test_delete_session(cli_backend, signed_in):
    row = seed_session(cli_backend, signed_in.id, "2025-06-02T09:00:00+00:00")

    result = runner.invoke(app, ["pomodoro", "delete", row["id"]])

    assert result.exit_code == 0
    assert "Session deleted" in result.output
    assert cli_backend.tables["user_pomodoro_sessions"] == []
