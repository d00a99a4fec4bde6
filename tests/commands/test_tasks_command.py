"""CLI tests for the tasks command group."""

import json

from typer.testing import CliRunner

from nowdo_cli.main import app

runner = CliRunner()


def seed_task(backend, user_id, title, **fields):
    row = {
        "user_id": user_id,
        "title": title,
        "description": "",
        "category": "work",
        "priority": "medium",
        "status": "pending",
    }
    row.update(fields)
    return backend.insert("user_tasks", **row)


def test_add_task(cli_backend, signed_in):
    result = runner.invoke(
        app,
        [
            "tasks",
            "add",
            "Write report",
            "-p",
            "high",
            "-c",
            "work",
            "--start",
            "2025-06-02T09:00:00+00:00",
            "--date",
            "2025-06-02",
            "--time",
            "09:30",
        ],
    )

    assert result.exit_code == 0
    assert "Task created: Write report" in result.output
    [row] = cli_backend.tables["user_tasks"]
    assert row["user_id"] == signed_in.id
    assert row["priority"] == "high"
    assert row["scheduled_date"] == "2025-06-02"
    assert row["end_date"].startswith("2025-06-03T09:00:00")


def test_add_task_with_invalid_priority(cli_backend, signed_in):
    result = runner.invoke(app, ["tasks", "add", "Write", "-p", "urgent"])

    assert result.exit_code == 2
    assert cli_backend.requests_to("user_tasks") == []


def test_list_filters_and_json(cli_backend, signed_in, other_user):
    seed_task(cli_backend, signed_in.id, "Mine", priority="high")
    seed_task(cli_backend, signed_in.id, "Low one", priority="low")
    seed_task(cli_backend, other_user.id, "Theirs", priority="high")

    result = runner.invoke(app, ["tasks", "list", "--priority", "high", "-o", "json"])

    assert result.exit_code == 0
    assert [t["title"] for t in json.loads(result.output)] == ["Mine"]


def test_list_requires_both_range_ends(cli_backend, signed_in):
    result = runner.invoke(app, ["tasks", "list", "--from", "2025-06-01"])

    assert result.exit_code == 2
    assert "--from and --to" in result.output


def test_search(cli_backend, signed_in):
    seed_task(cli_backend, signed_in.id, "Groceries", description="milk, eggs")
    seed_task(cli_backend, signed_in.id, "Report")

    result = runner.invoke(app, ["tasks", "search", "milk", "-o", "quiet"])

    assert result.exit_code == 0
    assert len(result.output.split()) == 1


def test_update_sends_only_given_fields(cli_backend, signed_in):
    row = seed_task(cli_backend, signed_in.id, "Draft")

    result = runner.invoke(
        app, ["tasks", "update", row["id"], "--status", "completed"]
    )

    assert result.exit_code == 0
    assert "Task updated: Draft" in result.output
    [patch] = cli_backend.requests_to("user_tasks", "PATCH")
    assert json.loads(patch.content) == {"status": "completed"}


def test_update_without_fields(cli_backend, signed_in):
    row = seed_task(cli_backend, signed_in.id, "Draft")

    result = runner.invoke(app, ["tasks", "update", row["id"]])

    assert result.exit_code == 2
    assert cli_backend.requests_to("user_tasks", "PATCH") == []


def test_delete_with_yes(cli_backend, signed_in):
    row = seed_task(cli_backend, signed_in.id, "Old")

    result = runner.invoke(app, ["tasks", "delete", row["id"], "-y"])

    assert result.exit_code == 0
    assert cli_backend.tables["user_tasks"] == []


def test_delete_cancelled(cli_backend, signed_in):
    row = seed_task(cli_backend, signed_in.id, "Old")

    result = runner.invoke(app, ["tasks", "delete", row["id"]], input="n\n")

    assert result.exit_code == 0
    assert "Cancelled" in result.output
    assert len(cli_backend.tables["user_tasks"]) == 1


def test_backend_failure_exits_with_network_code(cli_backend, signed_in):
    cli_backend.fail("GET", "user_tasks")

    result = runner.invoke(app, ["tasks", "list"])

    assert result.exit_code == 4
    assert "Failed to fetch tasks" in result.output
