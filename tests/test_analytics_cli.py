# ABOUTME: Verifies the analytics report CLI exposes and runs each of its commands.
# ABOUTME: Runs the Typer app against small JSON record dumps.

import json

import pandas as pd
from typer.testing import CliRunner

from scripts import analytics_report


def test_cli_has_report_commands():
    app = analytics_report.app
    command_names = {cmd.name or cmd.callback.__name__ for cmd in app.registered_commands}
    assert {"student", "digest", "class-metrics", "interventions"} <= command_names


def test_digest_command_emits_json(tmp_path):
    records = tmp_path / "activities.json"
    records.write_text(
        json.dumps(
            [
                {
                    "student_id": "s1",
                    "activity_type": "assignment_submitted",
                    "timestamp": "2026-03-10T09:00:00",
                    "metadata": {"grade": 92, "subject": "Math"},
                },
                {"student_id": "s1", "activity_type": "session_active", "timestamp": "2026-03-09T09:00:00"},
            ]
        ),
        encoding="utf-8",
    )

    result = CliRunner().invoke(
        analytics_report.app,
        ["digest", "--student-id", "s1", "--records", str(records), "--now", "2026-03-10T18:00:00", "--json"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["summary"]["streak"] == 2
    assert payload["summary"]["average_grade"] == 92


def _write(path, rows):
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


RUBRIC_ASSIGNMENT = {
    "id": "a1",
    "title": "Fractions quiz",
    "points": 100,
    "subject": "Math",
    "topic": "Fractions",
    "rubric": {
        "criteria": [
            {
                "id": 1,
                "name": "Accuracy",
                "weight": 100,
                "levels": [{"name": "Excellent", "points": 100}, {"name": "Developing", "points": 50}],
            }
        ]
    },
}


def _rubric_only_submission(graded_at):
    return {
        "assignment_id": "a1",
        "student_id": "s1",
        "grade": None,
        "rubric_scores": {"1": 50},
        "status": "graded",
        "graded_at": graded_at,
    }


def test_student_command_renders_metrics_and_gaps(tmp_path):
    records = _write(
        tmp_path / "activities.json",
        [
            {
                "student_id": "s1",
                "activity_type": "assignment_submitted",
                "timestamp": "2026-03-10T09:00:00",
                "metadata": {"grade": 50, "subject": "Math", "topic": "Fractions"},
            },
            {"student_id": "s1", "activity_type": "session_active", "timestamp": "2026-03-09T09:00:00"},
            {"student_id": "s2", "activity_type": "session_active", "timestamp": "2026-03-10T09:00:00"},
        ],
    )

    result = CliRunner().invoke(
        analytics_report.app,
        ["student", "--student-id", "s1", "--records", str(records), "--now", "2026-03-10T18:00:00"],
    )

    assert result.exit_code == 0, result.output
    assert "2 day(s)" in result.output
    assert "Learning gaps" in result.output
    assert "Fractions" in result.output


def test_class_metrics_command_scores_rubric_only_submissions(tmp_path):
    roster = _write(
        tmp_path / "roster.json",
        [{"student_id": "s1", "name": "Ada", "messages_sent": 4, "active_minutes": 90, "subjects": ["Math"]}],
    )
    assignments = _write(tmp_path / "assignments.json", [RUBRIC_ASSIGNMENT])
    submissions = _write(tmp_path / "submissions.json", [_rubric_only_submission("2026-03-09T10:00:00")])

    result = CliRunner().invoke(
        analytics_report.app,
        [
            "class-metrics",
            "--roster",
            str(roster),
            "--assignments",
            str(assignments),
            "--submissions",
            str(submissions),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "confused about Math" in result.output
    assert "50" in result.output
    assert "no graded records" not in result.output


def test_interventions_command_flags_rubric_graded_student(tmp_path):
    assignments = _write(tmp_path / "assignments.json", [RUBRIC_ASSIGNMENT])
    submissions = _write(
        tmp_path / "submissions.json",
        [_rubric_only_submission("2026-03-08T10:00:00"), _rubric_only_submission("2026-03-09T10:00:00")],
    )
    output = tmp_path / "reports" / "alerts.csv"

    result = CliRunner().invoke(
        analytics_report.app,
        ["interventions", "--assignments", str(assignments), "--submissions", str(submissions), "--output", str(output)],
    )

    assert result.exit_code == 0, result.output
    assert "s1: low_performance (high)" in result.output
    report = pd.read_csv(output)
    assert report["student_id"].astype(str).tolist() == ["s1"]
    assert report["type"].tolist() == ["low_performance"]
