# ABOUTME: Tests intervention detection over per-student percentage histories.
# ABOUTME: Ensures rule priority, single alert per student, and report shape.

from datetime import datetime, timedelta

from src.analytics.interventions import (
    ALERT_COLUMNS,
    INTERVENTION_RULES,
    detect_class_interventions,
    detect_interventions,
    evaluate_student,
    generate_intervention_report,
)
from src.analytics.performance import build_performance_frame
from src.common.schemas import AssignmentRecord, InterventionAlert, SubmissionRecord


def test_low_performance_wins_over_declining():
    alerts = detect_interventions({"s1": [70, 60, 50, 40]})
    assert len(alerts) == 1
    assert alerts[0].type == "low_performance"
    assert alerts[0].severity == "high"
    assert alerts[0].avg_grade == 55
    assert alerts[0].recent_avg is None


def test_declining_performance_carries_recent_average():
    alert = evaluate_student("s2", [95, 95, 95, 95, 95, 60, 60, 60])
    assert isinstance(alert, InterventionAlert)
    assert alert.type == "declining_performance"
    assert alert.severity == "medium"
    assert alert.recent_avg == 60


def test_negative_trend_requires_strict_decrease():
    assert evaluate_student("s3", [80, 78, 76]).type == "negative_trend"
    assert evaluate_student("s3", [80, 78, 78]) is None
    assert evaluate_student("s3", [90, 80]) is None


def test_no_grades_means_no_alert():
    assert evaluate_student("s4", []) is None
    assert detect_interventions({}) == []


def test_rules_are_ordered_by_priority():
    assert [r.type for r in INTERVENTION_RULES] == [
        "low_performance",
        "declining_performance",
        "negative_trend",
    ]


def _mk_class():
    assignments = [AssignmentRecord(id=f"a{i}", title=f"Quiz {i}", points=50, topic="Fractions") for i in range(3)]
    start = datetime(2026, 2, 1)
    submissions = []
    for i, (good, weak) in enumerate([(45, 35), (46, 30), (47, 20)]):
        graded_at = start + timedelta(days=i)
        submissions.append(SubmissionRecord(assignment_id=f"a{i}", student_id="good", grade=good, graded_at=graded_at))
        submissions.append(SubmissionRecord(assignment_id=f"a{i}", student_id="weak", grade=weak, graded_at=graded_at))
    return assignments, submissions


def test_detect_class_interventions_from_submissions():
    assignments, submissions = _mk_class()
    alerts = detect_class_interventions(build_performance_frame(assignments, submissions))
    # weak: 70%, 60%, 40% -> avg 56.7 -> low_performance
    assert [(a.student_id, a.type) for a in alerts] == [("weak", "low_performance")]


def test_generate_intervention_report_columns():
    assignments, submissions = _mk_class()
    report = generate_intervention_report(build_performance_frame(assignments, submissions))
    assert list(report.columns) == ALERT_COLUMNS
    assert report.iloc[0]["student_id"] == "weak"

    empty = generate_intervention_report(build_performance_frame([], []))
    assert empty.empty
    assert list(empty.columns) == ALERT_COLUMNS
