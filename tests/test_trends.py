# ABOUTME: Tests performance trend classification and grade/subject summaries.
# ABOUTME: Checks the fixed five-point band and first-seen tie-breaks.

from datetime import datetime, timedelta, timezone

from src.analytics.trends import (
    analyze_trend,
    average_grade,
    chronological_grades,
    classify_trend,
    top_subjects,
)
from src.common.schemas import ActivityRecord


def _graded(day: int, grade=None, subject=None):
    metadata = {}
    if grade is not None:
        metadata["grade"] = grade
    if subject is not None:
        metadata["subject"] = subject
    return ActivityRecord(
        student_id="s1",
        activity_type="assignment_submitted",
        timestamp=datetime(2026, 3, 1) + timedelta(days=day),
        metadata=metadata,
    )


def test_classify_trend_examples():
    assert classify_trend([60, 60, 60, 90, 90, 90]) == "improving"
    assert classify_trend([90, 90, 90, 60, 60, 60]) == "declining"
    assert classify_trend([75, 74, 76, 75]) == "stable"
    assert classify_trend([80]) == "neutral"
    assert classify_trend([]) == "neutral"


def test_classify_trend_band_is_exclusive():
    # overall 70, recent (75 + 75 + 75) / 3 = 75 -> exactly +5 stays stable
    assert classify_trend([55, 75, 75, 75]) == "stable"


def test_analyze_trend_orders_by_timestamp():
    records = [_graded(5, 60), _graded(4, 60), _graded(3, 60), _graded(2, 90), _graded(1, 90), _graded(0, 90)]
    assert analyze_trend(records) == "declining"


def test_average_grade_rounds_half_up_and_ignores_ungraded():
    records = [_graded(0, 70), _graded(1, 85), _graded(2)]
    assert average_grade(records) == 78
    assert average_grade([_graded(0)]) is None


def test_zero_grade_counts_as_graded():
    assert average_grade([_graded(0, 0), _graded(1, 100)]) == 50


def test_top_subjects_ties_keep_first_seen_order():
    records = [
        _graded(0, subject="Science"),
        _graded(1, subject="Math"),
        _graded(2, subject="Math"),
        _graded(3, subject="Science"),
        _graded(4, subject="English"),
        _graded(5, subject="History"),
    ]
    top = top_subjects(records, limit=3)
    assert [(t.subject, t.activities) for t in top] == [("Science", 2), ("Math", 2), ("English", 1)]


def test_chronological_grades_orders_naive_and_aware_timestamps():
    records = [
        ActivityRecord("s1", "assignment_submitted", datetime(2026, 3, 2, 0, 0), metadata={"grade": 60}),
        ActivityRecord(
            "s1",
            "assignment_submitted",
            datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
            metadata={"grade": 90},
        ),
    ]
    assert chronological_grades(records, timezone.utc) == [90.0, 60.0]


def test_non_finite_grades_are_treated_as_ungraded():
    records = [_graded(0, float("nan")), _graded(1, "nan"), _graded(2, float("inf")), _graded(3, 80)]
    assert [r.grade for r in records] == [None, None, None, 80.0]
    assert average_grade(records) == 80
    assert average_grade(records[:3]) is None
