# ABOUTME: Tests rubric-weighted grade aggregation.
# ABOUTME: Covers full and partial scoring, sloppy weights, malformed criteria, and fallbacks.

import logging

import pytest

from src.analytics.grading import apply_rubric_grades, compute_rubric_grade, grade_submission, resolve_grade
from src.common.schemas import AssignmentRecord, Criterion, Rubric, RubricLevel, SubmissionRecord

LEVELS = (
    RubricLevel("Excellent", 100),
    RubricLevel("Good", 75),
    RubricLevel("Satisfactory", 50),
    RubricLevel("Needs Improvement", 25),
)


def _rubric(*weights):
    return Rubric(criteria=tuple(Criterion(id=f"c{i}", name=f"C{i}", weight=w, levels=LEVELS) for i, w in enumerate(weights, 1)))


def test_full_rubric_matches_weighted_average():
    rubric = _rubric(25, 25, 25, 25)
    scores = {"c1": 100, "c2": 80, "c3": 60, "c4": 40}
    assert compute_rubric_grade(rubric, scores, max_points=100) == 70

    rubric = _rubric(40, 30, 20, 10)
    scores = {"c1": 90, "c2": 80, "c3": 70, "c4": 60}
    # (90*.4 + 80*.3 + 70*.2 + 60*.1) / 100 * 50
    assert compute_rubric_grade(rubric, scores, max_points=50) == 40


def test_rounds_half_up():
    rubric = _rubric(100)
    assert compute_rubric_grade(rubric, {"c1": 25}, max_points=10) == 3


def test_partial_scoring_normalizes_over_scored_weight():
    rubric = _rubric(25, 25, 25, 25)
    grade = compute_rubric_grade(rubric, {"c1": 80, "c2": 60}, max_points=100)
    assert grade == 70


def test_weights_not_summing_to_100_are_normalized():
    rubric = _rubric(30, 30)
    assert compute_rubric_grade(rubric, {"c1": 100, "c2": 100}, max_points=20) == 20


def test_malformed_criteria_are_excluded(caplog):
    rubric = Rubric(
        criteria=(
            Criterion(id="ok", name="OK", weight=50, levels=LEVELS),
            Criterion(id="no_levels", name="Empty", weight=50, levels=()),
            Criterion(id="zero", name="Zero", weight=0, levels=LEVELS),
        )
    )
    scores = {"ok": 100, "no_levels": 0, "zero": 0}
    with caplog.at_level(logging.WARNING, logger="src.analytics.grading"):
        assert compute_rubric_grade(rubric, scores, max_points=100) == 100

    skipped = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert len(skipped) == 2
    assert any("no_levels" in message for message in skipped)
    assert any("zero" in message for message in skipped)


def test_no_scores_returns_none():
    assert compute_rubric_grade(_rubric(50, 50), {}, max_points=100) is None
    assert compute_rubric_grade(None, {"c1": 50}, max_points=100) is None
    assert compute_rubric_grade(_rubric(100), {"c1": 50}, max_points=0) is None


def test_grade_is_clamped_to_max_points():
    assert compute_rubric_grade(_rubric(100), {"c1": 150}, max_points=100) == 100
    assert compute_rubric_grade(_rubric(100), {"c1": -20}, max_points=100) == 0


def test_resolve_grade_falls_back_to_manual_grade():
    assignment = AssignmentRecord(id="a1", title="Essay", points=100, rubric=_rubric(50, 50))
    manual = SubmissionRecord(assignment_id="a1", student_id="s1", grade=88)
    assert resolve_grade(manual, assignment) == 88

    scored = SubmissionRecord(assignment_id="a1", student_id="s1", grade=88, rubric_scores={"c1": 50})
    assert resolve_grade(scored, assignment) == 50


def test_grade_submission_rejects_unknown_assignment():
    submission = SubmissionRecord(assignment_id="missing", student_id="s1", grade=10)
    with pytest.raises(ValueError):
        grade_submission(submission, {})


def test_apply_rubric_grades_fills_rubric_only_submissions():
    assignments = [AssignmentRecord(id="a1", title="Essay", points=50, rubric=_rubric(100))]
    submissions = [
        SubmissionRecord(assignment_id="a1", student_id="s1", rubric_scores={"c1": 80}),
        SubmissionRecord(assignment_id="a1", student_id="s2", grade=30),
        SubmissionRecord(assignment_id="missing", student_id="s3", grade=12),
    ]
    resolved = apply_rubric_grades(submissions, assignments)
    assert [s.grade for s in resolved] == [40, 30, 12]
    assert resolved[2] is submissions[2]
