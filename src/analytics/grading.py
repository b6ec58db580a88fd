# ABOUTME: Computes rubric-weighted grades for individual submissions.
# ABOUTME: Normalizes by the weight actually scored so partially graded rubrics are not penalized.

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional

from src.common.schemas import AssignmentRecord, Criterion, CriterionId, Rubric, SubmissionRecord
from src.common.stats import clamp, round_half_up

logger = logging.getLogger(__name__)


def is_scorable(criterion: Criterion) -> bool:
    """A criterion contributes only when it has a positive weight and at least one level."""
    return criterion.weight > 0 and len(criterion.levels) > 0


def compute_rubric_grade(
    rubric: Optional[Rubric],
    rubric_scores: Mapping[CriterionId, float],
    max_points: float,
) -> Optional[int]:
    """
    Weighted rubric grade scaled to the assignment's maximum points.

    Each scored criterion adds ``points * weight / 100`` to the score and its
    weight to the denominator. Unscored and malformed criteria are left out of
    both. Returns None when nothing has been scored yet so the caller can fall
    back to a manually entered grade.
    """

    if rubric is None or not rubric.criteria or max_points is None or max_points <= 0:
        return None

    total_score = 0.0
    total_weight = 0.0
    for criterion in rubric.criteria:
        if not is_scorable(criterion):
            logger.warning(
                "Skipping malformed rubric criterion %s (weight=%s, levels=%d)",
                criterion.id,
                criterion.weight,
                len(criterion.levels),
            )
            continue
        points = rubric_scores.get(criterion.id)
        if points is None:
            continue
        total_score += float(points) * (criterion.weight / 100)
        total_weight += criterion.weight

    if total_weight <= 0:
        return None

    grade = round_half_up(total_score / total_weight * max_points)
    return int(clamp(grade, 0, max_points))


def resolve_grade(submission: SubmissionRecord, assignment: AssignmentRecord) -> Optional[float]:
    """Prefer the rubric-derived grade; otherwise keep whatever was entered by hand."""

    rubric_grade = compute_rubric_grade(assignment.rubric, submission.rubric_scores, assignment.points)
    if rubric_grade is not None:
        return rubric_grade
    return submission.grade


def grade_submission(
    submission: SubmissionRecord,
    assignments_by_id: Mapping[str, AssignmentRecord],
) -> Optional[float]:
    """Look up the submission's assignment and resolve its grade.

    The returned value is for the caller to persist; nothing is written here.
    """

    assignment = assignments_by_id.get(submission.assignment_id)
    if assignment is None:
        raise ValueError(
            f"Unknown assignment '{submission.assignment_id}' for submission by '{submission.student_id}'."
        )
    return resolve_grade(submission, assignment)


def apply_rubric_grades(
    submissions: Iterable[SubmissionRecord],
    assignments: Iterable[AssignmentRecord],
) -> List[SubmissionRecord]:
    """Copies of ``submissions`` carrying their resolved grade, ready for the performance frame."""

    by_id: Dict[str, AssignmentRecord] = {a.id: a for a in assignments}
    resolved: List[SubmissionRecord] = []
    for submission in submissions:
        try:
            grade = grade_submission(submission, by_id)
        except ValueError as exc:
            # Unknown assignments pass through untouched; the performance frame skips them.
            logger.debug("%s", exc)
            resolved.append(submission)
            continue
        resolved.append(replace(submission, grade=grade))
    return resolved
