# ABOUTME: Turns graded submissions into per-assignment percentage rows.
# ABOUTME: Aggregates those rows into per-topic and per-subject class mastery summaries.

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Mapping

import pandas as pd

from src.common.schemas import AssignmentRecord, SubmissionRecord

logger = logging.getLogger(__name__)

PERFORMANCE_COLUMNS = [
    "student_id",
    "assignment_id",
    "assignment",
    "topic",
    "subject",
    "grade",
    "max_grade",
    "percentage",
    "timestamp",
]
MASTERY_COLUMNS = ["key", "mean_percentage", "student_count", "graded_count"]


def build_performance_frame(
    assignments: Iterable[AssignmentRecord],
    submissions: Iterable[SubmissionRecord],
) -> pd.DataFrame:
    """
    Build one row per graded submission with its percentage of max points.

    Rows are ordered chronologically per student (graded_at, falling back to
    submitted_at) so downstream "recent" windows see the latest work last.
    """

    by_id: Mapping[str, AssignmentRecord] = {a.id: a for a in assignments}
    rows: List[Dict] = []
    for submission in submissions:
        if submission.grade is None or not math.isfinite(float(submission.grade)):
            continue
        assignment = by_id.get(submission.assignment_id)
        if assignment is None:
            logger.warning("Skipping submission for unknown assignment %s", submission.assignment_id)
            continue
        if not assignment.points or assignment.points <= 0:
            logger.warning("Skipping assignment %s with non-positive points", assignment.id)
            continue
        rows.append(
            {
                "student_id": submission.student_id,
                "assignment_id": assignment.id,
                "assignment": assignment.title,
                "topic": assignment.topic or "General",
                "subject": assignment.subject,
                "grade": float(submission.grade),
                "max_grade": float(assignment.points),
                "percentage": float(submission.grade) / float(assignment.points) * 100,
                "timestamp": submission.graded_at or submission.submitted_at,
            }
        )

    if not rows:
        return pd.DataFrame(columns=PERFORMANCE_COLUMNS)

    frame = pd.DataFrame(rows, columns=PERFORMANCE_COLUMNS)
    frame["timestamp"] = pd.to_datetime(frame["timestamp"], utc=True, errors="coerce")
    # Stable sort keeps input order for equal or missing timestamps.
    frame = frame.sort_values(["student_id", "timestamp"], kind="mergesort", na_position="first")
    return frame.reset_index(drop=True)


def aggregate_topic_mastery(performance: pd.DataFrame, by: str = "topic") -> pd.DataFrame:
    """Mean percentage, distinct students and graded rows per topic (or subject)."""

    if by not in ("topic", "subject"):
        raise ValueError(f"Unsupported grouping '{by}'. Expected 'topic' or 'subject'.")
    if performance is None or performance.empty:
        return pd.DataFrame(columns=MASTERY_COLUMNS)

    scoped = performance.dropna(subset=[by])
    if scoped.empty:
        return pd.DataFrame(columns=MASTERY_COLUMNS)

    grouped = (
        scoped.groupby(by, sort=False)
        .agg(
            mean_percentage=("percentage", "mean"),
            student_count=("student_id", "nunique"),
            graded_count=("percentage", "count"),
        )
        .reset_index()
        .rename(columns={by: "key"})
    )
    return grouped[MASTERY_COLUMNS]


def subject_scores(performance: pd.DataFrame) -> Dict[str, float]:
    """Class-average mastery per subject, falling back to topic when no subject is tagged."""

    if performance is None or performance.empty:
        return {}
    scoped = performance.copy()
    scoped["subject"] = scoped["subject"].fillna(scoped["topic"])
    mastery = aggregate_topic_mastery(scoped, by="subject")
    return {str(row["key"]): float(row["mean_percentage"]) for _, row in mastery.iterrows()}


def percentages_by_student(performance: pd.DataFrame) -> Dict[str, List[float]]:
    if performance is None or performance.empty:
        return {}
    return {
        str(student_id): group["percentage"].astype(float).tolist()
        for student_id, group in performance.groupby("student_id", sort=False)
    }
