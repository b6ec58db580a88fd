# ABOUTME: Composes one student's dashboard metrics over a trailing activity window.
# ABOUTME: Combines streak, average grade, trend, subjects, and learning gaps.

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Iterable, List, Optional

from src.common.config import DEFAULT_CONFIG, AnalyticsConfig
from src.common.schemas import ASSIGNMENT_SUBMITTED, ActivityRecord, StudentMetrics

from .learning_gaps import analyze_learning_gaps
from .resources import ResourceLookup
from .streaks import calculate_streak, to_local_date
from .trends import analyze_trend, average_grade, top_subjects


def within_window(
    records: Iterable[ActivityRecord],
    now: datetime,
    days: int,
) -> List[ActivityRecord]:
    """Records with ``now - days <= timestamp <= now``, newest first."""

    start = now - timedelta(days=days)
    kept = [r for r in records if r.timestamp is not None and start <= _comparable(r.timestamp, now) <= now]
    return sorted(kept, key=lambda r: _comparable(r.timestamp, now), reverse=True)


def _comparable(timestamp: datetime, now: datetime) -> datetime:
    # Align naive/aware timestamps with the reference clock before comparing.
    if (timestamp.tzinfo is None) == (now.tzinfo is None):
        return timestamp
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=now.tzinfo)
    return timestamp.astimezone(now.tzinfo).replace(tzinfo=None)


def count_submissions(records: Iterable[ActivityRecord]) -> int:
    return sum(1 for r in records if r.activity_type == ASSIGNMENT_SUBMITTED)


def compute_student_metrics(
    records: Iterable[ActivityRecord],
    now: Optional[datetime] = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
    lookup: Optional[ResourceLookup] = None,
) -> StudentMetrics:
    now = now or config.now()
    tz: Optional[tzinfo] = config.tz
    history = list(records)
    recent = within_window(history, now, config.student_window_days)

    return StudentMetrics(
        # Streaks span the whole history, like the weekly digest.
        streak_days=calculate_streak(history, to_local_date(now, tz), tz),
        average_grade=average_grade(recent),
        performance_trend=analyze_trend(recent, tz),
        top_subjects=top_subjects(recent, config.top_subject_limit),
        learning_gaps=analyze_learning_gaps(recent, lookup),
        total_activities=len(recent),
        assignments_completed=count_submissions(recent),
        recent_activities=tuple(recent[: config.recent_activity_limit]),
    )
