# ABOUTME: Classifies a student's recent performance direction from graded activity.
# ABOUTME: Also derives average grade and most-active subjects for student dashboards.

from __future__ import annotations

from collections import Counter
from datetime import tzinfo
from typing import Iterable, List, Optional, Sequence, Tuple

from src.common.schemas import (
    TREND_DECLINING,
    TREND_IMPROVING,
    TREND_NEUTRAL,
    TREND_STABLE,
    ActivityRecord,
    SubjectActivity,
)
from src.common.stats import round_half_up, safe_mean

from .streaks import to_local_naive


class TrendThresholds:
    BAND = 5.0
    RECENT_WINDOW = 3
    MIN_GRADES = 2


def classify_trend(grades: Sequence[float]) -> str:
    """
    Compare the mean of the last three grades against the overall mean.

    ``grades`` must be oldest first. The +/-5 point band is fixed so the same
    history always gets the same label.
    """

    if len(grades) < TrendThresholds.MIN_GRADES:
        return TREND_NEUTRAL

    overall_avg = sum(grades) / len(grades)
    recent = grades[-TrendThresholds.RECENT_WINDOW :]
    recent_avg = sum(recent) / len(recent)

    if recent_avg > overall_avg + TrendThresholds.BAND:
        return TREND_IMPROVING
    if recent_avg < overall_avg - TrendThresholds.BAND:
        return TREND_DECLINING
    return TREND_STABLE


def chronological_grades(records: Iterable[ActivityRecord], tz: Optional[tzinfo] = None) -> List[float]:
    graded = [r for r in records if r.grade is not None and r.timestamp is not None]
    graded.sort(key=lambda r: to_local_naive(r.timestamp, tz))
    return [r.grade for r in graded]


def analyze_trend(records: Iterable[ActivityRecord], tz: Optional[tzinfo] = None) -> str:
    return classify_trend(chronological_grades(records, tz))


def average_grade(records: Iterable[ActivityRecord]) -> Optional[int]:
    mean = safe_mean(r.grade for r in records if r.grade is not None)
    return None if mean is None else round_half_up(mean)


def top_subjects(records: Iterable[ActivityRecord], limit: int = 3) -> Tuple[SubjectActivity, ...]:
    # Counter.most_common keeps first-seen order among equal counts.
    counts = Counter(r.subject for r in records if r.subject)
    return tuple(SubjectActivity(subject=s, activities=n) for s, n in counts.most_common(limit))
