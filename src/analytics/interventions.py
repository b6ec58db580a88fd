# ABOUTME: Flags students needing attention from their graded percentage history.
# ABOUTME: Applies an ordered rule list where the first matching rule produces the only alert.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from src.common.schemas import InterventionAlert

from .performance import percentages_by_student

logger = logging.getLogger(__name__)

LOW_PERFORMANCE = "low_performance"
DECLINING_PERFORMANCE = "declining_performance"
NEGATIVE_TREND = "negative_trend"

ALERT_COLUMNS = ["student_id", "type", "severity", "message", "avg_grade", "recent_avg"]


class InterventionThresholds:
    LOW_AVERAGE = 60.0
    DECLINE_MARGIN = 15.0
    RECENT_WINDOW = 3


@dataclass(frozen=True)
class GradeStats:
    grades: Sequence[float]
    avg_grade: float
    recent_avg: float


@dataclass(frozen=True)
class InterventionRule:
    type: str
    severity: str
    message: str
    matches: Callable[[GradeStats], bool]
    include_recent: bool = False


def _is_low(stats: GradeStats) -> bool:
    return stats.avg_grade < InterventionThresholds.LOW_AVERAGE


def _is_declining(stats: GradeStats) -> bool:
    return stats.recent_avg < stats.avg_grade - InterventionThresholds.DECLINE_MARGIN


def _is_strictly_decreasing(stats: GradeStats) -> bool:
    window = InterventionThresholds.RECENT_WINDOW
    if len(stats.grades) < window:
        return False
    recent = np.asarray(stats.grades[-window:], dtype=float)
    return bool(np.all(np.diff(recent) < 0))


# Order matters: evaluation stops at the first match.
INTERVENTION_RULES: Sequence[InterventionRule] = (
    InterventionRule(
        type=LOW_PERFORMANCE,
        severity="high",
        message="Student is consistently performing below 60%",
        matches=_is_low,
    ),
    InterventionRule(
        type=DECLINING_PERFORMANCE,
        severity="medium",
        message="Recent performance has declined significantly",
        matches=_is_declining,
        include_recent=True,
    ),
    InterventionRule(
        type=NEGATIVE_TREND,
        severity="medium",
        message="Grades show a consistent declining trend",
        matches=_is_strictly_decreasing,
    ),
)


def grade_stats(grades: Sequence[float]) -> Optional[GradeStats]:
    if not grades:
        return None
    values = [float(g) for g in grades]
    recent = values[-InterventionThresholds.RECENT_WINDOW :]
    return GradeStats(
        grades=values,
        avg_grade=sum(values) / len(values),
        recent_avg=sum(recent) / len(recent),
    )


def evaluate_student(student_id: str, percentages: Sequence[float]) -> Optional[InterventionAlert]:
    """Return the alert for the first rule that matches, or None."""

    stats = grade_stats(percentages)
    if stats is None:
        return None

    for rule in INTERVENTION_RULES:
        if rule.matches(stats):
            return InterventionAlert(
                student_id=student_id,
                type=rule.type,
                severity=rule.severity,
                message=rule.message,
                avg_grade=stats.avg_grade,
                recent_avg=stats.recent_avg if rule.include_recent else None,
            )
    return None


def detect_interventions(percentages: Mapping[str, Sequence[float]]) -> List[InterventionAlert]:
    """Evaluate every student independently; at most one alert each."""

    alerts: List[InterventionAlert] = []
    for student_id, grades in percentages.items():
        alert = evaluate_student(student_id, grades)
        if alert:
            alerts.append(alert)
    logger.debug("Evaluated %d students, %d need intervention", len(percentages), len(alerts))
    return alerts


def detect_class_interventions(performance: pd.DataFrame) -> List[InterventionAlert]:
    return detect_interventions(percentages_by_student(performance))


def generate_intervention_report(performance: pd.DataFrame) -> pd.DataFrame:
    rows: List[Dict] = [alert.to_dict() for alert in detect_class_interventions(performance)]
    return pd.DataFrame(rows, columns=ALERT_COLUMNS)
