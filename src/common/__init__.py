# ABOUTME: Makes the shared common package importable across analytics modules.
# ABOUTME: Re-exports schema types, config loading, and the alert notifier for convenience.

from .config import AnalyticsConfig, load_config
from .notifications import AlertNotifier
from .schemas import (
    ActivityRecord,
    AssignmentRecord,
    ClassMetrics,
    Criterion,
    InterventionAlert,
    Rubric,
    RubricLevel,
    StudentMetrics,
    StudentSummary,
    SubmissionRecord,
    WeeklyDigest,
)

__all__ = [
    "ActivityRecord",
    "AlertNotifier",
    "AnalyticsConfig",
    "AssignmentRecord",
    "ClassMetrics",
    "Criterion",
    "InterventionAlert",
    "Rubric",
    "RubricLevel",
    "StudentMetrics",
    "StudentSummary",
    "SubmissionRecord",
    "WeeklyDigest",
    "load_config",
]
