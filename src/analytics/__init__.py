# ABOUTME: Learning analytics and grading computation engine.
# ABOUTME: Stateless functions turning activity and submission records into dashboard read models.

from .class_metrics import compute_class_metrics
from .digest import compose_weekly_digest, format_digest
from .grading import apply_rubric_grades, compute_rubric_grade, grade_submission, resolve_grade
from .interventions import detect_class_interventions, detect_interventions, generate_intervention_report
from .learning_gaps import analyze_learning_gaps
from .performance import aggregate_topic_mastery, build_performance_frame, subject_scores
from .streaks import calculate_streak, count_active_days
from .student_metrics import compute_student_metrics
from .trends import classify_trend

__all__ = [
    "aggregate_topic_mastery",
    "analyze_learning_gaps",
    "apply_rubric_grades",
    "build_performance_frame",
    "calculate_streak",
    "classify_trend",
    "compose_weekly_digest",
    "compute_class_metrics",
    "compute_rubric_grade",
    "compute_student_metrics",
    "count_active_days",
    "detect_class_interventions",
    "detect_interventions",
    "format_digest",
    "generate_intervention_report",
    "grade_submission",
    "resolve_grade",
    "subject_scores",
]
