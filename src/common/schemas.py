# ABOUTME: Defines canonical record and read-model structures shared by the analytics engine.
# ABOUTME: Centralizes activity, submission, rubric, and derived metric schema definitions.

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

CriterionId = Union[str, int]

# Activity types emitted by the activity store.
MESSAGE_SENT = "message_sent"
ASSIGNMENT_SUBMITTED = "assignment_submitted"
SESSION_ACTIVE = "session_active"
OTHER_ACTIVITY = "other"
ACTIVITY_TYPES = (MESSAGE_SENT, ASSIGNMENT_SUBMITTED, SESSION_ACTIVE, OTHER_ACTIVITY)

# Performance trend labels.
TREND_IMPROVING = "improving"
TREND_DECLINING = "declining"
TREND_STABLE = "stable"
TREND_NEUTRAL = "neutral"


@dataclass(frozen=True)
class ActivityRecord:
    """Immutable activity row produced by the external activity store."""

    student_id: str
    activity_type: str
    timestamp: datetime
    class_id: Optional[str] = None
    assignment_id: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def subject(self) -> Optional[str]:
        return self.metadata.get("subject") or None

    @property
    def topic(self) -> Optional[str]:
        return self.metadata.get("topic") or None

    @property
    def grade(self) -> Optional[float]:
        value = self.metadata.get("grade")
        if value is None or isinstance(value, bool):
            return None
        try:
            grade = float(value)
        except (TypeError, ValueError):
            return None
        # NaN/inf from exported dumps count as ungraded.
        return grade if math.isfinite(grade) else None


@dataclass(frozen=True)
class RubricLevel:
    name: str
    points: float
    description: str = ""


@dataclass(frozen=True)
class Criterion:
    """One rubric row. Level points are expressed on a 0-100 scale."""

    id: CriterionId
    name: str
    weight: float
    levels: Tuple[RubricLevel, ...] = ()


@dataclass(frozen=True)
class Rubric:
    criteria: Tuple[Criterion, ...] = ()

    @property
    def declared_weight(self) -> float:
        return float(sum(c.weight for c in self.criteria))


@dataclass(frozen=True)
class AssignmentRecord:
    """Assignment metadata needed to turn raw grades into percentages."""

    id: str
    title: str
    points: float
    class_id: Optional[str] = None
    topic: str = "General"
    subject: Optional[str] = None
    rubric: Optional[Rubric] = None


@dataclass(frozen=True)
class SubmissionRecord:
    """Submission row owned by the grading workflow; read-only here."""

    assignment_id: str
    student_id: str
    content: str = ""
    attachments: Tuple[str, ...] = ()
    grade: Optional[float] = None
    feedback: str = ""
    rubric_scores: Mapping[CriterionId, float] = field(default_factory=dict)
    status: str = "submitted"
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None


@dataclass(frozen=True)
class QuizResult:
    quiz_title: str
    score: float
    total: float
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class StudentSummary:
    """Roster entry carrying a student's usage summary stats."""

    student_id: str
    name: str = ""
    messages_sent: int = 0
    active_minutes: float = 0
    subjects: Tuple[str, ...] = ()
    quiz_results: Tuple[QuizResult, ...] = ()


@dataclass(frozen=True)
class SubjectActivity:
    subject: str
    activities: int


@dataclass(frozen=True)
class LearningGap:
    topic: str
    average_score: float
    attempts: int
    recommendations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class InterventionAlert:
    """Alert raised for a student needing attention; never persisted here."""

    student_id: str
    type: str
    severity: str
    message: str
    avg_grade: float
    recent_avg: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StudentMetrics:
    streak_days: int
    average_grade: Optional[int]
    performance_trend: str
    top_subjects: Tuple[SubjectActivity, ...] = ()
    learning_gaps: Tuple[LearningGap, ...] = ()
    total_activities: int = 0
    assignments_completed: int = 0
    recent_activities: Tuple[ActivityRecord, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HeatmapEntry:
    subject: str
    score: int
    students: int
    # True when no graded records backed the score.
    estimated: bool = False


@dataclass(frozen=True)
class CoachingNote:
    topic: str
    count: int
    advice: str


@dataclass(frozen=True)
class ClassMetrics:
    avg_engagement: int
    top_subject: str
    total_hours: str
    heatmap_data: Tuple[HeatmapEntry, ...] = ()
    struggle_topic: Optional[str] = None
    vibe: str = "Focused"
    sentiment_insight: str = ""
    affected_students_estimate: Optional[int] = None
    coaching_note: Optional[CoachingNote] = None
    recommendation_reason: str = ""
    recommended_resources: Tuple[Mapping[str, Any], ...] = ()
    is_preview: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DigestPeriod:
    start: str
    end: str


@dataclass(frozen=True)
class DigestSummary:
    active_days: int
    assignments_completed: int
    average_grade: Optional[int]
    streak: int


@dataclass(frozen=True)
class WeeklyDigest:
    student_id: str
    period: DigestPeriod
    summary: DigestSummary
    top_topics: Tuple[SubjectActivity, ...] = ()
    achievements: Tuple[str, ...] = ()
    concerns: Tuple[str, ...] = ()
    next_steps: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def records_to_rows(records: List[ActivityRecord]) -> List[Dict[str, Any]]:
    """Flatten activity records into plain rows for DataFrame construction."""

    return [
        {
            "student_id": r.student_id,
            "activity_type": r.activity_type,
            "timestamp": r.timestamp,
            "class_id": r.class_id,
            "assignment_id": r.assignment_id,
            "subject": r.subject,
            "topic": r.topic,
            "grade": r.grade,
        }
        for r in records
    ]
