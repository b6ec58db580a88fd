# ABOUTME: Assembles the parent-facing weekly digest for one student.
# ABOUTME: Window-bounded counts plus a lifetime streak, achievements, concerns, and next steps.

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from src.common.config import DEFAULT_CONFIG, AnalyticsConfig
from src.common.schemas import (
    TREND_DECLINING,
    ActivityRecord,
    DigestPeriod,
    DigestSummary,
    WeeklyDigest,
)

from .student_metrics import count_submissions, within_window
from .streaks import calculate_streak, count_active_days, to_local_date
from .trends import analyze_trend, average_grade, top_subjects

PERIOD_FORMAT = "%b %d, %Y"


class DigestThresholds:
    STREAK_DAYS = 7
    EXCELLENT_GRADE = 90
    PRODUCTIVE_ASSIGNMENTS = 5
    SUPPORT_GRADE = 70


def detect_achievements(streak: int, avg_grade: Optional[int], assignments_completed: int) -> List[str]:
    achievements = []
    if streak >= DigestThresholds.STREAK_DAYS:
        achievements.append("7-day learning streak! 🔥")
    if avg_grade is not None and avg_grade >= DigestThresholds.EXCELLENT_GRADE:
        achievements.append("Excellent performance! ⭐")
    if assignments_completed >= DigestThresholds.PRODUCTIVE_ASSIGNMENTS:
        achievements.append("Productive week! 📚")
    return achievements


def needs_support(avg_grade: Optional[int]) -> bool:
    return avg_grade is not None and avg_grade < DigestThresholds.SUPPORT_GRADE


def generate_next_steps(avg_grade: Optional[int], trend: str) -> List[str]:
    steps = []
    if needs_support(avg_grade):
        steps.append("Review recent concepts with targeted practice")
    if trend == TREND_DECLINING:
        steps.append("Schedule one-on-one time to identify challenges")
    steps.append("Continue current learning pace")
    return steps


def compose_weekly_digest(
    student_id: str,
    records: Iterable[ActivityRecord],
    now: Optional[datetime] = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> WeeklyDigest:
    """
    Summarize the trailing week for a parent.

    Counts, grades, and topics only look at the window; the streak is measured
    over every record supplied so a long run is not cut off at seven days.
    """

    now = now or config.now()
    tz = config.tz
    history = [r for r in records if r.student_id == student_id]
    window = within_window(history, now, config.digest_window_days)

    streak = calculate_streak(history, to_local_date(now, tz), tz)
    avg_grade = average_grade(window)
    completed = count_submissions(window)
    trend = analyze_trend(window, tz)

    return WeeklyDigest(
        student_id=student_id,
        period=DigestPeriod(
            start=(now - timedelta(days=config.digest_window_days)).strftime(PERIOD_FORMAT),
            end=now.strftime(PERIOD_FORMAT),
        ),
        summary=DigestSummary(
            active_days=count_active_days(window, tz),
            assignments_completed=completed,
            average_grade=avg_grade,
            streak=streak,
        ),
        top_topics=top_subjects(window, config.top_subject_limit),
        achievements=tuple(detect_achievements(streak, avg_grade, completed)),
        concerns=("Student may need additional support",) if needs_support(avg_grade) else (),
        next_steps=tuple(generate_next_steps(avg_grade, trend)),
    )


def format_digest(digest: WeeklyDigest) -> str:
    """Render a digest as a plain-text block for email or console output."""
    summary = digest.summary
    grade = "N/A" if summary.average_grade is None else f"{summary.average_grade}%"
    lines = [
        "━" * 60,
        f"Weekly digest for {digest.student_id}",
        f"{digest.period.start} - {digest.period.end}",
        "━" * 60,
        f"Active days: {summary.active_days}",
        f"Assignments completed: {summary.assignments_completed}",
        f"Average grade: {grade}",
        f"Current streak: {summary.streak} day(s)",
    ]
    if digest.top_topics:
        lines.append("")
        lines.append("TOP TOPICS:")
        lines.extend(f"  • {t.subject} ({t.activities} activities)" for t in digest.top_topics)
    if digest.achievements:
        lines.append("")
        lines.append("ACHIEVEMENTS:")
        lines.extend(f"  {a}" for a in digest.achievements)
    if digest.concerns:
        lines.append("")
        lines.append("CONCERNS:")
        lines.extend(f"  {c}" for c in digest.concerns)
    lines.append("")
    lines.append("NEXT STEPS:")
    lines.extend(f"  → {s}" for s in digest.next_steps)
    lines.append("━" * 60)
    return "\n".join(lines)
