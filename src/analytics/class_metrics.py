# ABOUTME: Aggregates roster summaries into class-wide engagement, subject heatmap, and sentiment.
# ABOUTME: Heatmap scores come from graded records; a fixed fallback covers subjects with no grades.

from __future__ import annotations

import logging
import math
import random
from collections import Counter
from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np

from src.common.config import DEFAULT_CONFIG, AnalyticsConfig
from src.common.schemas import ClassMetrics, CoachingNote, HeatmapEntry, QuizResult, StudentSummary
from src.common.stats import format_fixed, round_half_up

from .resources import ResourceLookup, recommendation_reason
from .streaks import to_local_naive

logger = logging.getLogger(__name__)

VIBE_FOCUSED = "Focused"
VIBE_CONFUSED = "Confused"
VIBE_EXCITED = "Excited"


class ClassThresholds:
    STRUGGLE_SCORE = 70
    EXCITED_MEAN = 85
    # Share of the roster assumed affected by a struggle topic; an estimate, not a count.
    AFFECTED_SHARE = 0.4
    COACHING_RATIO = 0.7
    COACHING_MIN_SUBMISSIONS = 2


def estimate_affected_students(student_count: int) -> int:
    return math.floor(student_count * ClassThresholds.AFFECTED_SHARE) + 1


def count_subjects(roster: Sequence[StudentSummary]) -> Counter:
    counts: Counter = Counter()
    for student in roster:
        for subject in student.subjects:
            if subject:
                counts[subject] += 1
    return counts


def pick_top_subject(counts: Counter) -> str:
    # Ties go to the subject encountered first.
    top = counts.most_common(1)
    return top[0][0] if top else "General"


def build_heatmap(
    counts: Counter,
    scores: Mapping[str, float],
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> Tuple[HeatmapEntry, ...]:
    """One entry per subject in first-seen order, scored from real grades where present."""

    rng = random.Random(config.demo_seed) if config.demo_jitter else None
    entries: List[HeatmapEntry] = []
    for subject, students in counts.items():
        if subject in scores:
            entries.append(HeatmapEntry(subject=subject, score=round_half_up(scores[subject]), students=students))
            continue
        fallback = config.heatmap_fallback_score
        if rng is not None:
            fallback += rng.randint(-10, 9)
        logger.debug("No graded records for subject %s; using fallback score %s", subject, fallback)
        entries.append(HeatmapEntry(subject=subject, score=fallback, students=students, estimated=True))
    return tuple(entries)


def find_struggle_topic(heatmap: Sequence[HeatmapEntry]) -> Optional[str]:
    for entry in heatmap:
        if entry.score < ClassThresholds.STRUGGLE_SCORE:
            return entry.subject
    return None


def classify_vibe(heatmap: Sequence[HeatmapEntry], struggle_topic: Optional[str]) -> str:
    if struggle_topic:
        return VIBE_CONFUSED
    if heatmap and float(np.mean([e.score for e in heatmap])) > ClassThresholds.EXCITED_MEAN:
        return VIBE_EXCITED
    return VIBE_FOCUSED


def sentiment_insight(vibe: str, struggle_topic: Optional[str], affected_estimate: Optional[int]) -> str:
    if struggle_topic:
        return f"An estimated {affected_estimate} students feeling {vibe.lower()} about {struggle_topic}."
    return f"Class is generally {vibe.lower()} and maintaining momentum."


def detect_coaching_note(results: Sequence[QuizResult]) -> Optional[CoachingNote]:
    """Surface the most recent stalled quiz when at least two results fall under 70%."""

    dated = sorted(
        (r for r in results if r.timestamp is not None),
        key=lambda r: to_local_naive(r.timestamp),
        reverse=True,
    )
    ordered = dated + [r for r in results if r.timestamp is None]
    struggling = [r for r in ordered if r.total and r.score / r.total < ClassThresholds.COACHING_RATIO]
    if len(struggling) < ClassThresholds.COACHING_MIN_SUBMISSIONS:
        return None

    topic = struggling[0].quiz_title
    return CoachingNote(
        topic=topic,
        count=len(struggling),
        advice=(
            f"Pattern detected: {len(struggling)} students are stalling on \"{topic}\". "
            "Try a 5-minute visual analogy before the next quiz."
        ),
    )


def preview_metrics(lookup: ResourceLookup) -> ClassMetrics:
    """Static demo payload shown before a teacher account is verified."""

    heatmap = (
        HeatmapEntry(subject="Math", score=82, students=15, estimated=True),
        HeatmapEntry(subject="Physics", score=68, students=12, estimated=True),
        HeatmapEntry(subject="Chemistry", score=91, students=10, estimated=True),
        HeatmapEntry(subject="English", score=75, students=20, estimated=True),
    )
    return ClassMetrics(
        avg_engagement=48,
        top_subject="Advanced Calculus",
        total_hours="156.0",
        heatmap_data=heatmap,
        vibe=VIBE_FOCUSED,
        sentiment_insight="Demo: preview data shown until your account is verified.",
        recommendation_reason="Demo: Newton's second law is a common struggle point.",
        recommended_resources=tuple(r.to_dict() for r in lookup.recommend("Math", "Newton")),
        is_preview=True,
    )


def compute_class_metrics(
    roster: Sequence[StudentSummary],
    subject_scores: Optional[Mapping[str, float]] = None,
    is_verified: bool = True,
    config: AnalyticsConfig = DEFAULT_CONFIG,
    lookup: Optional[ResourceLookup] = None,
) -> ClassMetrics:
    """
    Aggregate a class roster into dashboard metrics.

    ``subject_scores`` maps subject name to class-average percentage built from
    graded records (see ``performance.subject_scores``).
    """

    lookup = lookup or ResourceLookup()
    if not is_verified:
        return preview_metrics(lookup)

    students = [s for s in roster if s is not None]
    if not students:
        return ClassMetrics(
            avg_engagement=0,
            top_subject="N/A",
            total_hours="0.0",
            heatmap_data=(),
            vibe=VIBE_FOCUSED,
            sentiment_insight="Waiting for student activity.",
            recommendation_reason=recommendation_reason(None, 0),
        )

    total_messages = sum(int(s.messages_sent or 0) for s in students)
    total_minutes = sum(float(s.active_minutes or 0) for s in students)
    counts = count_subjects(students)

    heatmap = build_heatmap(counts, subject_scores or {}, config)
    struggle_topic = find_struggle_topic(heatmap)
    vibe = classify_vibe(heatmap, struggle_topic)
    affected = estimate_affected_students(len(students)) if struggle_topic else None

    quiz_results = [r for s in students for r in s.quiz_results]
    first_subject = next(iter(counts), None)

    return ClassMetrics(
        avg_engagement=round_half_up(total_messages / len(students)),
        top_subject=pick_top_subject(counts),
        total_hours=format_fixed(total_minutes / 60, 1),
        heatmap_data=heatmap,
        struggle_topic=struggle_topic,
        vibe=vibe,
        sentiment_insight=sentiment_insight(vibe, struggle_topic, affected),
        affected_students_estimate=affected,
        coaching_note=detect_coaching_note(quiz_results),
        recommendation_reason=recommendation_reason(struggle_topic, len(students)),
        recommended_resources=tuple(r.to_dict() for r in lookup.recommend(first_subject, struggle_topic)),
    )
