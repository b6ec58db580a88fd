# ABOUTME: Ranks a student's topics by weakness from topic-tagged graded activity.
# ABOUTME: Keeps topics averaging under 70 and attaches remediation suggestions.

from __future__ import annotations

from typing import Iterable, Optional, Tuple

import pandas as pd

from src.common.schemas import ActivityRecord, LearningGap, records_to_rows

from .resources import ResourceLookup

GAP_THRESHOLD = 70.0


def analyze_learning_gaps(
    records: Iterable[ActivityRecord],
    lookup: Optional[ResourceLookup] = None,
) -> Tuple[LearningGap, ...]:
    """Weakest topic first; ties keep the order topics were first seen."""

    rows = records_to_rows(list(records))
    if not rows:
        return ()

    df = pd.DataFrame(rows)
    graded = df.dropna(subset=["topic", "grade"])
    if graded.empty:
        return ()
    graded = graded.astype({"grade": float})

    per_topic = (
        graded.groupby("topic", sort=False)
        .agg(average_score=("grade", "mean"), attempts=("grade", "count"))
        .reset_index()
    )
    weak = per_topic[per_topic["average_score"] < GAP_THRESHOLD]
    weak = weak.sort_values("average_score", kind="mergesort")

    lookup = lookup or ResourceLookup()
    return tuple(
        LearningGap(
            topic=str(row["topic"]),
            average_score=float(row["average_score"]),
            attempts=int(row["attempts"]),
            recommendations=lookup.remediation_steps(str(row["topic"])),
        )
        for _, row in weak.iterrows()
    )
