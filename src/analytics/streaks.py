# ABOUTME: Computes consecutive-activity-day streaks from timestamped records.
# ABOUTME: Projects timestamps onto local calendar dates before counting.

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional, Set

from src.common.schemas import ActivityRecord


def to_local_date(timestamp: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar date of a timestamp; naive timestamps are taken as already local."""
    if timestamp.tzinfo is None:
        return timestamp.date()
    return timestamp.astimezone(tz).date()


def to_local_naive(timestamp: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Local wall-clock time without tzinfo so naive and aware records order together."""
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone(tz).replace(tzinfo=None)


def active_dates(records: Iterable[ActivityRecord], tz: Optional[tzinfo] = None) -> Set[date]:
    return {to_local_date(r.timestamp, tz) for r in records if r.timestamp is not None}


def count_active_days(records: Iterable[ActivityRecord], tz: Optional[tzinfo] = None) -> int:
    return len(active_dates(records, tz))


def calculate_streak(
    records: Iterable[ActivityRecord],
    today: date,
    tz: Optional[tzinfo] = None,
) -> int:
    """
    Count consecutive active days ending today.

    There is no grace day: if nothing happened today the streak is 0, even
    when yesterday was active.
    """

    dates = active_dates(records, tz)
    streak = 0
    while today - timedelta(days=streak) in dates:
        streak += 1
    return streak
