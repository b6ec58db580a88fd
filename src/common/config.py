# ABOUTME: Loads analytics engine settings from YAML into a typed config object.
# ABOUTME: Keeps windowing, timezone, and heatmap fallback knobs out of the algorithms.

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml


@dataclass(frozen=True)
class AnalyticsConfig:
    timezone: Optional[str] = None  # None means the host's local time
    student_window_days: int = 30
    digest_window_days: int = 7
    recent_activity_limit: int = 10
    top_subject_limit: int = 3
    heatmap_fallback_score: int = 75
    demo_jitter: bool = False
    demo_seed: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("student_window_days", "digest_window_days", "recent_activity_limit", "top_subject_limit"):
            if getattr(self, name) <= 0:
                raise ValueError(f"'{name}' must be positive, got {getattr(self, name)!r}.")
        if not 0 <= self.heatmap_fallback_score <= 100:
            raise ValueError(f"'heatmap_fallback_score' must be within [0, 100], got {self.heatmap_fallback_score!r}.")
        if self.demo_jitter and self.demo_seed is None:
            raise ValueError("'demo_seed' is required when 'demo_jitter' is enabled.")
        if self.timezone is not None:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ValueError(f"Unknown timezone '{self.timezone}'.") from exc

    @property
    def tz(self) -> Optional[tzinfo]:
        return ZoneInfo(self.timezone) if self.timezone else None

    def now(self) -> datetime:
        return datetime.now(self.tz).astimezone(self.tz)


DEFAULT_CONFIG = AnalyticsConfig()


def load_config(config_path: Optional[Path]) -> AnalyticsConfig:
    """Read an analytics YAML file; missing keys fall back to defaults."""

    if config_path is None:
        return DEFAULT_CONFIG

    with open(config_path) as f:
        cfg = yaml.safe_load(f) or {}

    section = cfg.get("analytics", cfg)
    known = {f.name for f in fields(AnalyticsConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unsupported config keys: {', '.join(unknown)}.")
    return AnalyticsConfig(**section)
