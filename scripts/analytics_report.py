# ABOUTME: Provides a CLI that renders engine read models from JSON record dumps.
# ABOUTME: Lets contributors eyeball student metrics, digests, class metrics, and alerts.

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
import typer
from rich.console import Console
from rich.table import Table

from src.analytics.class_metrics import compute_class_metrics
from src.analytics.digest import compose_weekly_digest, format_digest
from src.analytics.grading import apply_rubric_grades
from src.analytics.interventions import generate_intervention_report
from src.analytics.performance import build_performance_frame, subject_scores
from src.analytics.student_metrics import compute_student_metrics
from src.common.config import AnalyticsConfig, load_config
from src.common.schemas import (
    ActivityRecord,
    AssignmentRecord,
    Criterion,
    QuizResult,
    Rubric,
    RubricLevel,
    StudentSummary,
    SubmissionRecord,
)

console = Console()
app = typer.Typer(help="Render learning analytics from exported activity and grading records.")

DEFAULT_CONFIG_PATH = Path("configs/analytics.yaml")


def _parse_ts(value) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return pd.Timestamp(value).to_pydatetime()


def _read_rows(path: Path) -> List[Dict]:
    if not path.exists():
        console.print(f"[red]Missing records file at {path}[/red]")
        raise typer.Exit(code=1)
    rows = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(rows, list):
        raise typer.BadParameter(f"{path} must contain a JSON list of records.")
    return rows


def _load_config(config: Optional[Path]) -> AnalyticsConfig:
    path = config if config is not None else (DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None)
    try:
        return load_config(path)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


def _resolve_now(now: Optional[str], cfg: AnalyticsConfig) -> datetime:
    if not now:
        return cfg.now()
    try:
        return _parse_ts(now)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--now") from exc


def load_activities(path: Path) -> List[ActivityRecord]:
    return [
        ActivityRecord(
            student_id=str(row["student_id"]),
            activity_type=row.get("activity_type", "other"),
            timestamp=_parse_ts(row["timestamp"]),
            class_id=row.get("class_id"),
            assignment_id=row.get("assignment_id"),
            metadata=row.get("metadata") or {},
        )
        for row in _read_rows(path)
    ]


def _load_rubric(raw: Optional[Dict]) -> Optional[Rubric]:
    if not raw:
        return None
    return Rubric(
        criteria=tuple(
            Criterion(
                # JSON object keys are strings, so rubric_scores lookups need string ids.
                id=str(c["id"]),
                name=c.get("name", ""),
                weight=float(c.get("weight", 0)),
                levels=tuple(RubricLevel(**level) for level in c.get("levels", [])),
            )
            for c in raw.get("criteria", [])
        )
    )


def load_assignments(path: Path) -> List[AssignmentRecord]:
    return [
        AssignmentRecord(
            id=str(row["id"]),
            title=row.get("title", str(row["id"])),
            points=float(row.get("points", 0)),
            class_id=row.get("class_id"),
            topic=row.get("topic") or "General",
            subject=row.get("subject"),
            rubric=_load_rubric(row.get("rubric")),
        )
        for row in _read_rows(path)
    ]


def load_submissions(path: Path) -> List[SubmissionRecord]:
    return [
        SubmissionRecord(
            assignment_id=str(row["assignment_id"]),
            student_id=str(row["student_id"]),
            grade=row.get("grade"),
            rubric_scores=row.get("rubric_scores") or {},
            status=row.get("status", "submitted"),
            submitted_at=_parse_ts(row.get("submitted_at")),
            graded_at=_parse_ts(row.get("graded_at")),
        )
        for row in _read_rows(path)
    ]


def load_performance(assignments_path: Path, submissions_path: Path) -> pd.DataFrame:
    """Resolve rubric grades, then build the per-submission percentage frame."""
    assignment_records = load_assignments(assignments_path)
    graded = apply_rubric_grades(load_submissions(submissions_path), assignment_records)
    return build_performance_frame(assignment_records, graded)


def load_roster(path: Path) -> List[StudentSummary]:
    return [
        StudentSummary(
            student_id=str(row["student_id"]),
            name=row.get("name", ""),
            messages_sent=int(row.get("messages_sent") or 0),
            active_minutes=float(row.get("active_minutes") or 0),
            subjects=tuple(row.get("subjects") or ()),
            quiz_results=tuple(
                QuizResult(
                    quiz_title=q["quiz_title"],
                    score=float(q["score"]),
                    total=float(q["total"]),
                    timestamp=_parse_ts(q.get("timestamp")),
                )
                for q in row.get("quiz_results") or ()
            ),
        )
        for row in _read_rows(path)
    ]


@app.command()
def student(
    student_id: str = typer.Option(..., "--student-id", help="Student identifier."),
    records: Path = typer.Option(Path("data/activities.json"), "--records", help="JSON list of activity records."),
    config: Optional[Path] = typer.Option(None, "--config", help="Analytics config YAML."),
    now: Optional[str] = typer.Option(None, "--now", help="ISO timestamp to treat as the current time."),
) -> None:
    """Show streak, grades, trend, subjects, and learning gaps for one student."""
    cfg = _load_config(config)
    activities = [r for r in load_activities(records) if r.student_id == student_id]
    metrics = compute_student_metrics(activities, now=_resolve_now(now, cfg), config=cfg)

    console.rule(f"[bold blue]Student {student_id}[/bold blue]")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric")
    table.add_column("Value")
    table.add_row("Streak", f"{metrics.streak_days} day(s)")
    table.add_row("Average grade", "N/A" if metrics.average_grade is None else str(metrics.average_grade))
    table.add_row("Trend", metrics.performance_trend)
    table.add_row("Activities", str(metrics.total_activities))
    table.add_row("Assignments completed", str(metrics.assignments_completed))
    table.add_row("Top subjects", ", ".join(s.subject for s in metrics.top_subjects) or "-")
    console.print(table)

    if metrics.learning_gaps:
        console.print()
        console.print("[bold yellow]Learning gaps[/bold yellow]")
        gap_table = Table(show_header=True, header_style="bold magenta")
        gap_table.add_column("Topic")
        gap_table.add_column("Average")
        gap_table.add_column("Attempts")
        for gap in metrics.learning_gaps:
            gap_table.add_row(gap.topic, f"{gap.average_score:.1f}", str(gap.attempts))
        console.print(gap_table)


@app.command()
def digest(
    student_id: str = typer.Option(..., "--student-id", help="Student identifier."),
    records: Path = typer.Option(Path("data/activities.json"), "--records", help="JSON list of activity records."),
    config: Optional[Path] = typer.Option(None, "--config", help="Analytics config YAML."),
    now: Optional[str] = typer.Option(None, "--now", help="ISO timestamp to treat as the current time."),
    as_json: bool = typer.Option(False, "--json", help="Emit the digest as JSON instead of text."),
) -> None:
    """Compose the parent-facing weekly digest."""
    cfg = _load_config(config)
    result = compose_weekly_digest(student_id, load_activities(records), now=_resolve_now(now, cfg), config=cfg)
    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return
    console.print(format_digest(result))


@app.command("class-metrics")
def class_metrics(
    roster: Path = typer.Option(..., "--roster", help="JSON list of student summaries."),
    assignments: Optional[Path] = typer.Option(None, "--assignments", help="JSON list of assignments."),
    submissions: Optional[Path] = typer.Option(None, "--submissions", help="JSON list of submissions."),
    config: Optional[Path] = typer.Option(None, "--config", help="Analytics config YAML."),
    unverified: bool = typer.Option(False, "--unverified", help="Render the preview payload."),
) -> None:
    """Aggregate engagement, subject heatmap, and class sentiment."""
    cfg = _load_config(config)
    scores: Dict[str, float] = {}
    if assignments is not None and submissions is not None:
        performance = load_performance(assignments, submissions)
        scores = subject_scores(performance)

    metrics = compute_class_metrics(load_roster(roster), scores, is_verified=not unverified, config=cfg)

    console.rule("[bold blue]Class metrics[/bold blue]")
    console.print(f"[bold]Avg engagement:[/] {metrics.avg_engagement}")
    console.print(f"[bold]Top subject:[/] {metrics.top_subject}")
    console.print(f"[bold]Total hours:[/] {metrics.total_hours}")
    console.print(f"[bold]Vibe:[/] {metrics.vibe}")
    console.print(f"[bold]Insight:[/] {metrics.sentiment_insight}")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Subject")
    table.add_column("Score")
    table.add_column("Students")
    for entry in metrics.heatmap_data:
        score = f"{entry.score}{'*' if entry.estimated else ''}"
        table.add_row(entry.subject, score, str(entry.students))
    console.print(table)
    if any(e.estimated for e in metrics.heatmap_data):
        console.print("[dim]* estimated: no graded records for this subject[/dim]")
    if metrics.coaching_note:
        console.print(f"[yellow]{metrics.coaching_note.advice}[/yellow]")


@app.command()
def interventions(
    assignments: Path = typer.Option(..., "--assignments", help="JSON list of assignments."),
    submissions: Path = typer.Option(..., "--submissions", help="JSON list of submissions."),
    output: Optional[Path] = typer.Option(None, "--output", help="Optional CSV path for the alert report."),
    severity: Optional[str] = typer.Option(None, "--severity", help="Optional severity filter."),
) -> None:
    """List students who need attention, one alert per student."""
    performance = load_performance(assignments, submissions)
    report = generate_intervention_report(performance)
    if severity:
        report = report[report["severity"] == severity]

    if report.empty:
        console.print("[green]✅ No students need intervention[/green]")
    for _, alert in report.iterrows():
        color = {"medium": "orange3", "high": "red"}.get(alert["severity"], "white")
        console.print(f"[{color}]{alert['student_id']}: {alert['type']} ({alert['severity']})[/{color}]")
        console.print(f"  avg_grade: {alert['avg_grade']:.1f}")
        console.print(f"  → {alert['message']}")

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        report.to_csv(output, index=False)
        console.print(f"[bold]Analyzed {performance['student_id'].nunique():,} students; alerts saved to {output}[/bold]")


if __name__ == "__main__":
    app()
