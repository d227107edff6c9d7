"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from typing import Optional, Sequence

from .aggregation import Statistics, aggregate
from .browsing import artifact_counts
from .models import ForensicArtifact, LogEvent


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def print_summary(
        self,
        events: Sequence[LogEvent],
        artifacts: Sequence[ForensicArtifact] = (),
    ) -> None:
        stats = aggregate(events)
        if stats is None:
            print("No activity loaded.")
            return

        print(f"Activity summary ({len(events)} events)")
        print("-" * 40)
        print(f"Total tracked time: {stats.total_hours_label} hrs")
        print(f"Productivity score: {stats.productivity_score}%")
        print(f"Top application:    {top_application_label(stats)}")
        print(f"Unique apps:        {stats.unique_apps}")
        print()

        if stats.top_apps:
            print("Top applications:")
            for app in stats.top_apps:
                print(f"  {app.name:<30} {format_minutes(app.minutes)}")

        print()
        print("Time by category:")
        for entry in stats.categories:
            print(f"  {entry.category.value:<30} {format_duration(entry.seconds)}")

        print()
        print("Daily activity:")
        for day in stats.daily_activity:
            print(f"  {day.date:<30} {day.hours:.1f} hrs")

        if artifacts:
            counts = artifact_counts(artifacts)
            print()
            print("Forensic artifacts:")
            print(f"  USB connections:       {counts.usb_connections}")
            print(f"  Recent files accessed: {counts.recent_documents}")
            print(f"  High risk items:       {counts.high_risk}")


def top_application_label(stats: Optional[Statistics]) -> str:
    top = stats.top_app if stats else None
    if top is None:
        return "N/A"
    return f"{top.name} ({format_minutes(top.minutes)})"


def format_minutes(minutes: int) -> str:
    hours, remainder = divmod(minutes, 60)
    return f"{hours} hrs {remainder} mins"


def format_duration(seconds: float) -> str:
    total_seconds = int(round(seconds))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
