"""Bounded textual digest of the loaded data for the analysis prompt."""

from __future__ import annotations

from typing import Sequence

from .aggregation import round_half_up, seconds_by_application
from .models import ArtifactType, ForensicArtifact, LogEvent, RiskLevel

RECENT_EVENTS_LIMIT = 30
TOP_APPS_LIMIT = 10

NO_USB_TEXT = "None detected."
NO_SENSITIVE_FILES_TEXT = "No high risk files detected."

DIGEST_TEMPLATE = """Data Summary:
Top Apps by Duration: {top_apps}

Forensic Highlights:
USB Connections:
{usb}

Sensitive File Access (Recent Docs):
{documents}

Recent Detailed Activity Log (Last {limit} events):
{recent}
"""


def summarize(events: Sequence[LogEvent], artifacts: Sequence[ForensicArtifact] = ()) -> str:
    """Render events and artifacts into a digest whose size does not grow with the log.

    Events are expected newest first; only the first thirty are listed in
    detail while the application totals cover the whole sequence.
    """
    return DIGEST_TEMPLATE.format(
        top_apps=format_top_apps(events),
        usb=format_usb_connections(artifacts) or NO_USB_TEXT,
        documents=format_sensitive_documents(artifacts) or NO_SENSITIVE_FILES_TEXT,
        limit=RECENT_EVENTS_LIMIT,
        recent=format_recent_events(events),
    )


def format_recent_events(events: Sequence[LogEvent]) -> str:
    lines = []
    for event in events[:RECENT_EVENTS_LIMIT]:
        minutes = int(round_half_up(event.duration_seconds / 60))
        lines.append(
            f"[{event.clock_time}] App: {event.application} "
            f"| Title: {event.window_title} | Dur: {minutes}m"
        )
    return "\n".join(lines)


def format_top_apps(events: Sequence[LogEvent]) -> str:
    totals = sorted(
        seconds_by_application(events).items(), key=lambda item: item[1], reverse=True
    )
    return ", ".join(
        f"{name}: {round_half_up(seconds / 3600, 1):.1f} hours"
        for name, seconds in totals[:TOP_APPS_LIMIT]
    )


def format_usb_connections(artifacts: Sequence[ForensicArtifact]) -> str:
    return "\n".join(
        f"- {artifact.name} (Serial: {artifact.path}) connected at {artifact.timestamp}"
        for artifact in artifacts
        if artifact.type is ArtifactType.USB_DEVICE
    )


def format_sensitive_documents(artifacts: Sequence[ForensicArtifact]) -> str:
    return "\n".join(
        f"- HIGH RISK FILE: {artifact.name} in {artifact.path}"
        for artifact in artifacts
        if artifact.type is ArtifactType.RECENT_DOC and artifact.risk_level is RiskLevel.HIGH
    )
