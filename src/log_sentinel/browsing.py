"""Search, filter and sort helpers for the raw event and artifact tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence

from .models import ArtifactType, Category, ForensicArtifact, LogEvent, RiskLevel

ALL_CATEGORIES = "All"

SORT_FIELDS = {
    "timestamp": lambda event: event.timestamp,
    "application": lambda event: event.application,
    "windowTitle": lambda event: event.window_title,
    "durationSeconds": lambda event: event.duration_seconds,
    "category": lambda event: event.category.value,
}


@dataclass(frozen=True, slots=True)
class ArtifactCounts:
    usb_connections: int
    recent_documents: int
    high_risk: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "usb_connections": self.usb_connections,
            "recent_documents": self.recent_documents,
            "high_risk": self.high_risk,
        }


def filter_events(
    events: Iterable[LogEvent],
    *,
    search: str = "",
    category: Optional[Category] = None,
    sort_field: str = "timestamp",
    descending: bool = True,
) -> list[LogEvent]:
    """Return events matching ``search`` and ``category``, sorted by one field."""
    try:
        sort_key = SORT_FIELDS[sort_field]
    except KeyError:
        raise ValueError(f"Unsupported sort field: {sort_field}") from None

    needle = search.strip().casefold()
    matches = [
        event
        for event in events
        if (category is None or event.category is category)
        and (
            not needle
            or needle in event.application.casefold()
            or needle in event.window_title.casefold()
        )
    ]
    return sorted(matches, key=sort_key, reverse=descending)


def event_categories(events: Iterable[LogEvent]) -> list[str]:
    """Filter options for the event table, in first-seen order."""
    seen = dict.fromkeys(event.category.value for event in events)
    return [ALL_CATEGORIES, *seen]


def filter_artifacts(
    artifacts: Iterable[ForensicArtifact],
    *,
    artifact_type: Optional[ArtifactType] = None,
    search: str = "",
) -> list[ForensicArtifact]:
    needle = search.strip().casefold()
    return [
        artifact
        for artifact in artifacts
        if (artifact_type is None or artifact.type is artifact_type)
        and (
            not needle
            or needle in artifact.name.casefold()
            or needle in artifact.path.casefold()
        )
    ]


def artifact_counts(artifacts: Sequence[ForensicArtifact]) -> ArtifactCounts:
    return ArtifactCounts(
        usb_connections=sum(1 for a in artifacts if a.type is ArtifactType.USB_DEVICE),
        recent_documents=sum(1 for a in artifacts if a.type is ArtifactType.RECENT_DOC),
        high_risk=sum(1 for a in artifacts if a.risk_level is RiskLevel.HIGH),
    )
