"""Domain models for activity logs and forensic artifacts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class Category(str, Enum):
    PRODUCTIVITY = "Productivity"
    ENTERTAINMENT = "Entertainment"
    SYSTEM = "System"
    COMMUNICATION = "Communication"
    DEVELOPMENT = "Development"
    UNCATEGORIZED = "Uncategorized"


class ArtifactType(str, Enum):
    USB_DEVICE = "USB_DEVICE"
    RECENT_DOC = "RECENT_DOC"
    SHELLBAG = "SHELLBAG"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class LogEvent:
    """A single span of time spent in one foreground window."""

    id: str
    timestamp: str
    application: str
    window_title: str
    duration_seconds: int
    category: Category

    @property
    def date(self) -> str:
        """Calendar date portion of the timestamp, in the zone it was recorded."""
        return self.timestamp.split("T", 1)[0]

    @property
    def clock_time(self) -> str:
        """Time-of-day portion of the timestamp without fractional seconds."""
        _, sep, time_part = self.timestamp.partition("T")
        if not sep:
            return self.timestamp
        return time_part.split(".", 1)[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "application": self.application,
            "windowTitle": self.window_title,
            "durationSeconds": self.duration_seconds,
            "category": self.category.value,
        }


@dataclass(frozen=True, slots=True)
class ForensicArtifact:
    """A USB connection, recent-document access or shellbag folder record."""

    id: str
    timestamp: str
    type: ArtifactType
    name: str
    path: str
    action: str
    risk_level: RiskLevel = RiskLevel.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "type": self.type.value,
            "name": self.name,
            "path": self.path,
            "action": self.action,
            "riskLevel": self.risk_level.value,
        }


@dataclass(frozen=True, slots=True)
class Dataset:
    """The events and artifacts loaded together from one source."""

    events: tuple[LogEvent, ...] = field(default_factory=tuple)
    artifacts: tuple[ForensicArtifact, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.events and not self.artifacts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logs": [event.to_dict() for event in self.events],
            "artifacts": [artifact.to_dict() for artifact in self.artifacts],
        }
