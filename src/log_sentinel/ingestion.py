"""Validate uploaded JSON documents into datasets and export them back."""

from __future__ import annotations

import json
import logging
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import ArtifactType, Category, Dataset, ForensicArtifact, LogEvent, RiskLevel

logger = logging.getLogger(__name__)

DEFAULT_DURATION_SECONDS = 60
UNKNOWN_TEXT = "Unknown"
_FRACTION = re.compile(r"\.(\d+)")


class FailureReason(str, Enum):
    INVALID_JSON = "invalid_json"
    INVALID_LOG_ARRAY = "invalid_log_array"
    UNRECOGNIZED_SHAPE = "unrecognized_shape"
    INVALID_RECORD = "invalid_record"


FAILURE_MESSAGES: dict[FailureReason, str] = {
    FailureReason.INVALID_JSON: "Failed to parse JSON file.",
    FailureReason.INVALID_LOG_ARRAY: "Invalid JSON format. Expected array of log objects.",
    FailureReason.UNRECOGNIZED_SHAPE: (
        "Unknown JSON format. Expected array of logs or forensic export object."
    ),
    FailureReason.INVALID_RECORD: "Invalid record in uploaded data.",
}


@dataclass(frozen=True, slots=True)
class ParseSuccess:
    dataset: Dataset
    ok = True


@dataclass(frozen=True, slots=True)
class ParseFailure:
    reason: FailureReason
    detail: Optional[str] = None
    ok = False

    @property
    def message(self) -> str:
        base = FAILURE_MESSAGES[self.reason]
        return f"{base} {self.detail}" if self.detail else base


ParseResult = Union[ParseSuccess, ParseFailure]


def check_timestamp(value: str) -> str:
    """Require an ISO-8601 date-time such as ``2025-01-06T09:00:00.0000000+01:00``.

    The original text is returned untouched; only its shape is checked.
    """
    if "T" not in value:
        raise ValueError("expected an ISO-8601 date-time")
    # fromisoformat before 3.11 takes neither "Z" nor fractions other than 3 or 6 digits.
    candidate = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    if candidate[-1:] in ("Z", "z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        datetime.fromisoformat(candidate)
    except ValueError:
        raise ValueError("expected an ISO-8601 date-time") from None
    return value


class LogRecord(BaseModel):
    """Wire shape of an activity-log entry; optional fields are filled on conversion."""

    id: Optional[str] = None
    timestamp: str = Field(min_length=1)
    application: Optional[str] = None
    window_title: Optional[str] = Field(default=None, alias="windowTitle")
    title: Optional[str] = None
    duration_seconds: Optional[int] = Field(default=None, alias="durationSeconds", ge=0)
    duration: Optional[int] = Field(default=None, ge=0)
    category: Category = Category.UNCATEGORIZED

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, value: str) -> str:
        return check_timestamp(value)

    def to_event(self) -> LogEvent:
        duration = self.duration_seconds
        if duration is None:
            duration = self.duration if self.duration is not None else DEFAULT_DURATION_SECONDS
        return LogEvent(
            id=self.id or _new_id(),
            timestamp=self.timestamp,
            application=self.application or UNKNOWN_TEXT,
            window_title=self.window_title or self.title or UNKNOWN_TEXT,
            duration_seconds=duration,
            category=self.category,
        )


class ArtifactRecord(BaseModel):
    id: Optional[str] = None
    timestamp: str = Field(min_length=1)
    type: ArtifactType
    name: Optional[str] = None
    path: Optional[str] = None
    action: Optional[str] = None
    risk_level: RiskLevel = Field(default=RiskLevel.UNKNOWN, alias="riskLevel")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, value: str) -> str:
        return check_timestamp(value)

    def to_artifact(self) -> ForensicArtifact:
        return ForensicArtifact(
            id=self.id or _new_id(),
            timestamp=self.timestamp,
            type=self.type,
            name=self.name or "",
            path=self.path or "",
            action=self.action or "",
            risk_level=self.risk_level,
        )


class _InvalidRecord(Exception):
    def __init__(self, section: str, index: int, error: ValidationError) -> None:
        first = error.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "record"
        super().__init__(f"{section}[{index}] {location}: {first['msg']}")


def parse_dataset(raw: Union[bytes, str]) -> ParseResult:
    """Parse an uploaded document into a dataset without raising.

    Accepts either a bare array of log objects or an export object holding
    ``logs`` and/or ``artifacts`` arrays.
    """
    try:
        text = raw.decode("utf-8-sig") if isinstance(raw, bytes) else raw
        document = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError):
        return _fail(FailureReason.INVALID_JSON)

    try:
        if isinstance(document, list):
            if not all(_looks_like_log(item) for item in document):
                return _fail(FailureReason.INVALID_LOG_ARRAY)
            dataset = Dataset(events=_validate_events(document, "logs"))
        elif isinstance(document, dict) and ("logs" in document or "artifacts" in document):
            logs = document.get("logs")
            artifacts = document.get("artifacts")
            if not _is_optional_list(logs) or not _is_optional_list(artifacts):
                return _fail(FailureReason.UNRECOGNIZED_SHAPE)
            dataset = Dataset(
                events=_validate_events(logs or [], "logs"),
                artifacts=_validate_artifacts(artifacts or []),
            )
        else:
            return _fail(FailureReason.UNRECOGNIZED_SHAPE)
    except _InvalidRecord as exc:
        return _fail(FailureReason.INVALID_RECORD, str(exc))

    logger.info(
        "Parsed %d events and %d artifacts.", len(dataset.events), len(dataset.artifacts)
    )
    return ParseSuccess(dataset)


def export_dataset(dataset: Dataset) -> str:
    """Serialize a dataset in the export-object shape accepted by ``parse_dataset``."""
    return json.dumps(dataset.to_dict(), indent=2, ensure_ascii=False)


def _is_optional_list(value: Any) -> bool:
    return value is None or isinstance(value, list)


def _looks_like_log(item: Any) -> bool:
    return isinstance(item, dict) and bool(item.get("timestamp")) and bool(item.get("application"))


def _validate_events(items: list[Any], section: str) -> tuple[LogEvent, ...]:
    events = []
    for index, item in enumerate(items):
        try:
            events.append(LogRecord.model_validate(item).to_event())
        except ValidationError as exc:
            raise _InvalidRecord(section, index, exc) from exc
    return tuple(events)


def _validate_artifacts(items: list[Any]) -> tuple[ForensicArtifact, ...]:
    artifacts = []
    for index, item in enumerate(items):
        try:
            artifacts.append(ArtifactRecord.model_validate(item).to_artifact())
        except ValidationError as exc:
            raise _InvalidRecord("artifacts", index, exc) from exc
    return tuple(artifacts)


def _fail(reason: FailureReason, detail: Optional[str] = None) -> ParseFailure:
    failure = ParseFailure(reason, detail)
    logger.warning("Rejected uploaded data: %s", failure.message)
    return failure


def _new_id() -> str:
    return uuid.uuid4().hex[:12]
