import itertools

import pytest

from log_sentinel.models import ArtifactType, Category, ForensicArtifact, LogEvent, RiskLevel


class StubAnalyst:
    """Stands in for AnalysisClient; records every question it is asked."""

    is_configured = True

    def __init__(self, reply="Analysis complete.", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def analyze(self, events, artifacts, question):
        self.calls.append((tuple(events), tuple(artifacts), question))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def make_event():
    counter = itertools.count()

    def _make(
        application="App",
        duration=60,
        category=Category.UNCATEGORIZED,
        timestamp="2025-01-06T09:00:00.000Z",
        title="Main Window",
    ):
        return LogEvent(
            id=f"evt-{next(counter)}",
            timestamp=timestamp,
            application=application,
            window_title=title,
            duration_seconds=duration,
            category=category,
        )

    return _make


@pytest.fixture
def make_artifact():
    counter = itertools.count()

    def _make(
        type=ArtifactType.RECENT_DOC,
        name="notes.txt",
        path=r"C:\Users\Admin\Desktop",
        risk=RiskLevel.LOW,
        timestamp="2025-01-05T10:00:00.000Z",
        action="File Accessed (LNK)",
    ):
        return ForensicArtifact(
            id=f"art-{next(counter)}",
            timestamp=timestamp,
            type=type,
            name=name,
            path=path,
            action=action,
            risk_level=risk,
        )

    return _make


@pytest.fixture
def stub_analyst():
    return StubAnalyst()
