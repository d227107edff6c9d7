import threading

import pytest

from conftest import StubAnalyst
from log_sentinel.analysis import AnalysisError
from log_sentinel.models import ArtifactType, Dataset
from log_sentinel.session import (
    FAILURE_MESSAGE,
    GREETING,
    RequestInFlightError,
    Role,
    Session,
    View,
)


@pytest.fixture
def dataset(make_event, make_artifact):
    return Dataset(
        events=(make_event("A", 3600), make_event("B", 1800)),
        artifacts=(make_artifact(type=ArtifactType.USB_DEVICE, name="Cruzer"),),
    )


def test_new_session_is_empty():
    session = Session(StubAnalyst())

    assert session.view is View.UPLOAD
    assert session.statistics is None
    assert session.dataset.is_empty
    assert [m.content for m in session.transcript] == [GREETING]
    assert not session.request_in_flight


def test_load_with_artifacts_lands_on_forensics(dataset):
    session = Session(StubAnalyst())
    session.load(dataset)

    assert session.view is View.FORENSICS
    assert session.dataset is dataset
    assert session.statistics.total_hours_label == "1.5"


def test_load_without_artifacts_lands_on_dashboard(make_event):
    session = Session(StubAnalyst())
    session.load(Dataset(events=(make_event(),)))
    assert session.view is View.DASHBOARD


def test_load_without_events_stays_on_upload(make_artifact):
    session = Session(StubAnalyst())
    session.load(Dataset(artifacts=(make_artifact(),)))
    assert session.view is View.UPLOAD
    assert session.statistics is None


def test_reset_clears_everything(dataset):
    session = Session(StubAnalyst())
    session.load(dataset)
    session.ask("Anything odd?")
    session.reset()

    assert session.view is View.UPLOAD
    assert session.statistics is None
    assert session.dataset.is_empty
    assert len(session.transcript) == 1


def test_ask_records_question_and_reply(dataset):
    analyst = StubAnalyst(reply="Threat score: 40")
    session = Session(analyst)
    session.load(dataset)

    reply = session.ask("  Any exfiltration risk?  ")

    assert reply.role is Role.ANALYST
    assert reply.content == "Threat score: 40"
    events, artifacts, question = analyst.calls[0]
    assert events == dataset.events
    assert artifacts == dataset.artifacts
    assert question == "Any exfiltration risk?"
    assert [(m.role, m.content) for m in session.transcript[1:]] == [
        (Role.USER, "Any exfiltration risk?"),
        (Role.ANALYST, "Threat score: 40"),
    ]


def test_failed_analysis_keeps_transcript(dataset):
    analyst = StubAnalyst()
    session = Session(analyst)
    session.load(dataset)
    session.ask("first")

    analyst.error = AnalysisError("quota exceeded")
    reply = session.ask("second")

    assert reply.content == FAILURE_MESSAGE
    assert [m.content for m in session.transcript] == [
        GREETING,
        "first",
        "Analysis complete.",
        "second",
        FAILURE_MESSAGE,
    ]
    assert not session.request_in_flight


def test_empty_question_is_rejected(dataset):
    session = Session(StubAnalyst())
    with pytest.raises(ValueError):
        session.ask("   ")
    assert len(session.transcript) == 1


def test_second_request_rejected_while_first_in_flight(dataset):
    started = threading.Event()
    release = threading.Event()

    class BlockingAnalyst(StubAnalyst):
        def analyze(self, events, artifacts, question):
            started.set()
            release.wait(timeout=5)
            return super().analyze(events, artifacts, question)

    session = Session(BlockingAnalyst())
    session.load(dataset)
    worker = threading.Thread(target=session.ask, args=("first",))
    worker.start()
    try:
        assert started.wait(timeout=5)
        assert session.request_in_flight
        with pytest.raises(RequestInFlightError):
            session.ask("second")
    finally:
        release.set()
        worker.join(timeout=5)

    assert not session.request_in_flight
    assert [m.content for m in session.transcript][1:] == ["first", "Analysis complete."]


def test_reply_for_replaced_data_is_discarded(dataset, make_event):
    replacement = Dataset(events=(make_event("C"),))

    class ReloadingAnalyst(StubAnalyst):
        def analyze(self, events, artifacts, question):
            session.load(replacement)
            return super().analyze(events, artifacts, question)

    session = Session(ReloadingAnalyst())
    session.load(dataset)
    reply = session.ask("question")

    assert reply.content == "Analysis complete."
    assert session.dataset is replacement
    assert [m.content for m in session.transcript] == [GREETING]


def test_ask_without_analyst(dataset):
    session = Session()
    session.load(dataset)
    with pytest.raises(AnalysisError):
        session.ask("question")


def test_unexpected_analyst_error_becomes_failure_reply(dataset):
    session = Session(StubAnalyst(error=RuntimeError("connection reset")))
    session.load(dataset)

    reply = session.ask("anything odd?")

    assert reply.role is Role.ANALYST
    assert reply.content == FAILURE_MESSAGE
    assert [m.content for m in session.transcript] == [GREETING, "anything odd?", FAILURE_MESSAGE]
    assert not session.request_in_flight
