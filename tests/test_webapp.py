import json

import pytest
from fastapi.testclient import TestClient

from conftest import StubAnalyst
from log_sentinel.config import AnalysisSettings
from log_sentinel.session import FAILURE_MESSAGE, GREETING, RequestInFlightError
from log_sentinel.webapp import create_app

LOGS = [
    {"timestamp": "2025-01-06T09:00:00.000Z", "application": "A", "durationSeconds": 3600, "category": "Development"},
    {"timestamp": "2025-01-05T09:00:00.000Z", "application": "B", "durationSeconds": 3600, "category": "Entertainment", "windowTitle": "Netflix"},
]


@pytest.fixture
def analyst():
    return StubAnalyst(reply="Low risk.")


@pytest.fixture
def client(analyst):
    app = create_app(settings=AnalysisSettings(), analyst=analyst)
    return TestClient(app)


def test_initial_status_and_empty_overview(client):
    status = client.get("/api/status").json()
    assert status["events"] == 0
    assert status["view"] == "UPLOAD"
    assert status["analysis_configured"] is True
    assert client.get("/api/overview").json() == {"empty": True}


def test_upload_rejects_bad_documents(client):
    response = client.post("/api/upload", content=b"{broken")
    assert response.status_code == 400
    assert response.json()["detail"] == "Failed to parse JSON file."

    response = client.post("/api/upload", content=json.dumps({"other": []}))
    assert response.status_code == 400
    assert client.get("/api/status").json()["events"] == 0


def test_upload_and_overview(client):
    response = client.post("/api/upload", content=json.dumps(LOGS))
    assert response.status_code == 200
    assert response.json()["view"] == "DASHBOARD"

    overview = client.get("/api/overview").json()
    assert overview["empty"] is False
    assert overview["total_hours"] == "2.0"
    assert overview["productivity_score"] == 50
    assert overview["top_apps"] == [{"name": "A", "minutes": 60}, {"name": "B", "minutes": 60}]
    assert [day["date"] for day in overview["daily_activity"]] == ["2025-01-05", "2025-01-06"]


def test_event_browsing(client):
    client.post("/api/upload", content=json.dumps(LOGS))

    body = client.get("/api/events", params={"search": "netflix"}).json()
    assert body["total"] == 2
    assert [e["application"] for e in body["events"]] == ["B"]
    assert body["categories"] == ["All", "Development", "Entertainment"]

    body = client.get("/api/events", params={"category": "Development"}).json()
    assert [e["application"] for e in body["events"]] == ["A"]

    assert client.get("/api/events", params={"sort": "bogus"}).status_code == 400
    assert client.get("/api/events", params={"category": "Gaming"}).status_code == 400


def test_forensic_demo_artifacts(client):
    status = client.post("/api/demo", params={"forensics": "true"}).json()
    assert status["view"] == "FORENSICS"
    assert status["artifacts"] == 12

    body = client.get("/api/artifacts").json()
    assert body["counts"] == {"usb_connections": 3, "recent_documents": 5, "high_risk": 4}

    usb = client.get("/api/artifacts", params={"type": "USB_DEVICE"}).json()["artifacts"]
    assert len(usb) == 3
    assert client.get("/api/artifacts", params={"type": "PREFETCH"}).status_code == 400

    digest = client.get("/api/digest").text
    assert "HIGH RISK FILE: passwords.txt" in digest


def test_analysis_conversation(client, analyst):
    client.post("/api/upload", content=json.dumps(LOGS))

    response = client.post("/api/analysis", json={"question": "How productive?"})
    assert response.status_code == 200
    assert response.json()["reply"]["content"] == "Low risk."
    assert analyst.calls[0][2] == "How productive?"

    messages = client.get("/api/transcript").json()["messages"]
    assert [(m["role"], m["content"]) for m in messages] == [
        ("ai", GREETING),
        ("user", "How productive?"),
        ("ai", "Low risk."),
    ]

    assert client.post("/api/analysis", json={"question": "  "}).status_code == 400


def test_analysis_crash_answers_with_failure_message(client, analyst):
    client.post("/api/upload", content=json.dumps(LOGS))
    analyst.error = KeyError("choices")

    response = client.post("/api/analysis", json={"question": "Anything odd?"})
    assert response.status_code == 200
    assert response.json()["reply"]["content"] == FAILURE_MESSAGE

    messages = client.get("/api/transcript").json()["messages"]
    assert [m["content"] for m in messages][-2:] == ["Anything odd?", FAILURE_MESSAGE]
    assert client.get("/api/status").json()["request_in_flight"] is False


def test_analysis_conflict_while_in_flight(client, monkeypatch):
    session = client.app.state.session

    def busy(question):
        raise RequestInFlightError("An analysis request is already in progress.")

    monkeypatch.setattr(session, "ask", busy)
    response = client.post("/api/analysis", json={"question": "again"})
    assert response.status_code == 409


def test_analysis_unavailable_without_api_key():
    client = TestClient(create_app(settings=AnalysisSettings()))
    assert client.get("/api/status").json()["analysis_configured"] is False
    response = client.post("/api/analysis", json={"question": "hello"})
    assert response.status_code == 503


def test_export_round_trip(client):
    client.post("/api/demo", params={"forensics": "true"})
    before = client.get("/api/overview").json()

    exported = client.get("/api/export")
    assert exported.headers["content-disposition"].endswith('"forensics_data.json"')

    client.delete("/api/session")
    assert client.get("/api/overview").json() == {"empty": True}

    assert client.post("/api/upload", content=exported.content).status_code == 200
    assert client.get("/api/overview").json() == before


def test_collector_script_download(client):
    response = client.get("/api/collector-script")
    assert response.status_code == 200
    assert "collect_data.ps1" in response.headers["content-disposition"]
    assert "ConvertTo-Json" in response.text


def test_index_page(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "LogSentinel" in response.text
