"""FastAPI application that exposes a local web UI and API for LogSentinel."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict

from .analysis import AnalysisClient
from .browsing import (
    SORT_FIELDS,
    artifact_counts,
    event_categories,
    filter_artifacts,
    filter_events,
)
from .collector_script import COLLECTOR_SCRIPT, SCRIPT_FILENAME
from .config import AnalysisSettings
from .demo import demo_dataset
from .ingestion import ParseFailure, export_dataset, parse_dataset
from .models import ArtifactType, Category
from .session import RequestInFlightError, Session
from .summarizer import summarize

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "forensics_data.json"


class AnalysisRequest(BaseModel):
    question: str

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    settings: Optional[AnalysisSettings] = None,
    analyst: Optional[AnalysisClient] = None,
    session: Optional[Session] = None,
) -> FastAPI:
    """Instantiate the FastAPI application around a single session."""
    resolved_settings = settings or AnalysisSettings.from_env()
    resolved_session = session or Session(analyst or AnalysisClient(resolved_settings))

    app = FastAPI(title="LogSentinel", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.session = resolved_session

    static_dir = Path(__file__).parent / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        current: Session = request.app.state.session
        dataset = current.dataset
        return {
            "events": len(dataset.events),
            "artifacts": len(dataset.artifacts),
            "view": current.view.value,
            "analysis_configured": bool(current.analyst and current.analyst.is_configured),
            "request_in_flight": current.request_in_flight,
        }

    @app.post("/api/upload")
    async def upload(request: Request) -> Dict[str, Any]:
        result = parse_dataset(await request.body())
        if isinstance(result, ParseFailure):
            raise HTTPException(status_code=400, detail=result.message)
        request.app.state.session.load(result.dataset)
        return status(request)

    @app.post("/api/demo")
    def load_demo(
        request: Request,
        forensics: bool = Query(
            default=False, description="Include simulated forensic artifacts."
        ),
    ) -> Dict[str, Any]:
        request.app.state.session.load(demo_dataset(forensics=forensics))
        return status(request)

    @app.delete("/api/session")
    def reset(request: Request) -> Dict[str, Any]:
        request.app.state.session.reset()
        return status(request)

    @app.get("/api/overview")
    def overview(request: Request) -> Dict[str, Any]:
        stats = request.app.state.session.statistics
        if stats is None:
            return {"empty": True}
        return {"empty": False, **stats.to_dict()}

    @app.get("/api/events")
    def events(
        request: Request,
        search: str = Query(default="", description="Match application or window title."),
        category: Optional[str] = Query(default=None, description="Category name or 'All'."),
        sort: str = Query(default="timestamp", description="Field to sort by."),
        desc: bool = Query(default=True, description="Sort descending."),
    ) -> Dict[str, Any]:
        all_events = request.app.state.session.dataset.events
        if sort not in SORT_FIELDS:
            raise HTTPException(status_code=400, detail="Unsupported sort field")
        matches = filter_events(
            all_events,
            search=search,
            category=_parse_category(category),
            sort_field=sort,
            descending=desc,
        )
        return {
            "total": len(all_events),
            "categories": event_categories(all_events),
            "events": [event.to_dict() for event in matches],
        }

    @app.get("/api/artifacts")
    def artifacts(
        request: Request,
        type: Optional[str] = Query(default=None, description="Artifact type or 'ALL'."),
        search: str = Query(default="", description="Match artifact name or path."),
    ) -> Dict[str, Any]:
        all_artifacts = request.app.state.session.dataset.artifacts
        matches = filter_artifacts(
            all_artifacts, artifact_type=_parse_artifact_type(type), search=search
        )
        return {
            "counts": artifact_counts(all_artifacts).to_dict(),
            "artifacts": [artifact.to_dict() for artifact in matches],
        }

    @app.get("/api/digest", response_class=PlainTextResponse)
    def digest(request: Request) -> str:
        dataset = request.app.state.session.dataset
        return summarize(dataset.events, dataset.artifacts)

    @app.get("/api/transcript")
    def transcript(request: Request) -> Dict[str, Any]:
        current: Session = request.app.state.session
        return {
            "messages": [message.to_dict() for message in current.transcript],
            "request_in_flight": current.request_in_flight,
        }

    @app.post("/api/analysis")
    def analyze(payload: AnalysisRequest, request: Request) -> Dict[str, Any]:
        current: Session = request.app.state.session
        if not payload.question.strip():
            raise HTTPException(status_code=400, detail="question is required")
        if current.analyst is None or not current.analyst.is_configured:
            raise HTTPException(
                status_code=503, detail="Analysis service is not configured."
            )
        try:
            reply = current.ask(payload.question)
        except RequestInFlightError as exc:
            logger.info("Rejected analysis request while another is outstanding.")
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return {"reply": reply.to_dict()}

    @app.get("/api/export")
    def export(request: Request) -> Response:
        body = export_dataset(request.app.state.session.dataset)
        return Response(
            content=body,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
        )

    @app.get("/api/collector-script")
    def collector_script() -> Response:
        return Response(
            content=COLLECTOR_SCRIPT,
            media_type="text/plain",
            headers={"Content-Disposition": f'attachment; filename="{SCRIPT_FILENAME}"'},
        )

    @app.get("/")
    def index(request: Request) -> FileResponse:
        index_path = (Path(__file__).parent / "static" / "index.html").resolve()
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="UI not found")
        return FileResponse(index_path)

    return app


def _parse_category(value: Optional[str]) -> Optional[Category]:
    if not value or value == "All":
        return None
    try:
        return Category(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Unknown category") from exc


def _parse_artifact_type(value: Optional[str]) -> Optional[ArtifactType]:
    if not value or value == "ALL":
        return None
    try:
        return ArtifactType(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Unknown artifact type") from exc
