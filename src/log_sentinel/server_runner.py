"""Helpers to launch the local web dashboard."""

from __future__ import annotations

import logging
import threading
import time
import webbrowser
from typing import Optional

import uvicorn

from .analysis import AnalysisClient
from .config import AnalysisSettings
from .demo import demo_dataset
from .session import Session
from .webapp import create_app


def run_dashboard(
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    settings: Optional[AnalysisSettings] = None,
    open_browser: bool = True,
    load_demo: bool = False,
    log_level: str = "info",
) -> None:
    """Start the FastAPI dashboard and optional browser tab."""
    resolved_settings = settings or AnalysisSettings.from_env()
    session = Session(AnalysisClient(resolved_settings))
    if load_demo:
        session.load(demo_dataset(forensics=True))
    app = create_app(settings=resolved_settings, session=session)

    if open_browser:
        url = f"http://{host}:{port}"
        threading.Thread(
            target=_launch_browser_after_delay, args=(url,), daemon=True
        ).start()

    logging.getLogger("uvicorn.error").setLevel(log_level.upper())
    uvicorn.run(app, host=host, port=port, log_level=log_level)


def _launch_browser_after_delay(url: str) -> None:
    time.sleep(1.0)
    try:
        webbrowser.open(url)
    except Exception:
        logging.getLogger(__name__).exception("Failed to launch browser for %s", url)
