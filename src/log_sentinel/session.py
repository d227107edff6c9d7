"""The single owner of the loaded dataset and the analysis conversation."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .aggregation import Statistics, aggregate
from .analysis import AnalysisClient, AnalysisError
from .models import Dataset

logger = logging.getLogger(__name__)

GREETING = (
    "I have analyzed the available data. You can ask me about productivity trends, "
    "anomalies, or forensic artifacts like USB history and recent file access. "
    "What would you like to know?"
)
FAILURE_MESSAGE = "Sorry, I encountered an error processing your request."


class View(str, Enum):
    UPLOAD = "UPLOAD"
    DASHBOARD = "DASHBOARD"
    FORENSICS = "FORENSICS"


class Role(str, Enum):
    USER = "user"
    ANALYST = "ai"


@dataclass(frozen=True, slots=True)
class ChatMessage:
    role: Role
    content: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }


class RequestInFlightError(RuntimeError):
    """Raised when a question is asked while another is still being answered."""


class Session:
    """Hold the current dataset, its statistics and the chat transcript.

    Readers get immutable snapshots. Only one analysis request may be
    outstanding at a time; a reply that arrives after the data was replaced
    is dropped instead of leaking into the new conversation.
    """

    def __init__(self, analyst: Optional[AnalysisClient] = None) -> None:
        self.analyst = analyst
        self._lock = threading.Lock()
        self._request_slot = threading.Lock()
        self._generation = 0
        self._dataset = Dataset()
        self._statistics: Optional[Statistics] = None
        self._view = View.UPLOAD
        self._transcript: list[ChatMessage] = [ChatMessage(Role.ANALYST, GREETING)]

    @property
    def dataset(self) -> Dataset:
        with self._lock:
            return self._dataset

    @property
    def statistics(self) -> Optional[Statistics]:
        with self._lock:
            return self._statistics

    @property
    def view(self) -> View:
        with self._lock:
            return self._view

    @property
    def transcript(self) -> tuple[ChatMessage, ...]:
        with self._lock:
            return tuple(self._transcript)

    @property
    def request_in_flight(self) -> bool:
        return self._request_slot.locked()

    def load(self, dataset: Dataset) -> None:
        """Replace the current data wholesale and start a new conversation."""
        statistics = aggregate(dataset.events)
        if not dataset.events:
            view = View.UPLOAD
        elif dataset.artifacts:
            view = View.FORENSICS
        else:
            view = View.DASHBOARD
        with self._lock:
            self._replace_locked(dataset, statistics, view)
        logger.info(
            "Session loaded %d events and %d artifacts.",
            len(dataset.events),
            len(dataset.artifacts),
        )

    def reset(self) -> None:
        with self._lock:
            self._replace_locked(Dataset(), None, View.UPLOAD)
        logger.info("Session reset.")

    def ask(self, question: str) -> ChatMessage:
        """Record ``question``, ask the analyst and record its reply."""
        question = question.strip()
        if not question:
            raise ValueError("question must not be empty")
        if self.analyst is None:
            raise AnalysisError("No analysis service is configured.")
        if not self._request_slot.acquire(blocking=False):
            raise RequestInFlightError("An analysis request is already in progress.")
        try:
            with self._lock:
                generation = self._generation
                dataset = self._dataset
                self._transcript.append(ChatMessage(Role.USER, question))

            try:
                content = self.analyst.analyze(dataset.events, dataset.artifacts, question)
            except AnalysisError as exc:
                logger.warning("Analysis failed: %s", exc)
                content = FAILURE_MESSAGE
            except Exception:
                logger.exception("Unexpected error while analyzing question.")
                content = FAILURE_MESSAGE

            reply = ChatMessage(Role.ANALYST, content)
            with self._lock:
                if generation == self._generation:
                    self._transcript.append(reply)
                else:
                    logger.info("Discarding analysis reply for replaced session data.")
            return reply
        finally:
            self._request_slot.release()

    def _replace_locked(
        self, dataset: Dataset, statistics: Optional[Statistics], view: View
    ) -> None:
        self._generation += 1
        self._dataset = dataset
        self._statistics = statistics
        self._view = view
        self._transcript = [ChatMessage(Role.ANALYST, GREETING)]
