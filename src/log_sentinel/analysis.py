"""Client for the external text-analysis service."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from openai import OpenAI, OpenAIError

from .config import AnalysisSettings
from .models import ForensicArtifact, LogEvent
from .summarizer import summarize

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """You are an expert Digital Forensics and Productivity Analyst.
You are analyzing a user's PC usage history logs and forensic artifacts (USB history, Shellbags, Recent Docs).

Your goal is to provide insights on:
1. Productivity trends (Deep work vs Distraction).
2. Data Exfiltration Risks: Look for USB usage combined with sensitive file access.
3. Anomalies: Strange app usage or access to system folders via Shellbags.
4. Provide a "Threat Score" estimate (0-100) based on the artifacts.

Be professional, concise, and helpful. Use Markdown for formatting.
Do not invent data. Base your analysis only on the provided summary."""

SERVICE_ERROR_MESSAGE = (
    "Error communicating with AI service. Please check your API key or try again."
)
EMPTY_RESPONSE_MESSAGE = "No analysis could be generated."


class AnalysisError(Exception):
    """Raised when an analysis request cannot be issued."""


class AnalysisConfigurationError(AnalysisError):
    pass


def build_prompt(digest: str, question: str) -> str:
    return f"Context Data:\n{digest}\n\nUser Question: {question}"


class AnalysisClient:
    """Send the digest of a dataset and a question to a chat-completions endpoint.

    Requests are made once; transport and API failures come back as
    :data:`SERVICE_ERROR_MESSAGE` rather than raising.
    """

    def __init__(self, settings: AnalysisSettings, client: Optional[Any] = None) -> None:
        self.settings = settings
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self.settings.is_configured

    def analyze(
        self,
        events: Sequence[LogEvent],
        artifacts: Sequence[ForensicArtifact],
        question: str,
    ) -> str:
        client = self._get_client()
        prompt = build_prompt(summarize(events, artifacts), question)
        logger.debug("Sending analysis request (%d prompt chars).", len(prompt))
        try:
            response = client.chat.completions.create(
                model=self.settings.model,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": prompt},
                ],
            )
        except OpenAIError:
            logger.exception("Analysis request to %s failed.", self.settings.base_url)
            return SERVICE_ERROR_MESSAGE

        if not response.choices:
            return EMPTY_RESPONSE_MESSAGE
        return response.choices[0].message.content or EMPTY_RESPONSE_MESSAGE

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.settings.is_configured:
                raise AnalysisConfigurationError(
                    "API key is missing. Set LOGSENTINEL_API_KEY or GEMINI_API_KEY."
                )
            self._client = OpenAI(
                api_key=self.settings.api_key,
                base_url=self.settings.base_url,
                timeout=self.settings.timeout_seconds,
                max_retries=0,
            )
        return self._client
