"""Configuration models and helpers for LogSentinel."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass(slots=True)
class AnalysisSettings:
    """Connection settings for the external text-analysis service."""

    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AnalysisSettings":
        env = os.environ if environ is None else environ
        timeout = env.get("LOGSENTINEL_TIMEOUT")
        return cls(
            api_key=env.get("LOGSENTINEL_API_KEY") or env.get("GEMINI_API_KEY") or None,
            model=env.get("LOGSENTINEL_MODEL") or DEFAULT_MODEL,
            base_url=env.get("LOGSENTINEL_BASE_URL") or DEFAULT_BASE_URL,
            timeout_seconds=float(timeout) if timeout else DEFAULT_TIMEOUT_SECONDS,
        )

    def with_overrides(
        self,
        *,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> "AnalysisSettings":
        return replace(
            self,
            model=model or self.model,
            base_url=base_url or self.base_url,
            timeout_seconds=timeout_seconds if timeout_seconds is not None else self.timeout_seconds,
        )
