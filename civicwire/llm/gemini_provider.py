# civicwire/llm/gemini_provider.py
"""
Gemini story analysis provider (Generative Language REST API).
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import httpx

from civicwire.constants import AnalysisLimits
from civicwire.llm.base import AnalysisError, ArticleInput, StoryAnalyzer
from civicwire.llm.prompts import GEMINI_ANALYSIS_TEMPLATE, schema_json
from civicwire.logging_config import log_llm_call
from civicwire.models import utcnow

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


class GeminiAnalyzer(StoryAnalyzer):
    """Gemini-based story analyzer."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 60.0,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize Gemini analyzer.

        Args:
            api_key: Gemini API key. If not provided, uses GEMINI_API_KEY env var.
                     A missing key only fails when a call is made.
            model: Model to use. Defaults to GEMINI_MODEL env var or gemini-2.0-flash.
            timeout: Request timeout in seconds
            client: Optional pre-built HTTP client (tests inject a mock transport)
        """
        self._api_key = api_key or os.getenv("GEMINI_API_KEY")
        self._model = model or os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
        self._timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return self._model

    def _build_payload(self, article: ArticleInput) -> Dict[str, Any]:
        prompt = GEMINI_ANALYSIS_TEMPLATE.format(
            schema=schema_json(),
            today=utcnow().isoformat() + "Z",
            title=article.title,
            source=article.source,
            description=article.description,
            url=article.url,
        )
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": AnalysisLimits.TEMPERATURE,
                "responseMimeType": "application/json",
            },
        }

    def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        url = f"{GEMINI_API_BASE}/models/{self._model}:generateContent"
        params = {"key": self._api_key}
        if self._client is not None:
            return self._client.post(url, params=params, json=payload)
        with httpx.Client(timeout=self._timeout) as client:
            return client.post(url, params=params, json=payload)

    def generate(self, article: ArticleInput) -> str:
        """Call generateContent and return the first candidate's text."""
        if not self._api_key:
            raise AnalysisError("GEMINI_API_KEY is missing.")

        with log_llm_call(self.name, self._model) as metrics:
            try:
                response = self._post(self._build_payload(article))
            except httpx.HTTPError as e:
                raise AnalysisError(f"Gemini request failed: {e}") from e

            if not response.is_success:
                raise AnalysisError(f"Gemini API failed with {response.status_code}")

            try:
                data = response.json()
            except ValueError as e:
                raise AnalysisError("Gemini response was not JSON.") from e
            if not isinstance(data, dict):
                raise AnalysisError("Gemini response was not a JSON object.")

            usage = data.get("usageMetadata") or {}
            metrics["tokens_in"] = usage.get("promptTokenCount", 0)
            metrics["tokens_out"] = usage.get("candidatesTokenCount", 0)

            try:
                text = data["candidates"][0]["content"]["parts"][0].get("text")
            except (KeyError, IndexError, TypeError, AttributeError):
                text = None

            if not text:
                raise AnalysisError("Gemini response did not include text output.")
            return text
