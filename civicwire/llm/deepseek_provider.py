# civicwire/llm/deepseek_provider.py
"""
DeepSeek story analysis provider.

DeepSeek exposes an OpenAI-compatible chat completions API, so this uses the
OpenAI client pointed at the DeepSeek base URL.
"""

from __future__ import annotations

import os
from typing import Optional

import openai
from openai import OpenAI

from civicwire.constants import AnalysisLimits
from civicwire.llm.base import AnalysisError, ArticleInput, StoryAnalyzer
from civicwire.llm.prompts import DEEPSEEK_SYSTEM_PROMPT, DEEPSEEK_USER_TEMPLATE
from civicwire.logging_config import log_llm_call


class DeepSeekAnalyzer(StoryAnalyzer):
    """DeepSeek-based story analyzer."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        client: Optional[OpenAI] = None,
    ):
        self._api_key = api_key or os.getenv("DEEPSEEK_API_KEY")
        self._model = model or os.getenv("DEEPSEEK_MODEL", "deepseek-chat")
        self._base_url = base_url or os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com")
        self._timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return "deepseek"

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def client(self) -> OpenAI:
        """Lazy-load the API client."""
        if self._client is None:
            self._client = OpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=0,
            )
        return self._client

    def generate(self, article: ArticleInput) -> str:
        """Run a chat completion and return the first choice's content."""
        if not self._api_key:
            raise AnalysisError("DEEPSEEK_API_KEY is missing.")

        user_message = DEEPSEEK_USER_TEMPLATE.format(
            title=article.title,
            source=article.source,
            description=article.description,
            url=article.url,
        )

        with log_llm_call(self.name, self._model) as metrics:
            try:
                response = self.client.chat.completions.create(
                    model=self._model,
                    temperature=AnalysisLimits.TEMPERATURE,
                    messages=[
                        {"role": "system", "content": DEEPSEEK_SYSTEM_PROMPT},
                        {"role": "user", "content": user_message},
                    ],
                )
            except openai.APIStatusError as e:
                raise AnalysisError(f"DeepSeek API failed with {e.status_code}") from e
            except openai.OpenAIError as e:
                raise AnalysisError(f"DeepSeek request failed: {e}") from e

            usage = getattr(response, "usage", None)
            if usage is not None:
                metrics["tokens_in"] = usage.prompt_tokens or 0
                metrics["tokens_out"] = usage.completion_tokens or 0

            text = None
            if response.choices:
                message = response.choices[0].message
                text = message.content if message else None

            if not text:
                raise AnalysisError("DeepSeek response did not include text output.")
            return text
