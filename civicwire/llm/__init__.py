# civicwire/llm/__init__.py
"""
Story analysis provider abstraction layer.

Usage:
    from civicwire.llm import get_story_analyzer

    analyzer = get_story_analyzer()  # Uses LLM_PROVIDER from settings
    analysis = analyzer.analyze(article)
"""

from __future__ import annotations

from typing import Optional

from civicwire.config import Settings, get_settings
from civicwire.llm.base import (
    AnalysisError,
    ArticleInput,
    StoryAnalysis,
    StoryAnalyzer,
)

__all__ = [
    "AnalysisError",
    "ArticleInput",
    "StoryAnalysis",
    "StoryAnalyzer",
    "get_story_analyzer",
]


def get_story_analyzer(
    provider_name: Optional[str] = None,
    settings: Optional[Settings] = None,
    **kwargs,
) -> StoryAnalyzer:
    """
    Factory function to get a story analyzer instance.

    Args:
        provider_name: Provider to use ('gemini' or 'deepseek').
                      If not provided, uses LLM_PROVIDER (default: 'gemini')
        settings: Settings to read keys and models from (default: cached settings)
        **kwargs: Additional arguments passed to the provider constructor

    Returns:
        Configured StoryAnalyzer instance

    Example:
        analyzer = get_story_analyzer()  # Uses default
        analyzer = get_story_analyzer("deepseek", model="deepseek-reasoner")
    """
    settings = settings or get_settings()
    name = (provider_name or settings.LLM_PROVIDER).lower().strip()

    if name == "gemini":
        from civicwire.llm.gemini_provider import GeminiAnalyzer

        kwargs.setdefault("api_key", settings.GEMINI_API_KEY)
        kwargs.setdefault("model", settings.GEMINI_MODEL)
        kwargs.setdefault("timeout", settings.LLM_TIMEOUT_SECONDS)
        return GeminiAnalyzer(**kwargs)

    if name == "deepseek":
        from civicwire.llm.deepseek_provider import DeepSeekAnalyzer

        kwargs.setdefault("api_key", settings.DEEPSEEK_API_KEY)
        kwargs.setdefault("model", settings.DEEPSEEK_MODEL)
        kwargs.setdefault("base_url", settings.DEEPSEEK_BASE_URL)
        kwargs.setdefault("timeout", settings.LLM_TIMEOUT_SECONDS)
        return DeepSeekAnalyzer(**kwargs)

    raise ValueError(
        f"Unknown LLM provider: {name}. Available: {', '.join(Settings.SUPPORTED_PROVIDERS)}"
    )
