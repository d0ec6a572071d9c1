# civicwire/llm/base.py
"""
Base interface for story analysis providers.
Allows swapping between Gemini, DeepSeek, or other providers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


class AnalysisError(Exception):
    """The model call failed or its output could not be parsed."""


@dataclass
class ArticleInput:
    """Minimal article descriptor sent to the model."""
    title: str
    source: str
    description: str
    url: str


@dataclass
class StoryAnalysis:
    """Normalized journalistic analysis of one article."""
    summary: str
    just_facts: str
    left_perspective: str
    right_perspective: str
    history_analysis: str
    historical_comparisons: List[str] = field(default_factory=list)
    factual_points: List[str] = field(default_factory=list)
    confidence: int = 72

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class StoryAnalyzer(ABC):
    """Abstract base class for story analysis providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'gemini', 'deepseek')."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model being used (e.g., 'gemini-2.0-flash')."""
        pass

    @abstractmethod
    def generate(self, article: ArticleInput) -> str:
        """
        Ask the model to analyze the article.

        Args:
            article: Title, source, description and URL of the article

        Returns:
            Raw model text, expected to contain a JSON object

        Raises:
            AnalysisError: If the call fails or returns no text
        """
        pass

    def analyze(self, article: ArticleInput) -> StoryAnalysis:
        """Run the model and normalize its structured output."""
        from civicwire.llm.parsing import normalize_analysis, parse_analysis

        return normalize_analysis(parse_analysis(self.generate(article)))
