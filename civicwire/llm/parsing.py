# civicwire/llm/parsing.py
"""
Extraction and normalization of model output.

Models sometimes wrap the JSON in commentary, omit fields, or return scores
outside the expected range. Normalization always yields a complete
StoryAnalysis.
"""

from __future__ import annotations

import json
import math
from typing import Any, Dict, List

from civicwire.constants import AnalysisLimits
from civicwire.llm.base import AnalysisError, StoryAnalysis

FALLBACK_SUMMARY = "No summary generated."
FALLBACK_JUST_FACTS = "No fact-only summary generated."
FALLBACK_LEFT = "Left-leaning framing was not detected clearly."
FALLBACK_RIGHT = "Right-leaning framing was not detected clearly."
FALLBACK_HISTORY = "Historical comparison is currently unavailable for this story."


def extract_json(raw: str) -> str:
    """
    Return the substring from the first '{' to the last '}' inclusive.

    Raises:
        AnalysisError: If no such bounds exist
    """
    start = raw.find("{") if raw else -1
    end = raw.rfind("}") if raw else -1
    if start == -1 or end == -1 or end <= start:
        raise AnalysisError("No JSON object found in LLM response.")
    return raw[start : end + 1]


def parse_analysis(raw: str) -> Dict[str, Any]:
    """Extract and decode the JSON object from raw model text."""
    try:
        data = json.loads(extract_json(raw))
    except json.JSONDecodeError as e:
        raise AnalysisError(f"LLM response was not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise AnalysisError("LLM response JSON was not an object.")
    return data


def _text(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback


def _string_list(value: Any, cap: int) -> List[str]:
    if not isinstance(value, list):
        return []
    cleaned = [str(entry).strip() for entry in value if entry]
    return [entry for entry in cleaned if entry][:cap]


def _confidence(value: Any) -> int:
    if isinstance(value, bool):
        value = None
    try:
        score = float(value) if value is not None else float(AnalysisLimits.CONFIDENCE_DEFAULT)
    except (TypeError, ValueError):
        score = float(AnalysisLimits.CONFIDENCE_DEFAULT)
    if math.isnan(score):
        score = float(AnalysisLimits.CONFIDENCE_DEFAULT)

    # Round half up, then clamp
    rounded = math.floor(score + 0.5) if math.isfinite(score) else score
    return int(max(AnalysisLimits.CONFIDENCE_MIN, min(AnalysisLimits.CONFIDENCE_MAX, rounded)))


def normalize_analysis(data: Dict[str, Any]) -> StoryAnalysis:
    """
    Fill fallbacks, cap lists and clamp confidence.

    Accepts camelCase keys (as requested in the prompt) with snake_case
    accepted as an alternative.
    """
    def pick(camel: str, snake: str) -> Any:
        value = data.get(camel)
        return value if value is not None else data.get(snake)

    return StoryAnalysis(
        summary=_text(data.get("summary"), FALLBACK_SUMMARY),
        just_facts=_text(pick("justFacts", "just_facts"), FALLBACK_JUST_FACTS),
        left_perspective=_text(pick("leftPerspective", "left_perspective"), FALLBACK_LEFT),
        right_perspective=_text(pick("rightPerspective", "right_perspective"), FALLBACK_RIGHT),
        history_analysis=_text(pick("historyAnalysis", "history_analysis"), FALLBACK_HISTORY),
        historical_comparisons=_string_list(
            pick("historicalComparisons", "historical_comparisons"),
            AnalysisLimits.MAX_HISTORICAL_COMPARISONS,
        ),
        factual_points=_string_list(
            pick("factualPoints", "factual_points"),
            AnalysisLimits.MAX_FACTUAL_POINTS,
        ),
        confidence=_confidence(data.get("confidence")),
    )
