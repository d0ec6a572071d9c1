# civicwire/llm/prompts.py
"""
Prompts for story analysis.
"""

import json

ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {"type": "string"},
        "justFacts": {"type": "string"},
        "leftPerspective": {"type": "string"},
        "rightPerspective": {"type": "string"},
        "historyAnalysis": {"type": "string"},
        "historicalComparisons": {"type": "array", "items": {"type": "string"}},
        "factualPoints": {"type": "array", "items": {"type": "string"}},
        "confidence": {"type": "number"},
    },
    "required": [
        "summary",
        "justFacts",
        "leftPerspective",
        "rightPerspective",
        "historyAnalysis",
        "historicalComparisons",
        "factualPoints",
        "confidence",
    ],
}

GEMINI_ANALYSIS_TEMPLATE = """You are a nonpartisan civic editor. Return strict JSON with this schema: {schema}.

Today: {today}
Article title: {title}
Source: {source}
Description: {description}
URL: {url}

Requirements:
- summary: balanced paragraph
- justFacts: factual only, no opinion language
- leftPerspective: explain left-leaning arguments fairly
- rightPerspective: explain right-leaning arguments fairly
- historyAnalysis: "What our history tells us" comparison between the current event and similar past events
- historicalComparisons: 2-4 concise historical parallels or precedents
- factualPoints: 3-5 bullet-like statements of verifiable current status
- confidence: 0-100 confidence score for factual clarity

Critical rules:
- Do NOT assert who currently holds an office unless this article explicitly states it.
- Prefer date-qualified language (e.g., "as of this report", "according to this article")."""

DEEPSEEK_SYSTEM_PROMPT = (
    "You are a nonpartisan civic editor. Always return strict JSON with fields summary, "
    "justFacts, leftPerspective, rightPerspective, historyAnalysis, historicalComparisons, "
    "factualPoints, confidence. Keep the summary balanced and justFacts free of opinion "
    "language. Avoid stating current officeholders unless explicitly provided in the "
    "article, and prefer date-qualified language such as \"according to this article\"."
)

DEEPSEEK_USER_TEMPLATE = """Analyze this article.
Title: {title}
Source: {source}
Description: {description}
URL: {url}

Return JSON only."""


def schema_json() -> str:
    return json.dumps(ANALYSIS_SCHEMA)
