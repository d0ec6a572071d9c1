# civicwire/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.
"""

from civicwire.schemas.jobs import (
    DailyIngestResponse,
    IngestRunListResponse,
    IngestRunResponse,
    JobErrorResponse,
    SourceErrorResponse,
)
from civicwire.schemas.news import (
    FeedSourceResponse,
    StoryResponse,
)

__all__ = [
    "DailyIngestResponse",
    "FeedSourceResponse",
    "IngestRunListResponse",
    "IngestRunResponse",
    "JobErrorResponse",
    "SourceErrorResponse",
    "StoryResponse",
]
