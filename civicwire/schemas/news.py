# civicwire/schemas/news.py
"""
Schemas for the public news feed.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel


class StoryResponse(BaseModel):
    """
    One analyzed story as served to readers.
    GET /api/news
    """

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Story ID (UUID)")
    title: str
    url: str
    image_url: str | None = None
    source: str
    topic: str
    published_at: datetime
    summary: str
    just_facts: str
    left_perspective: str
    right_perspective: str
    history_analysis: str = Field("", description="Empty when the model produced none")
    historical_comparisons: list[str] = Field(default_factory=list)
    factual_points: list[str] = Field(default_factory=list)
    confidence: int
    bias_label: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)

    @field_validator("history_analysis", mode="before")
    @classmethod
    def empty_history(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator("historical_comparisons", "factual_points", mode="before")
    @classmethod
    def list_or_empty(cls, v: Any) -> list:
        if not isinstance(v, list):
            return []
        return [str(entry) for entry in v]

    @field_serializer("published_at")
    def serialize_published_at(self, v: datetime) -> str:
        # Stored as naive UTC
        return v.isoformat(timespec="milliseconds") + "Z"


class FeedSourceResponse(BaseModel):
    """A configured RSS source."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    feed_url: str
    topic: str
    bias_label: str

    @field_validator("bias_label", mode="before")
    @classmethod
    def label_value(cls, v: Any) -> str:
        return getattr(v, "value", v)
