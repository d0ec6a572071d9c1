# civicwire/schemas/jobs.py
"""
Schemas for ingestion job endpoints.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceErrorResponse(BaseModel):
    """A feed source that could not be read during a run."""

    model_config = _camel

    source: str
    error: str


class DailyIngestResponse(BaseModel):
    """
    Result of a successful ingestion run.
    POST /api/jobs/daily-ingest
    """

    model_config = _camel

    ok: bool = True
    run_id: str
    provider: str
    processed: int
    created: int
    skipped: int
    pruned: int = 0
    source_errors: list[SourceErrorResponse] = Field(default_factory=list)


class JobErrorResponse(BaseModel):
    """Error body for job endpoints. runId is present once a run exists."""

    model_config = _camel

    error: str
    run_id: str | None = None


class IngestRunResponse(BaseModel):
    """
    Ledger view of one ingestion run.
    GET /api/jobs/runs/{run_id}
    """

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    status: str = Field(..., description="running|success|failed")
    provider: str
    triggered_by: str = Field(..., description="cron|manual")
    actor_id: str | None = None
    started_at: datetime
    finished_at: datetime | None = None
    processed: int
    created: int
    skipped: int
    pruned: int
    error_message: str | None = None
    source_errors: list[SourceErrorResponse] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)

    @field_validator("source_errors", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> list:
        return v if isinstance(v, list) else []


class IngestRunListResponse(BaseModel):
    """GET /api/jobs/runs"""

    model_config = _camel

    runs: list[IngestRunResponse] = Field(default_factory=list)
    total: int = 0
