# civicwire/routers/jobs.py
"""
Ingestion job endpoints.

POST /api/jobs/daily-ingest - Run one ingestion (scheduler, shared secret, or admin)
GET  /api/jobs/runs - Recent ingest runs (admin)
GET  /api/jobs/runs/{run_id} - One ingest run (admin)
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from civicwire.auth import TriggerContext, authorize_ingest_trigger, require_admin_key
from civicwire.config import Settings, get_settings
from civicwire.database import get_db
from civicwire.routers.news import invalidate_news_cache
from civicwire.schemas.jobs import (
    DailyIngestResponse,
    IngestRunListResponse,
    IngestRunResponse,
    JobErrorResponse,
    SourceErrorResponse,
)
from civicwire.services.ingest_orchestrator import IngestOrchestrator
from civicwire.services.run_ledger import IngestRunInProgressError, RunLedger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def _error(status_code: int, error: str, run_id: str | None = None) -> JSONResponse:
    body = JobErrorResponse(error=error, run_id=run_id).model_dump(by_alias=True, exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


@router.post(
    "/daily-ingest",
    response_model=DailyIngestResponse,
    responses={401: {"model": JobErrorResponse}, 409: {"model": JobErrorResponse}, 500: {"model": JobErrorResponse}},
)
def daily_ingest(
    trigger: TriggerContext = Depends(authorize_ingest_trigger),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Run the daily ingestion pipeline once.

    Fetches every configured feed, selects a bias-balanced batch of fresh
    items, analyzes unseen URLs, prunes expired stories and records the run
    in the ledger. Designed to be called by the platform scheduler.
    """
    orchestrator = IngestOrchestrator(db, settings=settings)
    try:
        result = orchestrator.run(trigger.origin, actor_id=trigger.actor_id)
    except IngestRunInProgressError as e:
        logger.warning(str(e), extra={"event": "ingest_run_rejected"})
        return _error(409, str(e))
    finally:
        invalidate_news_cache()

    if not result.ok:
        return _error(500, result.error or "Ingest run failed.", str(result.run_id))

    return DailyIngestResponse(
        run_id=str(result.run_id),
        provider=result.provider,
        processed=result.processed,
        created=result.created,
        skipped=result.skipped,
        pruned=result.pruned,
        source_errors=[
            SourceErrorResponse(source=failure.source, error=failure.error)
            for failure in result.source_errors
        ],
    )


@router.get("/runs", response_model=IngestRunListResponse)
def list_runs(
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    _: None = Depends(require_admin_key),
) -> IngestRunListResponse:
    """Most recent ingest runs first."""
    runs = RunLedger(db).list_runs(limit)
    return IngestRunListResponse(
        runs=[IngestRunResponse.model_validate(run) for run in runs],
        total=len(runs),
    )


@router.get("/runs/{run_id}", response_model=IngestRunResponse)
def get_run(
    run_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: None = Depends(require_admin_key),
) -> IngestRunResponse:
    run = RunLedger(db).get_run(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail=f"Ingest run {run_id} not found")
    return IngestRunResponse.model_validate(run)
