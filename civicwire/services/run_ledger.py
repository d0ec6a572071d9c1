# civicwire/services/run_ledger.py
"""
Run ledger: persisted audit trail of ingestion runs.

Each run is inserted as running and closed by exactly one terminal update.
Only one run may be running at a time; a running record older than the
stale window is treated as abandoned and closed as failed before a new run
is admitted.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from civicwire.models import IngestRun, IngestRunStatus, IngestTrigger, utcnow

logger = logging.getLogger(__name__)


class IngestRunInProgressError(Exception):
    """Another ingestion run is still running."""

    def __init__(self, run_id: Optional[uuid.UUID] = None):
        detail = f" ({run_id})" if run_id else ""
        super().__init__(f"An ingest run is already in progress{detail}.")
        self.run_id = run_id


class RunAlreadyClosedError(Exception):
    """A terminal update was attempted on a run that is no longer running."""


@dataclass
class RunCounters:
    """Counters accumulated while a run executes."""
    processed: int = 0
    created: int = 0
    skipped: int = 0
    pruned: int = 0
    source_errors: List[dict] = field(default_factory=list)


class RunLedger:
    """Create-then-close-once bookkeeping for IngestRun records."""

    def __init__(self, db: Session, stale_after_minutes: int = 60):
        self.db = db
        self.stale_after = timedelta(minutes=stale_after_minutes)

    def _active_run(self) -> Optional[IngestRun]:
        return (
            self.db.query(IngestRun)
            .filter(IngestRun.status == IngestRunStatus.RUNNING.value)
            .order_by(IngestRun.started_at.desc())
            .first()
        )

    def start_run(
        self,
        provider: str,
        triggered_by: IngestTrigger,
        actor_id: Optional[str] = None,
    ) -> IngestRun:
        """
        Insert a running record.

        Raises:
            IngestRunInProgressError: If a non-stale run is still running
        """
        active = self._active_run()
        if active is not None:
            if utcnow() - active.started_at < self.stale_after:
                raise IngestRunInProgressError(active.id)
            logger.warning(
                f"Closing abandoned ingest run {active.id} started at {active.started_at}",
                extra={"event": "ingest_run_abandoned"},
            )
            self._close(
                active,
                IngestRunStatus.FAILED,
                error_message="Run abandoned: exceeded stale window without completing.",
            )

        run = IngestRun(
            id=uuid.uuid4(),
            status=IngestRunStatus.RUNNING.value,
            provider=provider,
            triggered_by=triggered_by.value,
            actor_id=actor_id,
            started_at=utcnow(),
        )
        self.db.add(run)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost the race against a concurrent trigger
            self.db.rollback()
            raise IngestRunInProgressError() from e
        self.db.refresh(run)
        return run

    def _close(
        self,
        run: IngestRun,
        status: IngestRunStatus,
        counters: Optional[RunCounters] = None,
        error_message: Optional[str] = None,
    ) -> IngestRun:
        if run.status != IngestRunStatus.RUNNING.value:
            raise RunAlreadyClosedError(f"Ingest run {run.id} is already {run.status}")

        run.status = status.value
        run.finished_at = utcnow()
        run.error_message = error_message
        if counters is not None:
            run.processed = counters.processed
            run.created = counters.created
            run.skipped = counters.skipped
            run.pruned = counters.pruned
            run.source_errors = list(counters.source_errors) or None
        self.db.commit()
        self.db.refresh(run)
        return run

    def complete_run(self, run: IngestRun, counters: RunCounters) -> IngestRun:
        """Close the run as success with its final counters."""
        return self._close(run, IngestRunStatus.SUCCESS, counters)

    def fail_run(self, run: IngestRun, counters: RunCounters, error_message: str) -> IngestRun:
        """Close the run as failed, keeping whatever counters accumulated."""
        return self._close(run, IngestRunStatus.FAILED, counters, error_message)

    def get_run(self, run_id: uuid.UUID) -> Optional[IngestRun]:
        return self.db.query(IngestRun).filter(IngestRun.id == run_id).first()

    def list_runs(self, limit: int = 20) -> List[IngestRun]:
        """Most recent runs first."""
        return (
            self.db.query(IngestRun)
            .order_by(IngestRun.started_at.desc())
            .limit(limit)
            .all()
        )
