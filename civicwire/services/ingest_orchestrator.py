# civicwire/services/ingest_orchestrator.py
"""
Daily ingestion orchestrator.

Pipeline (one run, sequential):
1. Open a run in the ledger (status=running)
2. Fetch feed items from every configured source
3. Keep items inside the freshness window
4. Select a bias-balanced batch
5. For each item: skip known URLs, otherwise analyze and persist
6. Prune stories older than the retention window
7. Close the run as success, or failed with the error message

An analysis failure aborts the remaining batch. Stories created before the
failure stay persisted; re-running is idempotent through URL dedup.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from civicwire.config import Settings, get_settings
from civicwire.llm import ArticleInput, StoryAnalyzer, get_story_analyzer
from civicwire.logging_config import log_run, log_stage
from civicwire.models import IngestRunStatus, IngestTrigger, utcnow
from civicwire.services.balanced_selector import select_balanced_items
from civicwire.services.feed_reader import FeedItem, FeedReader, SourceFailure
from civicwire.services.run_ledger import RunCounters, RunLedger
from civicwire.services.story_store import StoryStore

logger = logging.getLogger(__name__)


@dataclass
class IngestRunResult:
    """Summary of one orchestrated run."""
    run_id: uuid.UUID
    provider: str
    status: IngestRunStatus
    processed: int = 0
    created: int = 0
    skipped: int = 0
    pruned: int = 0
    error: Optional[str] = None
    source_errors: List[SourceFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == IngestRunStatus.SUCCESS


class IngestOrchestrator:
    """Runs one end-to-end ingestion."""

    def __init__(
        self,
        db: Session,
        settings: Optional[Settings] = None,
        feed_reader: Optional[FeedReader] = None,
        analyzer: Optional[StoryAnalyzer] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.feed_reader = feed_reader or FeedReader(
            timeout=self.settings.FEED_FETCH_TIMEOUT_SECONDS,
            max_workers=self.settings.FEED_FETCH_WORKERS,
        )
        self._analyzer = analyzer
        self._clock = clock or utcnow
        self.ledger = RunLedger(db, stale_after_minutes=self.settings.INGEST_RUN_STALE_MINUTES)
        self.stories = StoryStore(db)

    @property
    def provider(self) -> str:
        return self._analyzer.name if self._analyzer is not None else self.settings.LLM_PROVIDER

    def freshness_cutoff(self, now: datetime) -> datetime:
        return now - timedelta(hours=self.settings.freshness_hours)

    def retention_cutoff(self, now: datetime) -> datetime:
        return now - timedelta(days=self.settings.retention_days)

    def run(
        self,
        trigger: IngestTrigger,
        actor_id: Optional[str] = None,
    ) -> IngestRunResult:
        """
        Execute exactly one ingestion run.

        The caller must have authorized the trigger already.

        Raises:
            IngestRunInProgressError: If another run is active (no record is created)

        Returns:
            IngestRunResult; failures are reported in the result, not raised
        """
        provider = self.provider
        run = self.ledger.start_run(provider, trigger, actor_id=actor_id)
        run_id = run.id
        counters = RunCounters()
        source_errors: List[SourceFailure] = []

        with log_run(str(run_id)):
            logger.info(
                f"Ingest run started ({trigger.value}, provider={provider})",
                extra={"event": "ingest_run_started", "provider": provider},
            )
            try:
                analyzer = self._analyzer or get_story_analyzer(provider, self.settings)
                now = self._clock()

                with log_stage("fetch"):
                    fetched = self.feed_reader.fetch_items(self.settings.INGEST_ITEMS_PER_SOURCE)
                source_errors = fetched.errors
                counters.source_errors = [failure.to_dict() for failure in source_errors]

                cutoff = self.freshness_cutoff(now)
                fresh = [item for item in fetched.items if item.published_at >= cutoff]
                batch = select_balanced_items(fresh, self.settings.INGEST_BATCH_SIZE)
                logger.info(
                    f"Selected {len(batch)} of {len(fresh)} fresh items ({len(fetched.items)} fetched)",
                    extra={"event": "batch_selected", "items": len(batch)},
                )

                with log_stage("analyze"):
                    for item in batch:
                        self._process_item(item, analyzer, counters)

                with log_stage("prune"):
                    counters.pruned = self.stories.prune_older_than(self.retention_cutoff(now))

                self.ledger.complete_run(run, counters)
            except Exception as e:
                message = str(e) or e.__class__.__name__
                self.db.rollback()
                self.ledger.fail_run(run, counters, message)
                logger.error(
                    f"Ingest run failed: {message}",
                    extra={
                        "event": "ingest_run_failed",
                        "processed": counters.processed,
                        "stories_created": counters.created,
                        "skipped": counters.skipped,
                    },
                    exc_info=True,
                )
                return IngestRunResult(
                    run_id=run_id,
                    provider=provider,
                    status=IngestRunStatus.FAILED,
                    processed=counters.processed,
                    created=counters.created,
                    skipped=counters.skipped,
                    pruned=counters.pruned,
                    error=message,
                    source_errors=source_errors,
                )

            logger.info(
                f"Ingest run succeeded: {counters.created} created, {counters.skipped} skipped",
                extra={
                    "event": "ingest_run_succeeded",
                    "processed": counters.processed,
                    "stories_created": counters.created,
                    "skipped": counters.skipped,
                    "pruned": counters.pruned,
                },
            )

        return IngestRunResult(
            run_id=run_id,
            provider=provider,
            status=IngestRunStatus.SUCCESS,
            processed=counters.processed,
            created=counters.created,
            skipped=counters.skipped,
            pruned=counters.pruned,
            source_errors=source_errors,
        )

    def _process_item(self, item: FeedItem, analyzer: StoryAnalyzer, counters: RunCounters) -> None:
        counters.processed += 1

        if self.stories.exists(item.url):
            counters.skipped += 1
            return

        analysis = analyzer.analyze(
            ArticleInput(
                title=item.title,
                source=item.source,
                description=item.description,
                url=item.url,
            )
        )

        if self.stories.create(item, analysis):
            counters.created += 1
        else:
            counters.skipped += 1
