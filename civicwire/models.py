# civicwire/models.py
"""
CivicWire Database Models

Tables:
- Story: Analyzed news stories, one per unique article URL
- IngestRun: Ledger of ingestion runs (status and counters)
"""

from datetime import UTC, datetime
from enum import Enum
import uuid

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)

from civicwire.database import Base


def utcnow() -> datetime:
    """Current time as naive UTC, the convention for every timestamp column."""
    return datetime.now(UTC).replace(tzinfo=None)


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class BiasLabel(str, Enum):
    """Editorial-lean classification attached to a feed source."""
    CENTER = "Center"
    LEAN_LEFT = "Lean Left"
    LEAN_RIGHT = "Lean Right"


class IngestRunStatus(str, Enum):
    """Ingest run lifecycle status."""
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class IngestTrigger(str, Enum):
    """Who started an ingest run."""
    CRON = "cron"
    MANUAL = "manual"


# -----------------------------------------------------------------------------
# Story
# -----------------------------------------------------------------------------

class Story(Base):
    """
    An analyzed news story.

    Created once per unique URL by the ingest orchestrator, never updated,
    and deleted by the retention sweep once published_at falls behind the
    retention cutoff.
    """
    __tablename__ = "stories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Article identity and metadata
    url = Column(Text, unique=True, nullable=False)
    title = Column(Text, nullable=False)
    image_url = Column(Text, nullable=True)
    source = Column(String(255), nullable=False)
    topic = Column(String(128), nullable=False)
    bias_label = Column(String(16), nullable=False)  # BiasLabel value
    published_at = Column(DateTime, nullable=False)
    raw_description = Column(Text, nullable=False, default="")

    # Analysis outputs
    summary = Column(Text, nullable=False)
    just_facts = Column(Text, nullable=False)
    left_perspective = Column(Text, nullable=False)
    right_perspective = Column(Text, nullable=False)
    history_analysis = Column(Text, nullable=True)
    historical_comparisons = Column(JSON, nullable=False, default=list)
    factual_points = Column(JSON, nullable=False, default=list)
    confidence = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_stories_published_at", "published_at"),
    )


# -----------------------------------------------------------------------------
# IngestRun
# -----------------------------------------------------------------------------

class IngestRun(Base):
    """
    Ledger entry for one ingestion run.

    Inserted with status=running, then closed by exactly one terminal update
    (success or failed). At most one row may be running at a time.
    """
    __tablename__ = "ingest_runs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    status = Column(String(16), nullable=False)  # IngestRunStatus value
    provider = Column(String(32), nullable=False)
    triggered_by = Column(String(16), nullable=False)  # IngestTrigger value
    actor_id = Column(String(255), nullable=True)

    # Timing
    started_at = Column(DateTime, default=utcnow, nullable=False)
    finished_at = Column(DateTime, nullable=True)

    # Counters
    processed = Column(Integer, default=0, nullable=False)
    created = Column(Integer, default=0, nullable=False)
    skipped = Column(Integer, default=0, nullable=False)
    pruned = Column(Integer, default=0, nullable=False)

    # Failure details
    error_message = Column(Text, nullable=True)
    source_errors = Column(JSON, nullable=True)  # [{"source": ..., "error": ...}]

    __table_args__ = (
        Index("ix_ingest_runs_started_at", "started_at"),
        Index(
            "uq_ingest_runs_single_running",
            "status",
            unique=True,
            postgresql_where=text("status = 'running'"),
            sqlite_where=text("status = 'running'"),
        ),
    )
