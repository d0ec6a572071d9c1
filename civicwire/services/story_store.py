# civicwire/services/story_store.py
"""
Story persistence: URL dedup lookups, inserts, retention pruning and reads.
"""

import logging
import uuid
from datetime import datetime
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from civicwire.llm.base import StoryAnalysis
from civicwire.models import Story, utcnow
from civicwire.services.feed_reader import FeedItem

logger = logging.getLogger(__name__)


class StoryStore:
    """Data access for Story records."""

    def __init__(self, db: Session):
        self.db = db

    def exists(self, url: str) -> bool:
        """Check whether a story with this URL is already stored."""
        return self.db.query(Story.id).filter(Story.url == url).first() is not None

    def create(self, item: FeedItem, analysis: StoryAnalysis) -> bool:
        """
        Persist a story built from a feed item and its analysis.

        Returns:
            True if inserted, False if another writer stored the URL first
        """
        story = Story(
            id=uuid.uuid4(),
            url=item.url,
            title=item.title,
            image_url=item.image_url,
            source=item.source,
            topic=item.topic,
            bias_label=str(getattr(item.bias_label, "value", item.bias_label)),
            published_at=item.published_at,
            raw_description=item.description,
            summary=analysis.summary,
            just_facts=analysis.just_facts,
            left_perspective=analysis.left_perspective,
            right_perspective=analysis.right_perspective,
            history_analysis=analysis.history_analysis,
            historical_comparisons=list(analysis.historical_comparisons),
            factual_points=list(analysis.factual_points),
            confidence=analysis.confidence,
            created_at=utcnow(),
        )
        self.db.add(story)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(
                f"Story already stored by a concurrent run: {item.url}",
                extra={"event": "story_insert_conflict", "url": item.url},
            )
            return False
        return True

    def prune_older_than(self, cutoff: datetime) -> int:
        """Delete every story published before the cutoff. Returns rows deleted."""
        deleted = (
            self.db.query(Story)
            .filter(Story.published_at < cutoff)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted

    def list_recent(self, limit: int) -> List[Story]:
        """Newest stories first."""
        return (
            self.db.query(Story)
            .order_by(Story.published_at.desc())
            .limit(limit)
            .all()
        )
