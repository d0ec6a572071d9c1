# civicwire/routers/news.py
"""
Public news endpoints.

GET /api/news - Latest analyzed stories, newest first
GET /api/news/sources - Configured RSS sources and their lean labels
"""

import logging
import math
from typing import List, Optional

from cachetools import TTLCache
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from civicwire.constants import NewsFeedLimits
from civicwire.database import get_db
from civicwire.news_sources import RSS_SOURCES
from civicwire.schemas.news import FeedSourceResponse, StoryResponse
from civicwire.services.story_store import StoryStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/news", tags=["news"])

# Serialized feed pages keyed by limit, cleared after every ingest run
_news_cache: TTLCache = TTLCache(
    maxsize=NewsFeedLimits.CACHE_MAX_ENTRIES,
    ttl=NewsFeedLimits.CACHE_TTL_SECONDS,
)


def invalidate_news_cache() -> None:
    """Drop every cached feed page so the next read sees fresh stories."""
    _news_cache.clear()


def parse_limit(raw: Optional[str]) -> int:
    """
    Lenient limit parsing: missing or non-numeric falls back to the default,
    anything else is truncated and clamped into range.
    """
    if raw is None:
        return NewsFeedLimits.DEFAULT_LIMIT
    try:
        value = float(raw)
    except ValueError:
        return NewsFeedLimits.DEFAULT_LIMIT
    if not math.isfinite(value):
        return NewsFeedLimits.DEFAULT_LIMIT
    return max(NewsFeedLimits.MIN_LIMIT, min(NewsFeedLimits.MAX_LIMIT, int(value)))


@router.get("", response_model=List[StoryResponse])
def list_news(
    response: Response,
    limit: Optional[str] = Query(None, description="Stories to return (default 20, clamped to 1-50)"),
    db: Session = Depends(get_db),
) -> List[StoryResponse]:
    """Get the latest stories ordered by publish time, newest first."""
    effective_limit = parse_limit(limit)

    cached = _news_cache.get(effective_limit)
    if cached is not None:
        response.headers["X-Cache"] = "HIT"
        return cached

    response.headers["X-Cache"] = "MISS"
    stories = StoryStore(db).list_recent(effective_limit)
    result = [StoryResponse.model_validate(story) for story in stories]
    _news_cache[effective_limit] = result
    return result


@router.get("/sources", response_model=List[FeedSourceResponse])
def list_sources() -> List[FeedSourceResponse]:
    """List the RSS sources read by the daily ingest."""
    return [FeedSourceResponse.model_validate(source) for source in RSS_SOURCES]
