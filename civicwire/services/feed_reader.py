# civicwire/services/feed_reader.py
"""
RSS feed reader.

Fetches every configured source, normalizes entries into FeedItems and merges
them newest-first. A source that cannot be fetched or parsed is skipped and
reported; it never fails the caller.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional

import feedparser
import httpx

from civicwire.models import BiasLabel, utcnow
from civicwire.news_sources import RSS_SOURCES, FeedSource

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")

FEED_HEADERS = {
    "User-Agent": "CivicWire-Bot/1.0 (Civic News Aggregator)",
    "Accept": "application/rss+xml, application/atom+xml, application/xml, text/xml",
}


class SourceFetchError(Exception):
    """A single feed source could not be fetched or parsed."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


@dataclass
class FeedItem:
    """A normalized feed entry, ephemeral to one run."""
    source: str
    bias_label: BiasLabel
    topic: str
    title: str
    url: str
    published_at: datetime
    description: str = ""
    image_url: Optional[str] = None


@dataclass
class SourceFailure:
    """A source that contributed zero items, and why."""
    source: str
    error: str

    def to_dict(self) -> dict:
        return {"source": self.source, "error": self.error}


@dataclass
class FeedFetchResult:
    """Merged items plus the sources that failed."""
    items: List[FeedItem] = field(default_factory=list)
    errors: List[SourceFailure] = field(default_factory=list)


def strip_html(text: str) -> str:
    """Replace tags with spaces and collapse whitespace."""
    if not text:
        return ""
    return " ".join(_TAG_RE.sub(" ", text).split())


def _first_url(value: Any, key: str) -> str:
    """Pull a URL attribute out of a feedparser media field (list or dict)."""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        return str(value.get(key) or "").strip()
    return ""


def resolve_image_url(entry: Any) -> Optional[str]:
    """
    Pick the entry's image from media:content, media:thumbnail, then enclosure.

    The first non-empty candidate wins and is only accepted with an http(s)
    scheme.
    """
    candidate = (
        _first_url(entry.get("media_content"), "url")
        or _first_url(entry.get("media_thumbnail"), "url")
        or _first_url(entry.get("enclosures"), "href")
    )
    return candidate if candidate.startswith("http") else None


def _parse_published(entry: Any) -> Optional[datetime]:
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            try:
                return datetime(*parsed[:6])
            except (TypeError, ValueError):
                continue
    return None


def normalize_entry(entry: Any, source: FeedSource, now: datetime) -> Optional[FeedItem]:
    """
    Normalize a feedparser entry into a FeedItem.

    Returns None when the entry has no title or no link.
    """
    title = str(entry.get("title") or "").strip()
    url = str(entry.get("link") or "").strip()
    if not title or not url:
        return None

    description = entry.get("summary") or entry.get("description") or ""
    if not description and entry.get("content"):
        description = entry["content"][0].get("value", "")

    return FeedItem(
        source=source.name,
        bias_label=source.bias_label,
        topic=source.topic,
        title=title,
        url=url,
        published_at=_parse_published(entry) or now,
        description=strip_html(str(description)),
        image_url=resolve_image_url(entry),
    )


class FeedReader:
    """Fetches and normalizes the configured RSS sources."""

    def __init__(
        self,
        sources: Optional[Iterable[FeedSource]] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = 20.0,
        max_workers: int = 4,
    ):
        self.sources = list(sources) if sources is not None else list(RSS_SOURCES)
        self._client = client
        self._timeout = timeout
        self._max_workers = max_workers

    def _fetch_feed(self, client: httpx.Client, feed_url: str) -> feedparser.FeedParserDict:
        """Fetch and parse one feed document."""
        response = client.get(feed_url, headers=FEED_HEADERS)
        response.raise_for_status()
        return feedparser.parse(response.content)

    def _fetch_source(
        self,
        client: httpx.Client,
        source: FeedSource,
        limit: int,
        now: datetime,
    ) -> List[FeedItem]:
        try:
            feed = self._fetch_feed(client, source.feed_url)
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(source.name, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise SourceFetchError(source.name, f"{e.__class__.__name__}: {e}") from e

        if getattr(feed, "bozo", 0) and not feed.entries:
            err = getattr(feed, "bozo_exception", None) or "unparseable feed"
            raise SourceFetchError(source.name, f"parse error: {err}")

        items: List[FeedItem] = []
        for entry in feed.entries:
            if len(items) >= limit:
                break
            item = normalize_entry(entry, source, now)
            if item is not None:
                items.append(item)
        return items

    def fetch_items(self, limit_per_source: int = 5) -> FeedFetchResult:
        """
        Fetch every source and merge the results newest-first.

        Args:
            limit_per_source: Max accepted items per source

        Returns:
            FeedFetchResult with merged items and per-source failures
        """
        result = FeedFetchResult()
        now = utcnow()
        owns_client = self._client is None
        client = self._client or httpx.Client(timeout=self._timeout, follow_redirects=True)

        def fetch(source: FeedSource):
            try:
                return self._fetch_source(client, source, limit_per_source, now), None
            except SourceFetchError as e:
                return [], e
            except Exception as e:
                return [], SourceFetchError(source.name, f"{e.__class__.__name__}: {e}")

        try:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                # map() keeps configured source order regardless of completion order
                outcomes = list(pool.map(fetch, self.sources))
        finally:
            if owns_client:
                client.close()

        for source, (items, error) in zip(self.sources, outcomes):
            if error is not None:
                logger.warning(
                    f"Skipping feed {source.name}: {error.reason}",
                    extra={"event": "feed_fetch_failed", "source": source.id, "url": source.feed_url},
                )
                result.errors.append(SourceFailure(source=source.name, error=error.reason))
                continue
            logger.debug(
                f"Fetched {len(items)} items from {source.name}",
                extra={"event": "feed_fetched", "source": source.id, "items": len(items)},
            )
            result.items.extend(items)

        result.items.sort(key=lambda item: item.published_at, reverse=True)
        return result
