# civicwire/news_sources.py
"""
Configured RSS sources.

Each source carries the editorial-lean label used by the balanced selector.
The list is static configuration and is never mutated at runtime.
"""

from dataclasses import dataclass

from civicwire.models import BiasLabel


@dataclass(frozen=True)
class FeedSource:
    """An RSS feed and its editorial-lean label."""
    id: str
    name: str
    feed_url: str
    topic: str
    bias_label: BiasLabel


RSS_SOURCES: tuple[FeedSource, ...] = (
    FeedSource(
        id="reuters-world-news",
        name="Reuters World News",
        feed_url="https://feeds.reuters.com/Reuters/worldNews",
        topic="World Affairs",
        bias_label=BiasLabel.CENTER,
    ),
    FeedSource(
        id="reuters-politics",
        name="Reuters Politics",
        feed_url="https://feeds.reuters.com/Reuters/PoliticsNews",
        topic="Federal Government",
        bias_label=BiasLabel.CENTER,
    ),
    FeedSource(
        id="ap-politics",
        name="Associated Press Politics",
        feed_url="https://apnews.com/hub/politics/rss",
        topic="Federal Government",
        bias_label=BiasLabel.CENTER,
    ),
    FeedSource(
        id="npr-politics",
        name="NPR Politics",
        feed_url="https://feeds.npr.org/1014/rss.xml",
        topic="Federal Government",
        bias_label=BiasLabel.LEAN_LEFT,
    ),
    FeedSource(
        id="pbs-politics",
        name="PBS NewsHour",
        feed_url="https://www.pbs.org/newshour/feeds/rss/politics",
        topic="Policy",
        bias_label=BiasLabel.CENTER,
    ),
    FeedSource(
        id="wsj-politics",
        name="Wall Street Journal Politics",
        feed_url="https://feeds.a.dj.com/rss/RSSPolitics.xml",
        topic="Federal Government",
        bias_label=BiasLabel.LEAN_RIGHT,
    ),
    FeedSource(
        id="fox-politics",
        name="Fox News Politics",
        feed_url="https://moxie.foxnews.com/google-publisher/politics.xml",
        topic="Federal Government",
        bias_label=BiasLabel.LEAN_RIGHT,
    ),
    FeedSource(
        id="washington-times-politics",
        name="Washington Times Politics",
        feed_url="https://www.washingtontimes.com/rss/headlines/news/politics/",
        topic="Federal Government",
        bias_label=BiasLabel.LEAN_RIGHT,
    ),
    FeedSource(
        id="cspan-congress",
        name="C-SPAN Congress",
        feed_url="https://www.c-span.org/rss/?feed=congress",
        topic="Congress",
        bias_label=BiasLabel.CENTER,
    ),
)
