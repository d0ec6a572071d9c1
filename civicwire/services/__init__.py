# civicwire/services/__init__.py
"""
Business logic services.
"""

from civicwire.services.balanced_selector import select_balanced_items
from civicwire.services.feed_reader import FeedReader
from civicwire.services.ingest_orchestrator import IngestOrchestrator, IngestRunResult
from civicwire.services.run_ledger import RunLedger
from civicwire.services.story_store import StoryStore

__all__ = [
    "FeedReader",
    "IngestOrchestrator",
    "IngestRunResult",
    "RunLedger",
    "StoryStore",
    "select_balanced_items",
]
