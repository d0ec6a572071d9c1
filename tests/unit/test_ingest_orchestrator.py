"""
Unit tests for IngestOrchestrator.

Feed fetching and the model are replaced with in-process fakes; persistence
runs against in-memory SQLite.
"""

import json
import logging
import sys
import uuid
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from civicwire.llm import AnalysisError, ArticleInput, StoryAnalyzer
from civicwire.logging_config import configure_logging
from civicwire.models import BiasLabel, IngestRun, IngestRunStatus, IngestTrigger, Story, utcnow
from civicwire.services.feed_reader import FeedFetchResult, SourceFailure
from civicwire.services.ingest_orchestrator import IngestOrchestrator
from civicwire.services.run_ledger import IngestRunInProgressError

ANALYSIS = {
    "summary": "Summary.",
    "justFacts": "Facts.",
    "leftPerspective": "Left.",
    "rightPerspective": "Right.",
    "historyAnalysis": "History.",
    "historicalComparisons": ["Then"],
    "factualPoints": ["Point"],
    "confidence": 90,
}


class FakeAnalyzer(StoryAnalyzer):
    """Returns a canned analysis; optionally fails on the Nth call."""

    def __init__(self, fail_on_call=None, error="Gemini API failed with 500"):
        self.calls = []
        self.fail_on_call = fail_on_call
        self.error = error

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return "fake"

    def generate(self, article: ArticleInput) -> str:
        self.calls.append(article)
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise AnalysisError(self.error)
        return json.dumps(ANALYSIS)


def _reader(items, errors=None):
    reader = MagicMock()
    reader.fetch_items.return_value = FeedFetchResult(items=list(items), errors=list(errors or []))
    return reader


def _stored_story(url, published_at):
    return Story(
        id=uuid.uuid4(),
        url=url,
        title="Existing",
        source="Reuters World News",
        topic="World Affairs",
        bias_label=BiasLabel.CENTER.value,
        published_at=published_at,
        raw_description="",
        summary="s",
        just_facts="f",
        left_perspective="l",
        right_perspective="r",
        history_analysis=None,
        historical_comparisons=[],
        factual_points=[],
        confidence=72,
        created_at=utcnow(),
    )


@pytest.fixture
def settings(make_settings):
    return make_settings(INGEST_MAX_AGE_HOURS=72, STORY_RETENTION_DAYS=14, INGEST_BATCH_SIZE=18)


class TestSuccessfulRun:
    """Happy path behavior."""

    def test_creates_stories_and_closes_run(self, db_session, settings, make_item):
        items = [make_item(BiasLabel.LEAN_LEFT), make_item(BiasLabel.LEAN_RIGHT), make_item()]
        analyzer = FakeAnalyzer()
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=_reader(items), analyzer=analyzer)

        result = orchestrator.run(IngestTrigger.CRON)

        assert result.ok
        assert result.provider == "gemini"
        assert (result.processed, result.created, result.skipped) == (3, 3, 0)
        assert db_session.query(Story).count() == 3

        run = db_session.query(IngestRun).one()
        assert run.id == result.run_id
        assert run.status == IngestRunStatus.SUCCESS.value
        assert run.triggered_by == "cron"
        assert run.created == 3

    def test_story_fields_come_from_item_and_analysis(self, db_session, settings, make_item):
        item = make_item(BiasLabel.LEAN_RIGHT, image_url="https://img.example.com/a.jpg")
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=_reader([item]), analyzer=FakeAnalyzer())

        orchestrator.run(IngestTrigger.MANUAL, actor_id="editor-1")

        story = db_session.query(Story).one()
        assert story.url == item.url
        assert story.bias_label == "Lean Right"
        assert story.image_url == "https://img.example.com/a.jpg"
        assert story.just_facts == "Facts."
        assert story.factual_points == ["Point"]
        assert story.confidence == 90
        assert db_session.query(IngestRun).one().actor_id == "editor-1"

    def test_known_urls_are_skipped_without_analysis(self, db_session, settings, make_item):
        item = make_item()
        db_session.add(_stored_story(item.url, utcnow()))
        db_session.commit()
        analyzer = FakeAnalyzer()
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=_reader([item]), analyzer=analyzer)

        result = orchestrator.run(IngestTrigger.CRON)

        assert (result.processed, result.created, result.skipped) == (1, 0, 1)
        assert analyzer.calls == []

    def test_rerun_is_idempotent(self, db_session, settings, make_item):
        items = [make_item(), make_item()]

        IngestOrchestrator(db_session, settings, feed_reader=_reader(items), analyzer=FakeAnalyzer()).run(IngestTrigger.CRON)
        second = IngestOrchestrator(db_session, settings, feed_reader=_reader(items), analyzer=FakeAnalyzer()).run(IngestTrigger.CRON)

        assert (second.created, second.skipped) == (0, 2)
        assert db_session.query(Story).count() == 2

    def test_stale_items_are_filtered_out(self, db_session, settings, make_item):
        fresh = make_item(published_at=utcnow() - timedelta(hours=2))
        stale = make_item(published_at=utcnow() - timedelta(hours=100))
        analyzer = FakeAnalyzer()
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=_reader([fresh, stale]), analyzer=analyzer)

        result = orchestrator.run(IngestTrigger.CRON)

        assert result.processed == 1
        assert [a.url for a in analyzer.calls] == [fresh.url]

    def test_freshness_window_has_floor(self, db_session, make_settings, make_item):
        """A configured window below 12 hours still admits a 10-hour-old item."""
        settings = make_settings(INGEST_MAX_AGE_HOURS=1)
        item = make_item(published_at=utcnow() - timedelta(hours=10))
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=_reader([item]), analyzer=FakeAnalyzer())

        assert orchestrator.run(IngestTrigger.CRON).created == 1

    def test_batch_is_capped(self, db_session, make_settings, make_item):
        settings = make_settings(INGEST_BATCH_SIZE=4)
        items = [make_item() for _ in range(10)]
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=_reader(items), analyzer=FakeAnalyzer())

        result = orchestrator.run(IngestTrigger.CRON)

        assert result.processed == 4

    def test_prunes_expired_stories(self, db_session, settings, make_item):
        db_session.add(_stored_story("https://old.example.com/1", utcnow() - timedelta(days=30)))
        db_session.add(_stored_story("https://recent.example.com/1", utcnow() - timedelta(days=3)))
        db_session.commit()
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=_reader([]), analyzer=FakeAnalyzer())

        result = orchestrator.run(IngestTrigger.CRON)

        assert result.pruned == 1
        urls = {s.url for s in db_session.query(Story).all()}
        assert urls == {"https://recent.example.com/1"}

    def test_source_errors_are_reported(self, db_session, settings, make_item):
        failure = SourceFailure(source="Broken Wire", error="HTTP 503")
        orchestrator = IngestOrchestrator(
            db_session, settings, feed_reader=_reader([make_item()], [failure]), analyzer=FakeAnalyzer()
        )

        result = orchestrator.run(IngestTrigger.CRON)

        assert result.ok
        assert result.source_errors == [failure]
        assert db_session.query(IngestRun).one().source_errors == [{"source": "Broken Wire", "error": "HTTP 503"}]

    def test_passes_items_per_source_to_reader(self, db_session, make_settings):
        reader = _reader([])
        settings = make_settings(INGEST_ITEMS_PER_SOURCE=6)

        IngestOrchestrator(db_session, settings, feed_reader=reader, analyzer=FakeAnalyzer()).run(IngestTrigger.CRON)

        reader.fetch_items.assert_called_once_with(6)


class TestFailedRun:
    """Failure semantics."""

    def test_analysis_failure_aborts_batch_and_fails_run(self, db_session, settings, make_item):
        items = [make_item(), make_item(), make_item()]
        analyzer = FakeAnalyzer(fail_on_call=2)
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=_reader(items), analyzer=analyzer)

        result = orchestrator.run(IngestTrigger.CRON)

        assert not result.ok
        assert result.error == "Gemini API failed with 500"
        assert len(analyzer.calls) == 2
        assert db_session.query(Story).count() == 1

        run = db_session.query(IngestRun).one()
        assert run.status == IngestRunStatus.FAILED.value
        assert run.error_message == "Gemini API failed with 500"
        assert run.created == 1
        assert run.processed == 2

    def test_failure_skips_retention_sweep(self, db_session, settings, make_item):
        db_session.add(_stored_story("https://old.example.com/1", utcnow() - timedelta(days=30)))
        db_session.commit()
        orchestrator = IngestOrchestrator(
            db_session, settings, feed_reader=_reader([make_item()]), analyzer=FakeAnalyzer(fail_on_call=1)
        )

        result = orchestrator.run(IngestTrigger.CRON)

        assert result.pruned == 0
        assert db_session.query(Story).filter(Story.url == "https://old.example.com/1").count() == 1

    def test_missing_api_key_fails_run(self, db_session, make_settings, make_item, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        settings = make_settings(GEMINI_API_KEY=None)
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=_reader([make_item()]))

        result = orchestrator.run(IngestTrigger.CRON)

        assert result.provider == "gemini"
        assert not result.ok
        assert result.error == "GEMINI_API_KEY is missing."
        assert db_session.query(IngestRun).one().status == IngestRunStatus.FAILED.value

    def test_feed_reader_crash_fails_run(self, db_session, settings):
        reader = MagicMock()
        reader.fetch_items.side_effect = RuntimeError("boom")
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=reader, analyzer=FakeAnalyzer())

        result = orchestrator.run(IngestTrigger.CRON)

        assert not result.ok
        assert result.error == "boom"
        assert db_session.query(IngestRun).one().status == IngestRunStatus.FAILED.value

    def test_concurrent_run_rejected_without_record(self, db_session, settings, make_item):
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=_reader([]), analyzer=FakeAnalyzer())
        orchestrator.ledger.start_run("gemini", IngestTrigger.CRON)

        with pytest.raises(IngestRunInProgressError):
            orchestrator.run(IngestTrigger.MANUAL)

        assert db_session.query(IngestRun).count() == 1


class TestRetentionWindow:
    """Retention sweep boundaries."""

    def test_retention_window_has_floor(self, db_session, make_settings):
        """A configured retention below 7 days still keeps a 3-day-old story."""
        settings = make_settings(STORY_RETENTION_DAYS=1)
        db_session.add(_stored_story("https://recent.example.com/1", utcnow() - timedelta(days=3)))
        db_session.add(_stored_story("https://old.example.com/1", utcnow() - timedelta(days=8)))
        db_session.commit()
        orchestrator = IngestOrchestrator(db_session, settings, feed_reader=_reader([]), analyzer=FakeAnalyzer())

        result = orchestrator.run(IngestTrigger.CRON)

        assert result.pruned == 1
        assert {s.url for s in db_session.query(Story).all()} == {"https://recent.example.com/1"}


class _LiveStdout:
    """Resolve sys.stdout at write time so the handler follows pytest's per-phase capture."""

    def write(self, data):
        return sys.stdout.write(data)

    def flush(self):
        sys.stdout.flush()


@pytest.fixture
def production_logging(capsys):
    """Root logging configured the way the app configures it at startup."""
    root_logger = logging.getLogger()
    saved_handlers = root_logger.handlers[:]
    saved_level = root_logger.level
    configure_logging(json_format=True, level="INFO")
    for handler in root_logger.handlers:
        handler.setStream(_LiveStdout())
    yield capsys
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in saved_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(saved_level)


def _log_events(output: str) -> dict:
    events = {}
    for line in output.splitlines():
        try:
            record = json.loads(line)
        except ValueError:
            continue
        if isinstance(record, dict) and "event" in record:
            events[record["event"]] = record
    return events


class TestRunWithLoggingConfigured:
    """Runs with INFO-level JSON logging installed."""

    def test_successful_run_logs_counters(self, db_session, settings, make_item, production_logging):
        orchestrator = IngestOrchestrator(
            db_session, settings, feed_reader=_reader([make_item(), make_item()]), analyzer=FakeAnalyzer()
        )

        result = orchestrator.run(IngestTrigger.CRON)

        assert result.ok
        assert db_session.query(IngestRun).one().status == IngestRunStatus.SUCCESS.value
        events = _log_events(production_logging.readouterr().out)
        assert events["ingest_run_succeeded"]["stories_created"] == 2
        assert events["ingest_run_succeeded"]["run_id"] == str(result.run_id)

    def test_failed_run_is_closed_and_logged(self, db_session, settings, make_item, production_logging):
        orchestrator = IngestOrchestrator(
            db_session,
            settings,
            feed_reader=_reader([make_item()]),
            analyzer=FakeAnalyzer(fail_on_call=1, error="bad model"),
        )

        result = orchestrator.run(IngestTrigger.CRON)

        assert not result.ok
        assert result.error == "bad model"
        run = db_session.query(IngestRun).one()
        assert run.status == IngestRunStatus.FAILED.value
        assert run.error_message == "bad model"
        events = _log_events(production_logging.readouterr().out)
        assert events["ingest_run_failed"]["stories_created"] == 0
