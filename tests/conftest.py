# tests/conftest.py
"""
Pytest configuration and fixtures.
"""

import os
from datetime import timedelta

import pytest

# Set test environment
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_JSON", "false")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from civicwire.config import Settings  # noqa: E402
from civicwire.database import Base  # noqa: E402
from civicwire import models  # noqa: E402,F401
from civicwire.models import BiasLabel, utcnow  # noqa: E402
from civicwire.services.feed_reader import FeedItem  # noqa: E402


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "llm: tests requiring LLM API calls (deselect with '-m \"not llm\"')")


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """Database session bound to the in-memory engine."""
    Session = sessionmaker(bind=db_engine, autoflush=False, autocommit=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_settings():
    """Build Settings with explicit values so the host environment does not leak in."""

    def _make(**overrides) -> Settings:
        values = {
            "DATABASE_URL": "sqlite://",
            "ADMIN_API_KEY": "admin-key",
            "INGEST_CRON_SECRET": "cron-secret",
            "LLM_PROVIDER": "gemini",
            "GEMINI_API_KEY": "gemini-key",
            "GEMINI_MODEL": "gemini-2.0-flash",
            "DEEPSEEK_API_KEY": "deepseek-key",
            "DEEPSEEK_MODEL": "deepseek-chat",
            "LOG_JSON": False,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def make_item():
    """Build a FeedItem; published_at defaults to one hour ago."""
    counter = {"n": 0}

    def _make(bias_label: BiasLabel = BiasLabel.CENTER, **overrides) -> FeedItem:
        counter["n"] += 1
        n = counter["n"]
        values = {
            "source": f"Source {bias_label.value}",
            "bias_label": bias_label,
            "topic": "World Affairs",
            "title": f"Headline {n}",
            "url": f"https://news.example.com/story-{n}",
            "published_at": utcnow() - timedelta(hours=1),
            "description": f"Description {n}",
            "image_url": None,
        }
        values.update(overrides)
        return FeedItem(**values)

    return _make
