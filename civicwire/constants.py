# civicwire/constants.py
"""
Centralized magic constants organized by domain.

Hardcoded numbers used by the ingestion pipeline and read API live here so
the floors and caps are defined in exactly one place.
"""


class AnalysisLimits:
    """Caps and bounds applied when normalizing model output."""

    MAX_HISTORICAL_COMPARISONS = 4
    MAX_FACTUAL_POINTS = 5

    # Confidence is a 0-100 score from the model, clamped to this range
    CONFIDENCE_MIN = 55
    CONFIDENCE_MAX = 99
    CONFIDENCE_DEFAULT = 72

    # Sampling temperature for both providers
    TEMPERATURE = 0.2


class IngestWindows:
    """Lower bounds for the configurable freshness and retention windows."""

    FRESHNESS_FLOOR_HOURS = 12
    RETENTION_FLOOR_DAYS = 7


class IngestDefaults:
    """Batch shape for a single ingestion run."""

    ITEMS_PER_SOURCE = 6
    BATCH_SIZE = 18


class NewsFeedLimits:
    """Pagination bounds for the public news read API."""

    DEFAULT_LIMIT = 20
    MIN_LIMIT = 1
    MAX_LIMIT = 50
    CACHE_TTL_SECONDS = 60
    CACHE_MAX_ENTRIES = 64
