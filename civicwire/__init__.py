"""
CivicWire API: daily civic news ingestion with bias-balanced LLM analysis.
"""

__version__ = "0.1.0"
