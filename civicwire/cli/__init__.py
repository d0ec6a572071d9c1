# civicwire/cli/__init__.py
"""CLI modules."""
