# civicwire/routers/__init__.py
"""
API routers.
"""

from civicwire.routers.jobs import router as jobs_router
from civicwire.routers.news import router as news_router

__all__ = ["jobs_router", "news_router"]
