# civicwire/main.py

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from civicwire import __version__
from civicwire.auth import AuthorizationError
from civicwire.config import get_settings
from civicwire.logging_config import configure_logging
from civicwire.routers import jobs_router, news_router

settings = get_settings()
configure_logging(json_format=settings.LOG_JSON, level=settings.LOG_LEVEL)

logger = logging.getLogger(__name__)

app = FastAPI(title="CivicWire API", version=__version__)

app.include_router(news_router)
app.include_router(jobs_router)


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError) -> JSONResponse:
    logger.warning(
        f"Rejected ingest trigger from {request.client.host if request.client else 'unknown'}",
        extra={"event": "ingest_trigger_rejected"},
    )
    return JSONResponse(status_code=401, content={"error": exc.message})


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/health")
def health() -> dict:
    return {"status": "ok", "service": "civicwire-api", "environment": settings.ENVIRONMENT}
