# civicwire/auth.py
"""Shared authentication dependencies."""

import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query

from civicwire.config import Settings, get_settings
from civicwire.models import IngestTrigger

SCHEDULER_HEADER = "x-vercel-cron"


class AuthorizationError(Exception):
    """Raised when an ingest trigger presents no acceptable credential."""

    def __init__(self, message: str = "Unauthorized job trigger."):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class TriggerContext:
    """Who is allowed to start this run, and how it should be recorded."""
    origin: IngestTrigger
    actor_id: Optional[str] = None


def _matches(provided: Optional[str], expected: Optional[str]) -> bool:
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided, expected)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def authorize_ingest_trigger(
    x_vercel_cron: Optional[str] = Header(default=None, alias=SCHEDULER_HEADER),
    x_cron_secret: Optional[str] = Header(default=None, alias="X-Cron-Secret"),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
    x_actor_id: Optional[str] = Header(default=None, alias="X-Actor-Id"),
    secret: Optional[str] = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> TriggerContext:
    """
    Decide whether a daily-ingest request may start a run.

    Scheduler header or shared secret -> cron trigger.
    Admin API key -> manual trigger attributed to X-Actor-Id.
    Anything else raises AuthorizationError before a run exists.
    """
    if settings.INGEST_TRUST_SCHEDULER_HEADER and x_vercel_cron == "1":
        return TriggerContext(origin=IngestTrigger.CRON)

    cron_secret = settings.INGEST_CRON_SECRET
    for candidate in (x_cron_secret, _bearer_token(authorization), secret):
        if _matches(candidate, cron_secret):
            return TriggerContext(origin=IngestTrigger.CRON)

    if _matches(x_api_key, settings.ADMIN_API_KEY):
        actor_id = x_actor_id.strip() if x_actor_id and x_actor_id.strip() else None
        return TriggerContext(origin=IngestTrigger.MANUAL, actor_id=actor_id)

    raise AuthorizationError()


def require_admin_key(
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
    settings: Settings = Depends(get_settings),
) -> None:
    """Validate admin API key. Fails closed if ADMIN_API_KEY is not set."""
    expected_key = settings.ADMIN_API_KEY

    if not expected_key:
        raise HTTPException(
            status_code=500,
            detail="Server misconfiguration: admin authentication not configured",
        )

    if not x_api_key or not secrets.compare_digest(x_api_key, expected_key):
        raise HTTPException(
            status_code=401,
            detail="Invalid or missing API key",
        )
