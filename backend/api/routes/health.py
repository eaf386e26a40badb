"""
api/routes/health.py
--------------------
Health-check endpoint, used by load balancers and container health probes.
Does not touch Postgres or Redis; it only reports which backends are configured.
"""
from __future__ import annotations

from fastapi import APIRouter

import config

router = APIRouter()


@router.get("/health", summary="Health check")
def health() -> dict:
    """Returns 200 OK when the service is running."""
    return {
        "status": "ok",
        "service": "dayplanner-backend",
        "collection_backend": config.COLLECTION_BACKEND,
        "rate_limit_enabled": config.RATE_LIMIT_ENABLED,
    }
