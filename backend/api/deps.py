"""
api/deps.py
-----------
FastAPI dependencies shared by the routes.

Caller identity comes from the `X-User-Id` header, set by the session layer
in front of this service. A missing header is a 401.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException

from db.collection_store import CollectionStore, get_store
from modules.planning.day_scheduler import DayScheduler
from modules.observability.logger import StructuredLogger

_scheduler = DayScheduler()
_events: StructuredLogger | None = None


def get_current_user(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id.strip()


def get_collection_store() -> CollectionStore:
    return get_store()


def get_scheduler() -> DayScheduler:
    return _scheduler


def get_event_logger() -> StructuredLogger:
    global _events
    if _events is None:
        _events = StructuredLogger()
    return _events


def close_event_logger() -> None:
    """Close the shared event log files; the next request reopens them."""
    if _events is not None:
        _events.close()
