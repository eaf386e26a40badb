"""
api/routes/days.py
-------------------
Day planner endpoints for one collection.

  POST  /v1/collections/{collection_id}/days/auto-schedule
          Split the collection's places into day buckets (DayScheduler).
          The result is returned, not saved; the client saves it via PATCH.
  GET   /v1/collections/{collection_id}/days
          Saved day buckets + unscheduled place ids.
  PATCH /v1/collections/{collection_id}/days
          Replace the saved plan.
  GET   /v1/collections/{collection_id}/days/metrics
          Stops / distance / travel time per saved day.
  POST  /v1/collections/{collection_id}/days/{day_id}/optimize
          Reorder one saved day for the shortest straight-line route;
          locked places and places without coordinates stay put.

All endpoints require the X-User-Id header (api/deps.py).
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

import config
from api.deps import (
    get_collection_store, get_current_user, get_event_logger, get_scheduler,
)
from api.rate_limit import rate_limited
from db.collection_store import CollectionNotFoundError, CollectionStore
from modules.observability.logger import StructuredLogger
from modules.planning.day_metrics import summarize_schedule
from modules.planning.day_scheduler import DayScheduler
from modules.planning.route_optimizer import reorder_day
from modules.validation import validate_day_buckets
from schemas.day_planner import DayBucket, ScheduleRequest, TransportMode

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Request schemas ────────────────────────────────────────────────────────────

class AutoScheduleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hours_per_day: float = Field(
        ..., alias="hoursPerDay", strict=True,
        ge=config.MIN_HOURS_PER_DAY, le=config.MAX_HOURS_PER_DAY,
    )
    transport_mode: TransportMode = Field(..., alias="transportMode")


class DayBucketIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    day_number: int = Field(..., alias="dayNumber", ge=1)
    place_ids: list[str] = Field(default_factory=list, alias="placeIds")
    locked_place_ids: list[str] = Field(default_factory=list, alias="lockedPlaceIds")
    day_note: Optional[str] = Field(None, alias="dayNote")

    def to_bucket(self) -> DayBucket:
        return DayBucket(
            id=self.id,
            day_number=self.day_number,
            place_ids=list(self.place_ids),
            locked_place_ids=list(self.locked_place_ids),
            day_note=self.day_note,
        )


class UpdateDaysRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day_buckets: list[DayBucketIn] = Field(..., alias="dayBuckets")
    unscheduled_place_ids: list[str] = Field(..., alias="unscheduledPlaceIds")


class OptimizeDayRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    return_to_start: bool = Field(False, alias="returnToStart")


def _not_found() -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"status": "error", "message": "Collection not found"},
    )


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.post(
    "/{collection_id}/days/auto-schedule",
    summary="Auto-schedule a collection's places into days",
    dependencies=[Depends(rate_limited("standard"))],
)
def auto_schedule(
    collection_id: str,
    req: AutoScheduleRequest,
    user_id: str = Depends(get_current_user),
    store: CollectionStore = Depends(get_collection_store),
    scheduler: DayScheduler = Depends(get_scheduler),
    events: StructuredLogger = Depends(get_event_logger),
) -> dict:
    try:
        places = store.get_places(collection_id, user_id)
        request = ScheduleRequest(
            hours_per_day=req.hours_per_day,
            transport_mode=req.transport_mode,
        )
        result = scheduler.schedule(places, request)
        events.log(collection_id, "AUTO_SCHEDULE", {
            "user_id":         user_id,
            "places":          len(places),
            "unlocated":       len(result.unlocated_place_ids),
            "days":            len(result.day_buckets),
            "hours_per_day":   request.hours_per_day,
            "transport_mode":  request.transport_mode.value,
            "max_distance_km": request.max_distance_km,
        })
    except Exception as exc:
        logger.exception("auto-schedule failed for collection %s", collection_id)
        raise HTTPException(status_code=500, detail="Failed to auto-schedule days") from exc

    return {"status": "success", "dayBuckets": result.to_dict()}


@router.get("/{collection_id}/days", summary="Get the saved day plan")
def get_days(
    collection_id: str,
    user_id: str = Depends(get_current_user),
    store: CollectionStore = Depends(get_collection_store),
):
    try:
        collection = store.get_collection(collection_id, user_id)
    except Exception as exc:
        logger.exception("fetching day buckets failed for collection %s", collection_id)
        raise HTTPException(status_code=500, detail="Failed to fetch day buckets") from exc

    if collection is None:
        return _not_found()

    return {
        "status": "success",
        "dayBuckets": [b.to_dict() for b in collection.day_buckets],
        "unscheduledPlaceIds": list(collection.unscheduled_place_ids),
    }


@router.patch("/{collection_id}/days", summary="Replace the saved day plan")
def update_days(
    collection_id: str,
    req: UpdateDaysRequest,
    user_id: str = Depends(get_current_user),
    store: CollectionStore = Depends(get_collection_store),
):
    buckets = [b.to_bucket() for b in req.day_buckets]
    try:
        collection = store.get_collection(collection_id, user_id)
        if collection is None:
            return _not_found()

        check = validate_day_buckets(
            buckets,
            req.unscheduled_place_ids,
            known_place_ids=[p.id for p in collection.places],
        )
        if not check.valid:
            logger.info("rejected day plan for %s: %s", collection_id, check.errors)
            return JSONResponse(
                status_code=400,
                content={"status": "error", "errors": check.errors},
            )

        store.save_day_plan(collection_id, user_id, buckets, req.unscheduled_place_ids)
    except CollectionNotFoundError:
        return _not_found()
    except Exception as exc:
        logger.exception("updating day buckets failed for collection %s", collection_id)
        raise HTTPException(status_code=500, detail="Failed to update day buckets") from exc

    logger.info(
        "saved %d day buckets, %d unscheduled for %s",
        len(buckets), len(req.unscheduled_place_ids), collection_id,
    )
    return {"status": "success", "message": "Day buckets updated successfully"}


@router.get("/{collection_id}/days/metrics", summary="Travel metrics per saved day")
def get_day_metrics(
    collection_id: str,
    transport_mode: TransportMode = Query(TransportMode.DRIVE, alias="transportMode"),
    hours_per_day: float = Query(
        8.0, alias="hoursPerDay",
        ge=config.MIN_HOURS_PER_DAY, le=config.MAX_HOURS_PER_DAY,
    ),
    user_id: str = Depends(get_current_user),
    store: CollectionStore = Depends(get_collection_store),
):
    request = ScheduleRequest(hours_per_day=hours_per_day, transport_mode=transport_mode)
    try:
        collection = store.get_collection(collection_id, user_id)
        if collection is None:
            return _not_found()
        metrics = summarize_schedule(collection.day_buckets, collection.places, request)
    except Exception as exc:
        logger.exception("day metrics failed for collection %s", collection_id)
        raise HTTPException(status_code=500, detail="Failed to compute day metrics") from exc

    return {
        "status": "success",
        "maxDistanceKm": request.max_distance_km,
        "days": [m.to_dict() for m in metrics],
    }


@router.post(
    "/{collection_id}/days/{day_id}/optimize",
    summary="Reorder one day for the shortest straight-line route",
)
def optimize_day(
    collection_id: str,
    day_id: str,
    req: Optional[OptimizeDayRequest] = None,
    user_id: str = Depends(get_current_user),
    store: CollectionStore = Depends(get_collection_store),
):
    return_to_start = req.return_to_start if req else False
    try:
        collection = store.get_collection(collection_id, user_id)
        if collection is None:
            return _not_found()

        bucket = next((b for b in collection.day_buckets if b.id == day_id), None)
        if bucket is None:
            return JSONResponse(
                status_code=404,
                content={"status": "error", "message": f"Day '{day_id}' not found"},
            )

        bucket.place_ids, route = reorder_day(
            bucket.place_ids,
            {p.id: p for p in collection.places},
            locked_place_ids=bucket.locked_place_ids,
            return_to_start=return_to_start,
        )
        store.save_day_plan(
            collection_id, user_id, collection.day_buckets, collection.unscheduled_place_ids,
        )
    except CollectionNotFoundError:
        return _not_found()
    except Exception as exc:
        logger.exception("optimising %s failed for collection %s", day_id, collection_id)
        raise HTTPException(status_code=500, detail="Failed to optimize day") from exc

    return {
        "status": "success",
        "dayBucket": bucket.to_dict(),
        "totalDistanceKm": round(route.total_distance_km, 3),
    }
