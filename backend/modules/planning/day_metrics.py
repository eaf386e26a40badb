"""
modules/planning/day_metrics.py
---------------------------------
Per-day travel summary for a saved or freshly scheduled plan.

distance_km is the sum of consecutive hops between the bucket's located
places, the same quantity DayScheduler budgets against. Unlocated places
count as stops but add no distance.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from schemas.day_planner import DayBucket, DayMetrics, PlaceSnapshot, ScheduleRequest
from modules.tool_usage.distance_tool import DistanceTool, km_to_minutes
from modules.validation import has_valid_coords


def summarize_bucket(
    bucket: DayBucket,
    places_by_id: Mapping[str, PlaceSnapshot],
    request: ScheduleRequest,
) -> DayMetrics:
    tool = DistanceTool(request.transport_mode)
    points = [
        places_by_id[pid].coords
        for pid in bucket.place_ids
        if pid in places_by_id and has_valid_coords(places_by_id[pid].coords)
    ]
    distance = tool.path_length_km(points)  # type: ignore[arg-type]
    return DayMetrics(
        day_number=bucket.day_number,
        stops=len(bucket.place_ids),
        distance_km=distance,
        travel_minutes=km_to_minutes(distance, tool.speed_kmh),
        within_budget=len(points) <= 1 or distance <= request.max_distance_km,
    )


def summarize_schedule(
    buckets: Sequence[DayBucket],
    places: Sequence[PlaceSnapshot],
    request: ScheduleRequest,
) -> list[DayMetrics]:
    """Metrics for every bucket, in bucket order."""
    by_id = {p.id: p for p in places}
    return [summarize_bucket(b, by_id, request) for b in buckets]
