"""
modules/planning/day_scheduler.py
-----------------------------------
Auto-scheduling of a collection's places into day buckets.

Greedy, single pass, order preserving:
  1. Split places into located (valid lat/lon) and unlocated, keeping order.
  2. Daily budget = hours_per_day × speed(transport_mode)  [km].
  3. Walk the located places in caller order. An empty day always takes the
     next place. Otherwise the hop from the day's last place to the candidate
     is added if the running total stays within budget; if not, the day is
     closed and the candidate opens a new one with the total reset to 0.
  4. Unlocated places form one trailing bucket, in input order.

Only consecutive hops count toward the budget. There is no return leg and no
backtracking; earlier days are never revisited. Callers rely on this exact
output, so it must not be "improved" into an optimal partition.
"""

from __future__ import annotations

import logging
from typing import Sequence

from schemas.day_planner import DayBucket, PlaceSnapshot, ScheduleRequest, ScheduleResult
from modules.tool_usage.distance_tool import coords_distance_km
from modules.validation import has_valid_coords

logger = logging.getLogger(__name__)


def bucket_id(day_number: int) -> str:
    return f"day-{day_number}"


class DayScheduler:
    """
    Stateless scheduler; one instance may be shared across requests.

    Usage:
        result = DayScheduler().schedule(places, ScheduleRequest(8, TransportMode.DRIVE))
        for bucket in result.day_buckets:
            print(bucket.day_number, bucket.place_ids)
    """

    def schedule(
        self,
        places: Sequence[PlaceSnapshot],
        request: ScheduleRequest,
    ) -> ScheduleResult:
        if not places:
            return ScheduleResult()

        located = [p for p in places if has_valid_coords(p.coords)]
        unlocated = [p for p in places if not has_valid_coords(p.coords)]

        max_distance = request.max_distance_km
        buckets: list[DayBucket] = []

        def close_day(day: list[PlaceSnapshot]) -> None:
            day_number = len(buckets) + 1
            buckets.append(DayBucket(
                id=bucket_id(day_number),
                day_number=day_number,
                place_ids=[p.id for p in day],
            ))

        current_day: list[PlaceSnapshot] = []
        current_distance = 0.0

        for place in located:
            if not current_day:
                current_day.append(place)
                continue

            hop = coords_distance_km(current_day[-1].coords, place.coords)
            if current_distance + hop <= max_distance:
                current_day.append(place)
                current_distance += hop
            else:
                close_day(current_day)
                current_day = [place]
                current_distance = 0.0

        if current_day:
            close_day(current_day)

        if unlocated:
            close_day(unlocated)

        logger.debug(
            "scheduled %d places (%d unlocated) into %d days, budget %.1f km (%s)",
            len(places), len(unlocated), len(buckets),
            max_distance, request.transport_mode.value,
        )

        return ScheduleResult(
            day_buckets=buckets,
            unlocated_place_ids=[p.id for p in unlocated],
        )


def schedule(places: Sequence[PlaceSnapshot], request: ScheduleRequest) -> ScheduleResult:
    """Module-level shortcut for DayScheduler().schedule."""
    return DayScheduler().schedule(places, request)
