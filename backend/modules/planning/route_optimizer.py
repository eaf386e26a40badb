"""
modules/planning/route_optimizer.py
-------------------------------------
Visiting-order optimisation for the places of a single day.

  nearest_neighbor              greedy tour from one start index
  optimized_nearest_neighbor    best greedy tour over the first N start indices
  two_opt                       2-opt edge swaps until no swap shortens the tour
  nearest_neighbor_with_two_opt optimized_nearest_neighbor followed by two_opt
  optimize_route                entry point; caps the number of places
  reorder_day                   optimise a saved day, keeping locked places put

Distances are straight-line (Haversine) km. Places without coordinates are
left out of every tour; callers decide where to put them.

This is independent from DayScheduler, which never reorders places.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

import config
from schemas.day_planner import PlaceSnapshot
from modules.tool_usage.distance_tool import coords_distance_km
from modules.validation import has_valid_coords

logger = logging.getLogger(__name__)

# Minimum gain (km) for a 2-opt swap to count as an improvement
_TWO_OPT_EPSILON_KM: float = 0.001


@dataclass
class RouteResult:
    ordered_places: list[PlaceSnapshot] = field(default_factory=list)
    total_distance_km: float = 0.0
    hop_distances_km: list[float] = field(default_factory=list)

    @property
    def place_ids(self) -> list[str]:
        return [p.id for p in self.ordered_places]


def _dist(a: PlaceSnapshot, b: PlaceSnapshot) -> float:
    return coords_distance_km(a.coords, b.coords)


def _located(places: Sequence[PlaceSnapshot]) -> list[PlaceSnapshot]:
    return [p for p in places if has_valid_coords(p.coords)]


def _measure(ordered: list[PlaceSnapshot], return_to_start: bool) -> RouteResult:
    hops = [_dist(ordered[i], ordered[i + 1]) for i in range(len(ordered) - 1)]
    if return_to_start and len(ordered) > 1:
        hops.append(_dist(ordered[-1], ordered[0]))
    return RouteResult(
        ordered_places=list(ordered),
        total_distance_km=sum(hops),
        hop_distances_km=hops,
    )


def nearest_neighbor(
    places: Sequence[PlaceSnapshot],
    start_index: int = 0,
    return_to_start: bool = False,
) -> RouteResult:
    """
    Greedy tour: from the current place always move to the closest unvisited one.
    `start_index` indexes the located places.
    """
    located = _located(places)
    if not located:
        return RouteResult()
    if len(located) == 1:
        return RouteResult(ordered_places=located)

    unvisited = set(range(len(located)))
    unvisited.discard(start_index)
    tour = [start_index]
    current = start_index

    while unvisited:
        nearest, nearest_dist = -1, math.inf
        # sorted() keeps ties deterministic (lowest index wins)
        for candidate in sorted(unvisited):
            d = _dist(located[current], located[candidate])
            if d < nearest_dist:
                nearest, nearest_dist = candidate, d
        if nearest == -1:
            break
        tour.append(nearest)
        unvisited.discard(nearest)
        current = nearest

    return _measure([located[i] for i in tour], return_to_start)


def two_opt(places: Sequence[PlaceSnapshot], tour: list[int]) -> list[int]:
    """
    Improve a tour (list of indexes into `places`) by reversing segments while
    that shortens it. The first and last positions stay fixed.
    """
    if len(places) <= 3:
        return list(tour)

    tour = list(tour)
    improved = True
    while improved:
        improved = False
        for i in range(1, len(tour) - 2):
            for j in range(i + 1, len(tour) - 1):
                current = (
                    _dist(places[tour[i]], places[tour[i + 1]])
                    + _dist(places[tour[j]], places[tour[j + 1]])
                )
                swapped = (
                    _dist(places[tour[i]], places[tour[j]])
                    + _dist(places[tour[i + 1]], places[tour[j + 1]])
                )
                if swapped < current - _TWO_OPT_EPSILON_KM:
                    tour[i + 1:j + 1] = reversed(tour[i + 1:j + 1])
                    improved = True
    return tour


def optimized_nearest_neighbor(
    places: Sequence[PlaceSnapshot],
    return_to_start: bool = False,
) -> RouteResult:
    """Run nearest_neighbor from several start points and keep the shortest tour."""
    located = _located(places)
    if len(located) <= 2:
        return nearest_neighbor(located, 0, return_to_start)

    best: RouteResult | None = None
    for start in range(min(len(located), config.ROUTE_OPTIMIZE_STARTS)):
        result = nearest_neighbor(located, start, return_to_start)
        if best is None or result.total_distance_km < best.total_distance_km:
            best = result
    return best  # type: ignore[return-value]


def nearest_neighbor_with_two_opt(
    places: Sequence[PlaceSnapshot],
    return_to_start: bool = False,
) -> RouteResult:
    located = _located(places)
    if len(located) <= 2:
        return nearest_neighbor(located, 0, return_to_start)

    initial = optimized_nearest_neighbor(located, return_to_start)
    position = {p.id: i for i, p in enumerate(located)}
    tour = two_opt(located, [position[p.id] for p in initial.ordered_places])
    return _measure([located[i] for i in tour], return_to_start)


def optimize_route(
    places: Sequence[PlaceSnapshot],
    return_to_start: bool = False,
    max_places: int | None = None,
) -> RouteResult:
    """Optimise the visiting order of at most `max_places` places."""
    limit = config.ROUTE_OPTIMIZE_MAX_PLACES if max_places is None else max_places
    if len(places) > limit:
        logger.info("route optimisation capped at %d of %d places", limit, len(places))
    return nearest_neighbor_with_two_opt(list(places)[:limit], return_to_start)


def reorder_day(
    place_ids: Sequence[str],
    places_by_id: Mapping[str, PlaceSnapshot],
    locked_place_ids: Iterable[str] = (),
    return_to_start: bool = False,
) -> tuple[list[str], RouteResult]:
    """
    Optimise the order of one day's places.

    Locked places, places without coordinates and ids missing from
    `places_by_id` keep their positions. The remaining slots are refilled
    with the unlocked located places in optimised order; any past the
    optimiser's cap follow in their previous order.
    """
    locked = set(locked_place_ids)

    def movable(pid: str) -> bool:
        place = places_by_id.get(pid)
        return pid not in locked and place is not None and has_valid_coords(place.coords)

    candidates = [places_by_id[pid] for pid in place_ids if movable(pid)]
    route = optimize_route(candidates, return_to_start=return_to_start)

    routed = route.place_ids
    routed_set = set(routed)
    fill = iter(routed + [p.id for p in candidates if p.id not in routed_set])
    new_order = [next(fill) if movable(pid) else pid for pid in place_ids]
    return new_order, route
