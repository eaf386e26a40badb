"""
schemas/day_planner.py
----------------------
Dataclass definitions for the day planner: place snapshots going in,
day buckets coming out, and the collection record that stores them.

Persisted / wire names use camelCase (dayNumber, placeIds) to stay
compatible with the JSON stored on collection rows.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import config


class TransportMode(str, Enum):
    """Coarse travel-speed category. Only used to derive an average speed."""
    DRIVE = "drive"
    WALK = "walk"

    @property
    def speed_kmh(self) -> float:
        return config.TRANSPORT_SPEEDS_KMH[self.value]


@dataclass(frozen=True)
class Coords:
    lat: float
    lon: float


@dataclass(frozen=True)
class PlaceSnapshot:
    """
    Lightweight value copy of a place.

    Only identity and coordinates matter to scheduling; `name` rides along
    for CLI output and logs.
    """
    id: str
    coords: Optional[Coords] = None
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlaceSnapshot":
        """
        Build a snapshot from a place dict.

        Accepts either a nested ``{"coords": {"lat": .., "lon": ..}}`` or flat
        ``lat`` / ``lon`` keys. Missing or non-numeric values give ``coords=None``.
        """
        raw = data.get("coords")
        if raw is None and "lat" in data and "lon" in data:
            raw = {"lat": data["lat"], "lon": data["lon"]}

        coords: Optional[Coords] = None
        if isinstance(raw, dict) and raw.get("lat") is not None and raw.get("lon") is not None:
            try:
                coords = Coords(lat=float(raw["lat"]), lon=float(raw["lon"]))
            except (TypeError, ValueError):
                coords = None

        return cls(id=str(data["id"]), coords=coords, name=str(data.get("name") or ""))


@dataclass(frozen=True)
class ScheduleRequest:
    hours_per_day: float
    transport_mode: TransportMode

    @property
    def max_distance_km(self) -> float:
        """Daily distance budget: hours × average speed of the mode."""
        return self.hours_per_day * self.transport_mode.speed_kmh


@dataclass
class DayBucket:
    """
    One day of an itinerary. `place_ids` order is the visiting order.

    locked_place_ids: places the user pinned; route optimisation never moves them.
    day_note:         free-text note shown with the day, None when unset.
    """
    id: str = ""
    day_number: int = 0
    place_ids: list[str] = field(default_factory=list)
    locked_place_ids: list[str] = field(default_factory=list)
    day_note: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id":        self.id,
            "dayNumber": self.day_number,
            "placeIds":  list(self.place_ids),
        }
        # lockedPlaceIds / dayNote appear only when set
        if self.locked_place_ids:
            out["lockedPlaceIds"] = list(self.locked_place_ids)
        if self.day_note is not None:
            out["dayNote"] = self.day_note
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DayBucket":
        note = data.get("dayNote")
        return cls(
            id=str(data["id"]),
            day_number=int(data["dayNumber"]),
            place_ids=[str(pid) for pid in data.get("placeIds", [])],
            locked_place_ids=[str(pid) for pid in data.get("lockedPlaceIds") or []],
            day_note=None if note is None else str(note),
        )


@dataclass
class ScheduleResult:
    """
    Output of DayScheduler.schedule.

    day_buckets:         ordered buckets, day numbers 1..n.
    unlocated_place_ids: ids of places without coordinates; when non-empty
                         they are also the last bucket in day_buckets.
    """
    day_buckets: list[DayBucket] = field(default_factory=list)
    unlocated_place_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> list[dict[str, Any]]:
        return [b.to_dict() for b in self.day_buckets]


@dataclass
class DayMetrics:
    """Travel summary for one bucket."""
    day_number: int = 0
    stops: int = 0
    distance_km: float = 0.0
    travel_minutes: float = 0.0
    within_budget: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "dayNumber":     self.day_number,
            "stops":         self.stops,
            "distanceKm":    round(self.distance_km, 3),
            "travelMinutes": round(self.travel_minutes, 1),
            "withinBudget":  self.within_budget,
        }


@dataclass
class Collection:
    """
    A user's collection of places plus its saved day plan.
    Places are held as snapshots in collection order.
    """
    id: str = ""
    user_id: str = ""
    name: str = ""
    places: list[PlaceSnapshot] = field(default_factory=list)
    day_buckets: list[DayBucket] = field(default_factory=list)
    unscheduled_place_ids: list[str] = field(default_factory=list)
