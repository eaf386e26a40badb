"""
modules/tool_usage/distance_tool.py
-------------------------------------
Straight-line distance and travel-time estimates using the Haversine formula.
No external HTTP calls are made; this is a proxy, not a routing engine.

Config knobs (config.py):
  EARTH_RADIUS_KM       -- sphere radius used by haversine_km (WGS84 mean)
  TRANSPORT_SPEEDS_KMH  -- average speed per transport mode
"""

from __future__ import annotations
import math
import logging
from typing import Optional, Sequence

import config
from schemas.day_planner import Coords, TransportMode

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in km."""
    r = config.EARTH_RADIUS_KM
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    # Rounding can push `a` a hair above 1 for antipodal points
    return 2 * r * math.asin(math.sqrt(min(1.0, a)))


def coords_distance_km(a: Optional[Coords], b: Optional[Coords]) -> float:
    """Distance between two coordinate pairs; infinite if either is missing."""
    if a is None or b is None:
        return math.inf
    return haversine_km(a.lat, a.lon, b.lat, b.lon)


def km_to_minutes(km: float, speed_kmh: float) -> float:
    """Straight-line km to minutes at a given speed."""
    return (km / speed_kmh) * 60.0


# ---------------------------------------------------------------------------
# DistanceTool
# ---------------------------------------------------------------------------


class DistanceTool:
    """
    Distances and travel times between coordinate pairs for one transport mode.
    Speeds come from config.TRANSPORT_SPEEDS_KMH.
    """

    def __init__(self, mode: TransportMode = TransportMode.DRIVE) -> None:
        self.mode = mode
        self.speed_kmh: float = mode.speed_kmh

    def travel_time_minutes(self, a: Optional[Coords], b: Optional[Coords]) -> float:
        """Return travel time in minutes between two points."""
        if a is not None and a == b:
            return 0.0
        return km_to_minutes(coords_distance_km(a, b), self.speed_kmh)

    def path_length_km(self, points: Sequence[Coords]) -> float:
        """Sum of consecutive hops along an ordered list of points."""
        return sum(
            coords_distance_km(points[i], points[i + 1])
            for i in range(len(points) - 1)
        )

    def distance_matrix(self, points: Sequence[Coords]) -> list[list[float]]:
        """Return a full n x n distance matrix [km]."""
        n = len(points)
        if n == 0:
            return []
        return [
            [
                0.0 if i == j else coords_distance_km(points[i], points[j])
                for j in range(n)
            ]
            for i in range(n)
        ]
