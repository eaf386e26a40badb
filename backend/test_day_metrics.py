"""
test_day_metrics.py
───────────────────
Per-day distance / travel-time summaries.
"""

from __future__ import annotations

import math

import pytest

import config
from schemas.day_planner import Coords, DayBucket, PlaceSnapshot, ScheduleRequest, TransportMode
from modules.planning.day_metrics import summarize_bucket, summarize_schedule

KM_PER_DEGREE = config.EARTH_RADIUS_KM * math.pi / 180.0

PLACES = [
    PlaceSnapshot(id="A", coords=Coords(0.0, 0.0)),
    PlaceSnapshot(id="B", coords=Coords(0.5, 0.0)),
    PlaceSnapshot(id="C", coords=Coords(1.0, 0.0)),
    PlaceSnapshot(id="X"),
]
BY_ID = {p.id: p for p in PLACES}


def test_distance_and_minutes():
    request = ScheduleRequest(hours_per_day=8, transport_mode=TransportMode.DRIVE)
    m = summarize_bucket(DayBucket("day-1", 1, ["A", "B", "C"]), BY_ID, request)
    assert m.day_number == 1
    assert m.stops == 3
    assert m.distance_km == pytest.approx(KM_PER_DEGREE)
    assert m.travel_minutes == pytest.approx(KM_PER_DEGREE)  # 60 km/h: 1 km per minute
    assert m.within_budget is True


def test_over_budget_flag():
    request = ScheduleRequest(hours_per_day=1, transport_mode=TransportMode.WALK)
    m = summarize_bucket(DayBucket("day-1", 1, ["A", "C"]), BY_ID, request)
    assert m.within_budget is False


def test_unlocated_and_unknown_places_add_no_distance():
    request = ScheduleRequest(hours_per_day=1, transport_mode=TransportMode.WALK)
    m = summarize_bucket(DayBucket("day-2", 2, ["X", "gone"]), BY_ID, request)
    assert m.stops == 2
    assert m.distance_km == 0.0
    assert m.within_budget is True


def test_single_stop_always_within_budget():
    request = ScheduleRequest(hours_per_day=1, transport_mode=TransportMode.WALK)
    assert summarize_bucket(DayBucket("day-1", 1, ["C"]), BY_ID, request).within_budget


def test_summarize_schedule_keeps_bucket_order():
    request = ScheduleRequest(hours_per_day=8, transport_mode=TransportMode.WALK)
    buckets = [DayBucket("day-1", 1, ["A", "B"]), DayBucket("day-2", 2, ["X"])]
    metrics = summarize_schedule(buckets, PLACES, request)
    assert [m.day_number for m in metrics] == [1, 2]
    assert metrics[0].to_dict()["distanceKm"] == pytest.approx(KM_PER_DEGREE / 2, abs=1e-3)
    assert set(metrics[1].to_dict()) == {
        "dayNumber", "stops", "distanceKm", "travelMinutes", "withinBudget",
    }
