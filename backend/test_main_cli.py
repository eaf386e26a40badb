"""
test_main_cli.py
────────────────
Command-line planner (main.py).
"""

from __future__ import annotations

import json
import math

import pytest

import config
import main
from schemas.day_planner import Coords, DayBucket, PlaceSnapshot

KM_PER_DEGREE = config.EARTH_RADIUS_KM * math.pi / 180.0


@pytest.fixture
def places_file(tmp_path):
    data = [
        {"id": "A", "name": "Harbour", "coords": {"lat": 0.0, "lon": 0.0}},
        {"id": "C", "name": "Lighthouse", "lat": 130 / KM_PER_DEGREE, "lon": 0.0},
        {"id": "B", "name": "Market", "coords": {"lat": 50 / KM_PER_DEGREE, "lon": 0.0}},
        {"id": "X", "name": "Somewhere"},
    ]
    path = tmp_path / "places.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_json_output(places_file, capsys):
    assert main.main([str(places_file), "--hours-per-day", "3", "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    # A→C (130 km) fits the 180 km budget; adding C→B (80 km) would not
    assert out["dayBuckets"] == [
        {"id": "day-1", "dayNumber": 1, "placeIds": ["A", "C"]},
        {"id": "day-2", "dayNumber": 2, "placeIds": ["B"]},
        {"id": "day-3", "dayNumber": 3, "placeIds": ["X"]},
    ]


def test_optimize_flag_reorders_days(places_file, capsys):
    assert main.main([str(places_file), "--hours-per-day", "24", "--optimize", "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["dayBuckets"][0]["placeIds"] == ["A", "B", "C"]


def test_text_output_lists_names(places_file, capsys):
    assert main.main([str(places_file), "--mode", "walk", "--hours-per-day", "1"]) == 0
    out = capsys.readouterr().out
    assert "Day 1" in out and "Harbour" in out and "Somewhere" in out
    assert "budget 5.0 km" in out


def test_rejects_hours_out_of_range(places_file):
    with pytest.raises(SystemExit):
        main.main([str(places_file), "--hours-per-day", "30"])


def test_unreadable_file(tmp_path, capsys):
    assert main.main([str(tmp_path / "missing.json")]) == 1
    assert "cannot read" in capsys.readouterr().err


def test_optimize_buckets_respects_locks():
    places = [
        PlaceSnapshot("C", Coords(130 / KM_PER_DEGREE, 0.0)),
        PlaceSnapshot("A", Coords(0.0, 0.0)),
        PlaceSnapshot("B", Coords(50 / KM_PER_DEGREE, 0.0)),
    ]
    free = DayBucket("day-1", 1, ["C", "A", "B"])
    pinned = DayBucket("day-1", 1, ["C", "A", "B"], locked_place_ids=["A"])
    main.optimize_buckets([free, pinned], places)
    assert free.place_ids == ["C", "B", "A"]
    assert pinned.place_ids == ["C", "A", "B"]
