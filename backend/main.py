"""
main.py
--------
Command-line day planner. Runs the same scheduler the API uses on a JSON
file of places, without any storage.

Input file: a JSON list of places, e.g.
  [
    {"id": "plc_1", "name": "Old Town", "coords": {"lat": 50.08, "lon": 14.42}},
    {"id": "plc_2", "name": "Castle",   "lat": 50.09, "lon": 14.40},
    {"id": "plc_3", "name": "No address yet"}
  ]

Run:
  python main.py places.json --hours-per-day 6 --mode walk
  python main.py places.json --mode drive --optimize --json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import config
from schemas.day_planner import DayBucket, PlaceSnapshot, ScheduleRequest, TransportMode
from modules.planning.day_scheduler import DayScheduler
from modules.planning.day_metrics import summarize_schedule
from modules.planning.route_optimizer import reorder_day


def load_places(path: Path) -> list[PlaceSnapshot]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("places", [])
    return [PlaceSnapshot.from_dict(item) for item in data]


def optimize_buckets(buckets: list[DayBucket], places: list[PlaceSnapshot]) -> None:
    """Reorder each bucket in place; locked and unlocated places keep their slots."""
    by_id = {p.id: p for p in places}
    for bucket in buckets:
        bucket.place_ids, _ = reorder_day(bucket.place_ids, by_id, bucket.locked_place_ids)


def _print_plan(
    buckets: list[DayBucket],
    places: list[PlaceSnapshot],
    request: ScheduleRequest,
) -> None:
    names = {p.id: p.name or p.id for p in places}
    metrics = summarize_schedule(buckets, places, request)
    width = 70
    print("═" * width)
    print(
        f"  {len(places)} places → {len(buckets)} days  "
        f"({request.transport_mode.value}, {request.hours_per_day:g} h/day, "
        f"budget {request.max_distance_km:.1f} km)"
    )
    print("═" * width)
    for bucket, m in zip(buckets, metrics):
        flag = "" if m.within_budget else "  (over budget)"
        print(
            f"\n  Day {bucket.day_number}: {m.stops} stops, "
            f"{m.distance_km:.1f} km, ~{m.travel_minutes:.0f} min{flag}"
        )
        for seq, pid in enumerate(bucket.place_ids, start=1):
            print(f"    {seq:>2}. {names.get(pid, pid)}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Split places into day-sized groups.")
    parser.add_argument("places", type=Path, help="JSON file with a list of places")
    parser.add_argument(
        "--hours-per-day", type=float, default=8.0,
        help=f"travel hours per day ({config.MIN_HOURS_PER_DAY:g}-{config.MAX_HOURS_PER_DAY:g})",
    )
    parser.add_argument(
        "--mode", choices=[m.value for m in TransportMode], default=TransportMode.DRIVE.value,
    )
    parser.add_argument(
        "--optimize", action="store_true",
        help="reorder each day for the shortest straight-line route",
    )
    parser.add_argument("--json", action="store_true", help="print dayBuckets JSON")
    args = parser.parse_args(argv)

    if not (config.MIN_HOURS_PER_DAY <= args.hours_per_day <= config.MAX_HOURS_PER_DAY):
        parser.error(
            f"--hours-per-day must be between {config.MIN_HOURS_PER_DAY:g} "
            f"and {config.MAX_HOURS_PER_DAY:g}"
        )

    try:
        places = load_places(args.places)
    except (OSError, ValueError, KeyError) as exc:
        print(f"[dayplanner] cannot read {args.places}: {exc}", file=sys.stderr)
        return 1

    request = ScheduleRequest(
        hours_per_day=args.hours_per_day,
        transport_mode=TransportMode(args.mode),
    )
    buckets = DayScheduler().schedule(places, request).day_buckets
    if args.optimize:
        optimize_buckets(buckets, places)

    if args.json:
        print(json.dumps({"dayBuckets": [b.to_dict() for b in buckets]}, indent=2))
    else:
        _print_plan(buckets, places, request)
    return 0


if __name__ == "__main__":
    sys.exit(main())
