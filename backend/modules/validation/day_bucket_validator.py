"""
modules/validation/day_bucket_validator.py
------------------------------------------
Data-quality guards for the day planner.

  Coordinates:
    ✓ Non-null lat / lon
    ✓ Numeric
    ✓ Latitude in [-90, 90]
    ✓ Longitude in [-180, 180]

  Day buckets (before a saved plan is written to storage):
    ✓ dayNumber is 1, 2, 3, … in list order (no gaps, no repeats)
    ✓ Bucket ids are unique and non-empty
    ✓ No place id appears twice across buckets + unscheduled list
    ✓ Locked place ids belong to their own bucket
    ✓ Every place id belongs to the collection (when the id set is known)

Usage:
    from modules.validation import validate_day_buckets

    result = validate_day_buckets(buckets, unscheduled_ids, known_ids)
    if not result.valid:
        print(result.errors)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from schemas.day_planner import Coords, DayBucket


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The validated input (for logging purposes).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: Any = field(default=None, repr=False)

    def __bool__(self) -> bool:
        return self.valid


# ── Coordinates ────────────────────────────────────────────────────────────────

def has_valid_coords(coords: Optional[Coords]) -> bool:
    """True when coords is a finite lat/lon pair inside the valid ranges."""
    if coords is None:
        return False
    try:
        lat = float(coords.lat)
        lon = float(coords.lon)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


# ── Day buckets ────────────────────────────────────────────────────────────────

def validate_day_buckets(
    buckets: list[DayBucket],
    unscheduled_place_ids: list[str],
    known_place_ids: Optional[Iterable[str]] = None,
) -> ValidationResult:
    """
    Validate a day plan before it replaces the stored one.

    Empty buckets are allowed here: users may create a day before filling it.
    """
    errors: list[str] = []

    # ── Day numbering ──────────────────────────────────────────────────────
    for expected, bucket in enumerate(buckets, start=1):
        if bucket.day_number != expected:
            errors.append(
                f"bucket {bucket.id!r}: dayNumber={bucket.day_number}, "
                f"expected {expected} (day numbers must be contiguous from 1)"
            )

    # ── Bucket ids ─────────────────────────────────────────────────────────
    seen_bucket_ids: set[str] = set()
    for bucket in buckets:
        if not bucket.id.strip():
            errors.append(f"day {bucket.day_number}: bucket id must not be empty")
        elif bucket.id in seen_bucket_ids:
            errors.append(f"duplicate bucket id {bucket.id!r}")
        seen_bucket_ids.add(bucket.id)

    # ── Place ids ──────────────────────────────────────────────────────────
    seen_place_ids: set[str] = set()
    all_ids = [pid for b in buckets for pid in b.place_ids] + list(unscheduled_place_ids)
    for pid in all_ids:
        if pid in seen_place_ids:
            errors.append(f"place {pid!r} is assigned more than once")
        seen_place_ids.add(pid)

    for bucket in buckets:
        stray = [pid for pid in bucket.locked_place_ids if pid not in bucket.place_ids]
        if stray:
            errors.append(
                f"bucket {bucket.id!r}: locked places not in the day: {', '.join(stray)}"
            )

    if known_place_ids is not None:
        known = set(known_place_ids)
        unknown = sorted(seen_place_ids - known)
        if unknown:
            errors.append(f"places not in collection: {', '.join(unknown)}")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        record={"buckets": len(buckets), "unscheduled": len(unscheduled_place_ids)},
    )
