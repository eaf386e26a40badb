"""
db/repositories/collection_repo.py
------------------------------------
Reads and writes for the `collections`, `places` and `places_to_collections`
tables.

Source: db/schema.sql

All functions accept a psycopg2 connection object.
Commit/rollback is managed by the caller via db.connection.get_conn().

JSONB columns on `collections`:
    day_buckets            [{"id": "day-1", "dayNumber": 1, "placeIds": [...]}, ...]
    unscheduled_place_ids  ["plc_...", ...]
"""

from __future__ import annotations

import json
from typing import Any


def _decode_json(value: Any, default: Any) -> Any:
    """psycopg2 decodes jsonb already; plain json/text columns come back as str."""
    if value is None:
        return default
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


# ── collections table ──────────────────────────────────────────────────────────

def get_collection(conn, collection_id: str, user_id: str) -> dict | None:
    """
    Return one collection row owned by user_id, or None if not found.

    day_buckets / unscheduled_place_ids are returned decoded (lists).
    """
    sql = """
        SELECT id, user_id, name, day_buckets, unscheduled_place_ids
        FROM collections WHERE id = %s AND user_id = %s
    """
    params = (collection_id, user_id)

    with conn.cursor() as cur:
        cur.execute(sql, params)
        row = cur.fetchone()
        if row is None:
            return None
        cols = [d[0] for d in cur.description]
        record = dict(zip(cols, row))

    record["day_buckets"] = _decode_json(record.get("day_buckets"), [])
    record["unscheduled_place_ids"] = _decode_json(record.get("unscheduled_place_ids"), [])
    return record


def get_places_in_collection(conn, collection_id: str, user_id: str) -> list[dict]:
    """
    Return the places of a collection owned by user_id, in collection order
    (order_index, then name).

    Each dict carries: id, name, lat, lon (lat/lon may be NULL).
    """
    sql = """
        SELECT p.id, p.name, p.lat, p.lon
        FROM places p
        JOIN places_to_collections pc ON pc.place_id = p.id
        JOIN collections c            ON c.id = pc.collection_id
        WHERE pc.collection_id = %s
          AND c.user_id = %s
        ORDER BY pc.order_index ASC, p.name ASC
    """
    with conn.cursor() as cur:
        cur.execute(sql, (collection_id, user_id))
        cols = [d[0] for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]


def save_day_buckets(conn, collection_id: str, day_buckets: list[dict]) -> None:
    """Overwrite the collection's day_buckets JSONB."""
    sql = """
        UPDATE collections
        SET day_buckets = %s::jsonb,
            updated_at  = NOW()
        WHERE id = %s
    """
    with conn.cursor() as cur:
        cur.execute(sql, (json.dumps(day_buckets), collection_id))


def save_unscheduled_places(conn, collection_id: str, place_ids: list[str]) -> None:
    """Overwrite the collection's unscheduled_place_ids JSONB."""
    sql = """
        UPDATE collections
        SET unscheduled_place_ids = %s::jsonb,
            updated_at            = NOW()
        WHERE id = %s
    """
    with conn.cursor() as cur:
        cur.execute(sql, (json.dumps(place_ids), collection_id))
