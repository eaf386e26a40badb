"""
test_collection_store.py
────────────────────────
Collection storage: in-memory store, the psycopg2 repository (against a
mocked connection) and the Postgres-backed store wiring.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

import config
import db.collection_store as collection_store
from db.collection_store import (
    CollectionNotFoundError,
    InMemoryCollectionStore,
    PostgresCollectionStore,
    get_store,
)
from db.repositories import collection_repo
from schemas.day_planner import Collection, Coords, DayBucket, PlaceSnapshot


def _collection() -> Collection:
    return Collection(
        id="col_1",
        user_id="user_1",
        name="Lisbon",
        places=[PlaceSnapshot("a", Coords(38.71, -9.14)), PlaceSnapshot("b")],
    )


def _mock_conn(description=None, fetchone=None, fetchall=None):
    conn = MagicMock()
    cur = MagicMock()
    cur.description = description
    cur.fetchone.return_value = fetchone
    cur.fetchall.return_value = fetchall or []
    conn.cursor.return_value.__enter__.return_value = cur
    return conn, cur


# ── In-memory store ────────────────────────────────────────────────────────────

def test_in_memory_round_trip():
    store = InMemoryCollectionStore()
    store.add_collection(_collection())

    assert [p.id for p in store.get_places("col_1", "user_1")] == ["a", "b"]

    store.save_day_plan("col_1", "user_1", [DayBucket("day-1", 1, ["a"])], ["b"])
    saved = store.get_collection("col_1", "user_1")
    assert saved.day_buckets == [DayBucket("day-1", 1, ["a"])]
    assert saved.unscheduled_place_ids == ["b"]


def test_in_memory_is_owner_scoped():
    store = InMemoryCollectionStore()
    store.add_collection(_collection())

    assert store.get_collection("col_1", "someone_else") is None
    assert store.get_places("col_1", "someone_else") == []
    with pytest.raises(CollectionNotFoundError):
        store.save_day_plan("col_1", "someone_else", [], [])


def test_in_memory_returns_copies():
    store = InMemoryCollectionStore()
    store.add_collection(_collection())
    got = store.get_collection("col_1", "user_1")
    got.day_buckets.append(DayBucket("day-9", 9, []))
    assert store.get_collection("col_1", "user_1").day_buckets == []


def test_get_store_picks_backend():
    with patch.object(collection_store, "_store", None), \
            patch.object(config, "COLLECTION_BACKEND", "postgres"):
        assert isinstance(get_store(), PostgresCollectionStore)
    with patch.object(collection_store, "_store", None), \
            patch.object(config, "COLLECTION_BACKEND", "in_memory"):
        assert isinstance(get_store(), InMemoryCollectionStore)
    with patch.object(collection_store, "_store", None), \
            patch.object(config, "COLLECTION_BACKEND", "sqlite"):
        with pytest.raises(ValueError):
            get_store()


# ── collection_repo (SQL layer) ────────────────────────────────────────────────

def test_get_collection_decodes_json_columns():
    conn, cur = _mock_conn(
        description=[("id",), ("user_id",), ("name",), ("day_buckets",), ("unscheduled_place_ids",)],
        fetchone=("col_1", "user_1", "Lisbon",
                  json.dumps([{"id": "day-1", "dayNumber": 1, "placeIds": ["a"]}]), None),
    )
    row = collection_repo.get_collection(conn, "col_1", "user_1")

    sql, params = cur.execute.call_args[0]
    assert "user_id = %s" in sql
    assert params == ("col_1", "user_1")
    assert row["day_buckets"] == [{"id": "day-1", "dayNumber": 1, "placeIds": ["a"]}]
    assert row["unscheduled_place_ids"] == []


def test_get_collection_missing():
    conn, cur = _mock_conn(fetchone=None)
    assert collection_repo.get_collection(conn, "nope", "user_1") is None
    assert cur.execute.call_args[0][1] == ("nope", "user_1")


def test_get_places_in_collection_orders_and_scopes():
    conn, cur = _mock_conn(
        description=[("id",), ("name",), ("lat",), ("lon",)],
        fetchall=[("a", "Alfama", 38.71, -9.13), ("b", "Sintra", None, None)],
    )
    rows = collection_repo.get_places_in_collection(conn, "col_1", "user_1")

    sql, params = cur.execute.call_args[0]
    assert "ORDER BY pc.order_index ASC, p.name ASC" in sql
    assert params == ("col_1", "user_1")
    assert rows[1] == {"id": "b", "name": "Sintra", "lat": None, "lon": None}


def test_save_day_buckets_and_unscheduled_serialise_json():
    conn, cur = _mock_conn()
    buckets = [{"id": "day-1", "dayNumber": 1, "placeIds": ["a"]}]
    collection_repo.save_day_buckets(conn, "col_1", buckets)
    assert cur.execute.call_args[0][1] == (json.dumps(buckets), "col_1")

    collection_repo.save_unscheduled_places(conn, "col_1", ["b"])
    assert cur.execute.call_args[0][1] == ('["b"]', "col_1")


# ── Postgres store wiring ──────────────────────────────────────────────────────

@contextmanager
def _fake_conn():
    yield MagicMock()


def test_postgres_store_builds_snapshots():
    row = {
        "id": "col_1", "user_id": "user_1", "name": "Lisbon",
        "day_buckets": [{"id": "day-1", "dayNumber": 1, "placeIds": ["a"]}],
        "unscheduled_place_ids": ["b"],
    }
    places = [
        {"id": "a", "name": "Alfama", "lat": 38.71, "lon": -9.13},
        {"id": "b", "name": "Sintra", "lat": None, "lon": None},
    ]
    with patch("db.connection.get_conn", _fake_conn), \
            patch.object(collection_repo, "get_collection", return_value=row), \
            patch.object(collection_repo, "get_places_in_collection", return_value=places):
        got = PostgresCollectionStore().get_collection("col_1", "user_1")

    assert got.day_buckets == [DayBucket("day-1", 1, ["a"])]
    assert got.unscheduled_place_ids == ["b"]
    assert got.places[0].coords == Coords(38.71, -9.13)
    assert got.places[1].coords is None


def test_postgres_store_save_requires_collection():
    with patch("db.connection.get_conn", _fake_conn), \
            patch.object(collection_repo, "get_collection", return_value=None), \
            patch.object(collection_repo, "save_day_buckets") as save_buckets:
        with pytest.raises(CollectionNotFoundError):
            PostgresCollectionStore().save_day_plan("col_x", "user_1", [], [])
    save_buckets.assert_not_called()


def test_postgres_store_save_writes_both_columns():
    with patch("db.connection.get_conn", _fake_conn), \
            patch.object(collection_repo, "get_collection", return_value={"id": "col_1"}), \
            patch.object(collection_repo, "save_day_buckets") as save_buckets, \
            patch.object(collection_repo, "save_unscheduled_places") as save_unscheduled:
        PostgresCollectionStore().save_day_plan(
            "col_1", "user_1", [DayBucket("day-1", 1, ["a"])], ["b"],
        )

    assert save_buckets.call_args[0][1:] == ("col_1", [{"id": "day-1", "dayNumber": 1, "placeIds": ["a"]}])
    assert save_unscheduled.call_args[0][1:] == ("col_1", ["b"])
