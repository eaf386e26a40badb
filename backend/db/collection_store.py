"""
db/collection_store.py
-----------------------
Collection storage used by the day routes.

Backends (config.COLLECTION_BACKEND):
  "in_memory": process-local dict; default, used by tests and local dev
  "postgres":  db/repositories/collection_repo.py over db.connection.get_conn()

Both return PlaceSnapshot / DayBucket values, never live rows, so the
scheduler works on copies.
"""

from __future__ import annotations

import copy
import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

import config
from schemas.day_planner import Collection, DayBucket, PlaceSnapshot

logger = logging.getLogger(__name__)


class CollectionNotFoundError(LookupError):
    def __init__(self, collection_id: str) -> None:
        super().__init__(f"Collection '{collection_id}' not found")
        self.collection_id = collection_id


class CollectionStore(ABC):

    @abstractmethod
    def get_collection(self, collection_id: str, user_id: str) -> Optional[Collection]:
        """Collection with its saved plan, or None if missing / not owned by user_id."""

    @abstractmethod
    def get_places(self, collection_id: str, user_id: str) -> list[PlaceSnapshot]:
        """Places in collection order; empty when the collection is missing."""

    @abstractmethod
    def save_day_plan(
        self,
        collection_id: str,
        user_id: str,
        day_buckets: list[DayBucket],
        unscheduled_place_ids: list[str],
    ) -> None:
        """Replace the saved plan. Raises CollectionNotFoundError."""


class InMemoryCollectionStore(CollectionStore):

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._collections: dict[str, Collection] = {}

    def add_collection(self, collection: Collection) -> None:
        with self._lock:
            self._collections[collection.id] = copy.deepcopy(collection)

    def clear(self) -> None:
        with self._lock:
            self._collections.clear()

    def _owned(self, collection_id: str, user_id: str) -> Optional[Collection]:
        found = self._collections.get(collection_id)
        if found is None or found.user_id != user_id:
            return None
        return found

    def get_collection(self, collection_id: str, user_id: str) -> Optional[Collection]:
        with self._lock:
            found = self._owned(collection_id, user_id)
            return copy.deepcopy(found) if found else None

    def get_places(self, collection_id: str, user_id: str) -> list[PlaceSnapshot]:
        with self._lock:
            found = self._owned(collection_id, user_id)
            return list(found.places) if found else []

    def save_day_plan(
        self,
        collection_id: str,
        user_id: str,
        day_buckets: list[DayBucket],
        unscheduled_place_ids: list[str],
    ) -> None:
        with self._lock:
            found = self._owned(collection_id, user_id)
            if found is None:
                raise CollectionNotFoundError(collection_id)
            found.day_buckets = copy.deepcopy(day_buckets)
            found.unscheduled_place_ids = list(unscheduled_place_ids)


class PostgresCollectionStore(CollectionStore):

    def get_collection(self, collection_id: str, user_id: str) -> Optional[Collection]:
        from db.connection import get_conn
        from db.repositories import collection_repo

        with get_conn() as conn:
            row = collection_repo.get_collection(conn, collection_id, user_id)
            if row is None:
                return None
            places = collection_repo.get_places_in_collection(conn, collection_id, user_id)

        return Collection(
            id=row["id"],
            user_id=row["user_id"],
            name=row.get("name") or "",
            places=[PlaceSnapshot.from_dict(p) for p in places],
            day_buckets=[DayBucket.from_dict(b) for b in row["day_buckets"]],
            unscheduled_place_ids=[str(pid) for pid in row["unscheduled_place_ids"]],
        )

    def get_places(self, collection_id: str, user_id: str) -> list[PlaceSnapshot]:
        from db.connection import get_conn
        from db.repositories import collection_repo

        with get_conn() as conn:
            rows = collection_repo.get_places_in_collection(conn, collection_id, user_id)
        return [PlaceSnapshot.from_dict(r) for r in rows]

    def save_day_plan(
        self,
        collection_id: str,
        user_id: str,
        day_buckets: list[DayBucket],
        unscheduled_place_ids: list[str],
    ) -> None:
        from db.connection import get_conn
        from db.repositories import collection_repo

        with get_conn() as conn:
            if collection_repo.get_collection(conn, collection_id, user_id) is None:
                raise CollectionNotFoundError(collection_id)
            collection_repo.save_day_buckets(
                conn, collection_id, [b.to_dict() for b in day_buckets],
            )
            collection_repo.save_unscheduled_places(conn, collection_id, unscheduled_place_ids)


_store: CollectionStore | None = None


def get_store() -> CollectionStore:
    """Return the process-wide store for config.COLLECTION_BACKEND."""
    global _store
    if _store is None:
        backend = config.COLLECTION_BACKEND.strip().lower()
        if backend == "postgres":
            _store = PostgresCollectionStore()
        elif backend == "in_memory":
            _store = InMemoryCollectionStore()
        else:
            raise ValueError(f"Unknown COLLECTION_BACKEND {config.COLLECTION_BACKEND!r}")
        logger.info("collection store: %s", type(_store).__name__)
    return _store
