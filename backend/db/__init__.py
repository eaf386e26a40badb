"""
db/
----
Storage access layer for the day planner.

Storage architecture:
  Collection store (db/collection_store.py), picked by COLLECTION_BACKEND
    in_memory : process-local, default
    postgres  : psycopg2 pool (db/connection.py) + db/repositories/collection_repo.py
                schema: db/schema.sql
                apply:  python scripts/run_migrations.py

  Redis (redis-py): rate-limit counters only
    rl:{tier}:{identity}:{window_start}  TTL = tier window

Public exports (import from here for convenience):
    from db import get_store, CollectionNotFoundError
    from db.repositories import collection_repo
"""

from db.collection_store import (
    CollectionNotFoundError,
    CollectionStore,
    InMemoryCollectionStore,
    PostgresCollectionStore,
    get_store,
)

__all__ = [
    "CollectionNotFoundError",
    "CollectionStore",
    "InMemoryCollectionStore",
    "PostgresCollectionStore",
    "get_store",
]
