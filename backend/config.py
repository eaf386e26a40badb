"""
config.py
---------
Central configuration for the Day Planner backend.
Every setting is read from environment variables; the defaults below suit
local development.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Values in backend/.env are picked up by os.getenv() below; variables already
# set in the shell win.
_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ── Scheduling ────────────────────────────────────────────────────────────────
# Average speeds per transport mode (km/h). Straight-line distance is used as a
# proxy for travel, so these are coarse categories, not routing estimates.
DRIVE_SPEED_KMH: float = float(os.getenv("DRIVE_SPEED_KMH", "60"))
WALK_SPEED_KMH:  float = float(os.getenv("WALK_SPEED_KMH",  "5"))

TRANSPORT_SPEEDS_KMH: dict[str, float] = {
    "drive": DRIVE_SPEED_KMH,
    "walk":  WALK_SPEED_KMH,
}

# Mean earth radius (WGS84), kilometres
EARTH_RADIUS_KM: float = 6371.0088

# Accepted range for hoursPerDay on the HTTP surface
MIN_HOURS_PER_DAY: float = 1.0
MAX_HOURS_PER_DAY: float = 24.0

# Per-day route optimisation (nearest neighbour + 2-opt)
ROUTE_OPTIMIZE_MAX_PLACES: int = int(os.getenv("ROUTE_OPTIMIZE_MAX_PLACES", "50"))
ROUTE_OPTIMIZE_STARTS:     int = int(os.getenv("ROUTE_OPTIMIZE_STARTS",     "5"))

# ── Collection storage ────────────────────────────────────────────────────────
# "in_memory" | "postgres"
COLLECTION_BACKEND: str = os.getenv("COLLECTION_BACKEND", "in_memory")

# ── PostgreSQL ────────────────────────────────────────────────────────────────
# Schema defined in db/schema.sql
# Apply with: python scripts/run_migrations.py
POSTGRES_HOST: str     = os.getenv("POSTGRES_HOST",     "localhost")
POSTGRES_PORT: int     = int(os.getenv("POSTGRES_PORT", "5432"))
POSTGRES_DB: str       = os.getenv("POSTGRES_DB",       "dayplanner")
POSTGRES_USER: str     = os.getenv("POSTGRES_USER",     "dayplanner_user")
POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "dayplanner_pass")
POSTGRES_MIN_CONN: int = int(os.getenv("POSTGRES_MIN_CONN", "1"))
POSTGRES_MAX_CONN: int = int(os.getenv("POSTGRES_MAX_CONN", "10"))

# ── Redis (rate limiting) ─────────────────────────────────────────────────────
REDIS_HOST: str     = os.getenv("REDIS_HOST",     "localhost")
REDIS_PORT: int     = int(os.getenv("REDIS_PORT", "6379"))
REDIS_DB: int       = int(os.getenv("REDIS_DB",   "0"))
REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")

RATE_LIMIT_ENABLED: bool = _flag("RATE_LIMIT_ENABLED", "false")

# tier -> (max requests, window seconds)
RATE_LIMIT_TIERS: dict[str, tuple[int, int]] = {
    "auth":     (5,   3600),
    "strict":   (5,   60),
    "standard": (30,  60),
    "relaxed":  (100, 60),
}

# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# JSONL event log (modules/observability/logger.py)
STRUCTURED_LOG_ENABLED: bool = _flag("STRUCTURED_LOG_ENABLED", "false")
LOGS_DIR: str = os.getenv("LOGS_DIR", str(Path(__file__).parent / "logs"))
