"""
Structured JSON event log: append-only, one object per line (.jsonl).

Usage:
    from modules.observability.logger import StructuredLogger

    events = StructuredLogger()
    events.log("col_123", "AUTO_SCHEDULE", {"places": 12, "days": 3})

Records go to  <LOGS_DIR>/<collection_id>.jsonl  (config.LOGS_DIR).
Nothing is written unless config.STRUCTURED_LOG_ENABLED is set, or the
logger is created with enabled=True.
"""

from __future__ import annotations

import json
import os
import re
import threading
from datetime import datetime, timezone
from pathlib import Path

import config

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class StructuredLogger:
    """Thread-safe, append-only JSONL logger keyed by collection id."""

    def __init__(
        self,
        logs_dir: Path | str | None = None,
        enabled: bool | None = None,
    ) -> None:
        self._logs_dir = Path(logs_dir) if logs_dir else Path(config.LOGS_DIR)
        self.enabled = config.STRUCTURED_LOG_ENABLED if enabled is None else enabled
        self._lock = threading.Lock()
        self._handles: dict[str, object] = {}  # file stem -> file handle

    # ── public API ────────────────────────────────────────────────────────

    def log(self, collection_id: str, event_type: str, payload: dict) -> None:
        """Append one structured JSON record to ``<collection_id>.jsonl``."""
        if not self.enabled:
            return
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "collection_id": collection_id,
            "event_type": event_type,
            "payload": payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"
        stem = _UNSAFE_CHARS.sub("_", collection_id) or "_"

        with self._lock:
            fh = self._handles.get(stem)
            if fh is None:
                fh = self._open(stem)
            fh.write(line)  # type: ignore[union-attr]
            fh.flush()  # type: ignore[union-attr]

    def close(self) -> None:
        """Close all open file handles."""
        with self._lock:
            for fh in self._handles.values():
                fh.close()  # type: ignore[union-attr]
            self._handles.clear()

    # ── internals ─────────────────────────────────────────────────────────

    def _open(self, stem: str):  # noqa: ANN202
        os.makedirs(self._logs_dir, exist_ok=True)
        path = self._logs_dir / f"{stem}.jsonl"
        fh = open(path, "a", encoding="utf-8")  # noqa: SIM115
        self._handles[stem] = fh
        return fh
