"""
test_infrastructure.py
──────────────────────
Redis rate-limit counter, JSONL event log and the migration script's SQL
splitting. Redis and Postgres are never contacted.
"""

from __future__ import annotations

import json
import threading
from unittest.mock import MagicMock, patch

import pytest

import db.redis_client as redis_client
from modules.observability.logger import StructuredLogger
from scripts import run_migrations


# ── Redis counter ──────────────────────────────────────────────────────────────

def test_hit_rate_limit_uses_fixed_window_key():
    fake = MagicMock()
    pipe = fake.pipeline.return_value
    pipe.execute.return_value = [3, True]

    with patch.object(redis_client, "get_redis", return_value=fake):
        count, reset = redis_client.hit_rate_limit("standard", "user_1", 60, now=1_000_030)

    assert count == 3
    assert reset == 1_000_020 + 60
    pipe.incr.assert_called_once_with("rl:standard:user_1:1000020")
    pipe.expire.assert_called_once_with("rl:standard:user_1:1000020", 60)


def test_get_redis_is_a_singleton():
    with patch.object(redis_client, "_client", None), \
            patch.object(redis_client.redis, "Redis") as ctor:
        first = redis_client.get_redis()
        second = redis_client.get_redis()
    assert first is second
    ctor.assert_called_once()
    assert ctor.call_args.kwargs["decode_responses"] is True


# ── StructuredLogger ───────────────────────────────────────────────────────────

def test_disabled_logger_writes_nothing(tmp_path):
    StructuredLogger(logs_dir=tmp_path, enabled=False).log("col_1", "AUTO_SCHEDULE", {})
    assert list(tmp_path.iterdir()) == []


def test_logger_appends_one_line_per_event(tmp_path):
    events = StructuredLogger(logs_dir=tmp_path, enabled=True)
    threads = [
        threading.Thread(target=events.log, args=("col_1", "AUTO_SCHEDULE", {"n": i}))
        for i in range(20)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    events.close()

    lines = (tmp_path / "col_1.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 20
    assert sorted(json.loads(line)["payload"]["n"] for line in lines) == list(range(20))


def test_logger_sanitises_file_names(tmp_path):
    events = StructuredLogger(logs_dir=tmp_path, enabled=True)
    events.log("../etc/passwd", "X", {})
    events.close()
    assert [p.name for p in tmp_path.iterdir()] == [".._etc_passwd.jsonl"]


# ── migrations ─────────────────────────────────────────────────────────────────

def test_schema_splits_into_statements():
    sql = run_migrations._SQL_FILE.read_text(encoding="utf-8")
    statements = run_migrations.split_statements(sql)
    assert len(statements) == 5
    assert all("--" not in s and "/*" not in s for s in statements)
    assert statements[0].startswith("CREATE TABLE IF NOT EXISTS collections")


def test_apply_statements_commits_once():
    conn = MagicMock()
    cur = conn.cursor.return_value.__enter__.return_value
    assert run_migrations.apply_statements(conn, ["SELECT 1", "SELECT 2"]) == 2
    assert [c.args[0] for c in cur.execute.call_args_list] == ["SELECT 1", "SELECT 2"]
    conn.commit.assert_called_once()
    conn.rollback.assert_not_called()


def test_apply_statements_rolls_back_on_sql_error():
    conn = MagicMock()
    cur = conn.cursor.return_value.__enter__.return_value
    cur.execute.side_effect = [None, run_migrations.psycopg2.ProgrammingError("boom")]
    with pytest.raises(run_migrations.psycopg2.Error):
        run_migrations.apply_statements(conn, ["SELECT 1", "SELEC 2"])
    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()


def test_dry_run_never_connects(capsys):
    with patch.object(run_migrations.psycopg2, "connect") as connect:
        assert run_migrations.main(["--dry-run"]) == 0
    connect.assert_not_called()
    assert "[005]" in capsys.readouterr().out


def test_missing_sql_file_exits_1(tmp_path):
    assert run_migrations.main(["--sql-file", str(tmp_path / "none.sql")]) == 1
