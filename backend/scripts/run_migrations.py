#!/usr/bin/env python
"""
scripts/run_migrations.py
--------------------------
Creates the day planner tables (db/schema.sql) in the configured Postgres
database.

Usage:
    python scripts/run_migrations.py                 # apply
    python scripts/run_migrations.py --dry-run       # list statements only
    python scripts/run_migrations.py --sql-file other.sql

Exit codes:
    0  schema applied, or dry run listed
    1  missing file, connection failure or SQL error (nothing committed)

Connection settings come from connect_kwargs() in db/connection.py.
"""

from __future__ import annotations

import argparse
import pathlib
import re
import sys
from typing import Optional, Sequence

# Add the backend directory to sys.path so that config is importable
_BACKEND_DIR = pathlib.Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_BACKEND_DIR))

import psycopg2

import config
from db.connection import connect_kwargs

_SQL_FILE = _BACKEND_DIR / "db" / "schema.sql"

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT = re.compile(r"--[^\n]*")


def split_statements(sql: str) -> list[str]:
    """Drop /* */ and -- comments, split on semicolons, skip blanks."""
    sql = _LINE_COMMENT.sub("", _BLOCK_COMMENT.sub("", sql))
    statements = (part.strip() for part in sql.split(";"))
    return [stmt for stmt in statements if stmt]


def _one_line(stmt: str, width: int) -> str:
    return " ".join(stmt.split())[:width]


def apply_statements(conn, statements: Sequence[str]) -> int:
    """
    Execute every statement on `conn` in one transaction.

    Commits when all succeed; on the first failure rolls back and re-raises.
    Returns the number of statements applied.
    """
    conn.autocommit = False
    try:
        with conn.cursor() as cur:
            for n, stmt in enumerate(statements, 1):
                try:
                    cur.execute(stmt)
                except psycopg2.Error as exc:
                    print(f"  [✗] #{n} {_one_line(stmt, 60)}: {exc.pgerror or exc}")
                    raise
                print(f"  [✓] #{n} {_one_line(stmt, 60)}")
    except Exception:
        conn.rollback()
        print("[migrations] rolled back, nothing applied")
        raise
    conn.commit()
    return len(statements)


def run(sql_file: pathlib.Path = _SQL_FILE, dry_run: bool = False) -> int:
    if not sql_file.exists():
        raise FileNotFoundError(f"SQL file not found: {sql_file}")
    statements = split_statements(sql_file.read_text(encoding="utf-8"))

    print(f"[migrations] {len(statements)} statements from {sql_file.name} -> "
          f"{config.POSTGRES_DB} @ {config.POSTGRES_HOST}:{config.POSTGRES_PORT}")

    if dry_run:
        for n, stmt in enumerate(statements, 1):
            print(f"  [{n:03d}] {_one_line(stmt, 80)}")
        print("[migrations] dry run, database untouched")
        return 0

    conn = psycopg2.connect(**connect_kwargs())
    try:
        applied = apply_statements(conn, statements)
    finally:
        conn.close()
    print(f"[migrations] applied {applied} statements")
    return applied


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create the day planner tables in Postgres.")
    parser.add_argument("--dry-run", action="store_true", help="list statements, change nothing")
    parser.add_argument("--sql-file", type=pathlib.Path, default=_SQL_FILE)
    args = parser.parse_args(argv)
    try:
        run(args.sql_file, dry_run=args.dry_run)
    except (OSError, psycopg2.Error) as exc:
        print(f"[migrations] failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
