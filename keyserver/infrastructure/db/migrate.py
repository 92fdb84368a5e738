"""
Apply the SQL files in MIGRATIONS_DIR to DATABASE_URL, in filename order.

    python -m keyserver.infrastructure.db.migrate up
    python -m keyserver.infrastructure.db.migrate status
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import psycopg

from keyserver.settings import get_settings

MIGRATIONS_DIR = Path(os.environ.get("MIGRATIONS_DIR", "migrations"))
SCHEMA_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version    text PRIMARY KEY,
  applied_at timestamptz NOT NULL DEFAULT now()
);
"""


def pending(conn: psycopg.Connection, migrations_dir: Path) -> list[Path]:
    with conn.cursor() as cur:
        cur.execute(SCHEMA_TABLE_SQL)
        cur.execute("SELECT version FROM schema_migrations;")
        done = {row[0] for row in cur.fetchall()}
    conn.commit()
    return [p for p in sorted(migrations_dir.glob("*.sql")) if p.stem not in done]


def apply(conn: psycopg.Connection, path: Path) -> None:
    with conn.cursor() as cur:
        cur.execute(path.read_text(encoding="utf-8"))
        cur.execute(
            "INSERT INTO schema_migrations (version) VALUES (%s);", (path.stem,)
        )
    conn.commit()


def cmd_up(dsn: str, migrations_dir: Path) -> int:
    with psycopg.connect(dsn, autocommit=False) as conn:
        to_run = pending(conn, migrations_dir)
        if not to_run:
            print("No pending migrations.", flush=True)
            return 0
        for path in to_run:
            print(f"==> applying {path.stem}", flush=True)
            try:
                apply(conn, path)
            except psycopg.Error as e:
                conn.rollback()
                print(f"failed {path.stem}: {e}", file=sys.stderr)
                return 1
    return 0


def cmd_status(dsn: str, migrations_dir: Path) -> int:
    with psycopg.connect(dsn) as conn:
        for path in pending(conn, migrations_dir):
            print(f"pending {path.stem}")
    return 0


def main(argv: list[str]) -> int:
    commands = {"up": cmd_up, "status": cmd_status}
    if len(argv) != 2 or argv[1] not in commands:
        print(
            "usage: python -m keyserver.infrastructure.db.migrate [up|status]",
            file=sys.stderr,
        )
        return 2
    if not MIGRATIONS_DIR.exists():
        print(f"ERROR: migrations dir not found: {MIGRATIONS_DIR}", file=sys.stderr)
        return 2
    return commands[argv[1]](get_settings().database_url, MIGRATIONS_DIR)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
