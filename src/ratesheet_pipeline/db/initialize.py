from __future__ import annotations

from pathlib import Path

import psycopg

from ratesheet_pipeline.db.connect import connect


def run_sql_file(conn: psycopg.Connection, sql_path: Path) -> None:
    """Apply one schema file and commit it."""
    script = sql_path.read_text(encoding="utf-8")
    # the schema files hold no semicolons inside literals or function bodies
    statements = [s.strip() for s in script.split(";") if s.strip()]

    with conn.cursor() as cur:
        for n, stmt in enumerate(statements, 1):
            try:
                cur.execute(stmt)
            except psycopg.Error as e:
                raise RuntimeError(
                    f"schema statement #{n} of {sql_path.name} failed: {e}\n"
                    f"--- statement ---\n{stmt}\n--- end ---\n"
                ) from e
    conn.commit()


def init_schema(conn: psycopg.Connection, *, sql_path: Path) -> list[Path]:
    """
    Create the rate-sheet tables from `sql_path`, a single `.sql` file or a
    directory whose `*.sql` files are applied in name order (`000_`, `010_`, ...).

    Every statement is idempotent, so running it twice is harmless.
    Returns the files applied.
    """
    files = sorted(sql_path.glob("*.sql")) if sql_path.is_dir() else [sql_path]
    for p in files:
        run_sql_file(conn, p)
    return files


def db_init(*, sql_path: Path) -> list[Path]:
    """`init_schema` against the database from `AZRATES_DSN`."""
    with connect() as conn:
        return init_schema(conn, sql_path=sql_path)
