from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal
from uuid import UUID

from psycopg import Connection


RunStatus = Literal["running", "succeeded", "failed", "rejected"]


@dataclass(frozen=True)
class ImportRun:
    """Base run information to persist as a ledger."""
    run_id: UUID
    input_path: str
    mode: str
    status: RunStatus


def insert_import_run(conn: Connection, *, input_path: Path, mode: str) -> UUID:
    """
    Create an `import_runs` row, returns `run_id`.

    Callers commit immediately so the ledger persists even if later steps error.
    """
    row = conn.execute(
        """
        INSERT INTO import_runs (input_path, mode, status)
        VALUES (%s, %s, 'running')
        RETURNING run_id
        """,
        (str(input_path), mode),
    ).fetchone()
    assert row is not None
    return row[0]


def finish_import_run(
    conn: Connection,
    *,
    run_id: UUID,
    status: RunStatus,
    total: int | None = None,
    inserted: int | None = None,
    updated: int | None = None,
    skipped: int | None = None,
) -> None:
    """Record the final `status` (and counts, when known) of a run."""
    conn.execute(
        """
        UPDATE import_runs
        SET status = %s,
            total_rows = COALESCE(%s, total_rows),
            inserted = COALESCE(%s, inserted),
            updated = COALESCE(%s, updated),
            skipped = COALESCE(%s, skipped),
            finished_at = now()
        WHERE run_id = %s
        """,
        (status, total, inserted, updated, skipped, run_id),
    )


def get_import_run(conn: Connection, *, run_id: UUID) -> ImportRun | None:
    row = conn.execute(
        "SELECT run_id, input_path, mode, status FROM import_runs WHERE run_id = %s",
        (run_id,),
    ).fetchone()
    if row is None:
        return None
    return ImportRun(run_id=row[0], input_path=row[1], mode=row[2], status=row[3])
