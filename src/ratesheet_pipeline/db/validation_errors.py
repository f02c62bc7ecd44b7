from __future__ import annotations

from typing import Any, Sequence
from uuid import UUID

from psycopg import Connection, sql

from ratesheet_pipeline.parsing.types import ValidationError


def insert_validation_errors(conn: Connection, *, run_id: UUID, errors: Sequence[ValidationError]) -> None:
    """
    Insert the `errors` of a rejected run into `validation_errors`, in report order.

    Table/column identifiers are fixed constants. Values are parameterized.
    """
    cols = ("run_id", "row_number", "column_name", "cell_value", "message", "kind")

    query = sql.SQL("INSERT INTO {tbl} ({cols}) VALUES ({vals})").format(
        tbl=sql.Identifier("validation_errors"),
        cols=sql.SQL(", ").join(sql.Identifier(c) for c in cols),
        vals=sql.SQL(", ").join(sql.Placeholder() for _ in cols),
    )

    params: list[tuple[Any, ...]] = [
        (run_id, e.row, e.column, e.value, e.message, e.kind.value) for e in errors
    ]

    if params:
        with conn.cursor() as cur:
            cur.executemany(query, params)


def count_validation_errors(conn: Connection, *, run_id: UUID) -> int:
    row = conn.execute("SELECT COUNT(*) FROM validation_errors WHERE run_id = %s", (run_id,)).fetchone()
    assert row is not None
    return int(row[0])
