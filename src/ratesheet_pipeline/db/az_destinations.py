from __future__ import annotations

import csv
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Sequence, TextIO
from uuid import UUID

from psycopg import Connection
from psycopg.rows import class_row

from ratesheet_pipeline.parsing.increments import DEFAULT_BILLING_INCREMENT, split_billing_increment


@dataclass(frozen=True)
class AZDestination:
    """A stored `az_destinations` row."""
    id: UUID
    code: str
    destination: str
    region: str | None
    billing_increment: str
    initial_period: int
    recurring_period: int
    grace_period: int
    effective_date: date | None
    time_class: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class UpsertCounts:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0

    def __add__(self, other: UpsertCounts) -> UpsertCounts:
        return UpsertCounts(
            inserted=self.inserted + other.inserted,
            updated=self.updated + other.updated,
            skipped=self.skipped + other.skipped,
        )


_SELECT_COLS = (
    "id, code, destination, region, billing_increment, initial_period, recurring_period, grace_period, "
    "effective_date, time_class, is_active, created_at, updated_at"
)

# `xmax = 0` only for freshly inserted tuples; unchanged rows hit the WHERE and return nothing.
_UPSERT = """
INSERT INTO az_destinations (
  code, destination, region, billing_increment, initial_period, recurring_period,
  grace_period, effective_date, time_class
)
VALUES (%s, %s, %s, %s, %s, %s, COALESCE(%s, 0), %s, %s)
ON CONFLICT (code) DO UPDATE SET
  destination = EXCLUDED.destination,
  region = EXCLUDED.region,
  billing_increment = EXCLUDED.billing_increment,
  initial_period = EXCLUDED.initial_period,
  recurring_period = EXCLUDED.recurring_period,
  grace_period = EXCLUDED.grace_period,
  effective_date = EXCLUDED.effective_date,
  time_class = EXCLUDED.time_class,
  updated_at = now()
WHERE (az_destinations.destination, az_destinations.region, az_destinations.billing_increment,
       az_destinations.grace_period, az_destinations.effective_date, az_destinations.time_class)
  IS DISTINCT FROM
      (EXCLUDED.destination, EXCLUDED.region, EXCLUDED.billing_increment,
       EXCLUDED.grace_period, EXCLUDED.effective_date, EXCLUDED.time_class)
RETURNING (xmax = 0) AS inserted
"""


def upsert_params(r: Mapping[str, Any]) -> tuple[Any, ...]:
    """Positional `_UPSERT` parameters for one `AZRateRow.to_mapping()` row."""
    increment = r.get("billing_increment") or DEFAULT_BILLING_INCREMENT.value
    initial, recurring = split_billing_increment(increment)
    return (
        r["code"],
        r["destination"],
        r.get("region"),
        increment,
        initial,
        recurring,
        r.get("grace_period"),
        r.get("effective_date"),
        r.get("time_class"),
    )


def upsert_destinations_bulk(conn: Connection, rows: Sequence[Mapping[str, Any]]) -> UpsertCounts:
    """
    Insert new codes, update changed ones, skip identical ones.

    `rows` use the `AZRateRow.to_mapping()` keys. A missing increment is stored
    as `60/60`, and its periods are split out into
    `initial_period`/`recurring_period`. Commits are left to the caller.
    """
    inserted = updated = skipped = 0
    with conn.cursor() as cur:
        for r in rows:
            cur.execute(_UPSERT, upsert_params(r))
            res = cur.fetchone()
            if res is None:
                skipped += 1
            elif res[0]:
                inserted += 1
            else:
                updated += 1
    return UpsertCounts(inserted=inserted, updated=updated, skipped=skipped)


def delete_all_destinations(conn: Connection) -> int:
    """Delete every destination, returns how many were removed."""
    cur = conn.execute("DELETE FROM az_destinations")
    return cur.rowcount


def get_destination_by_code(conn: Connection, code: str) -> AZDestination | None:
    with conn.cursor(row_factory=class_row(AZDestination)) as cur:
        cur.execute(f"SELECT {_SELECT_COLS} FROM az_destinations WHERE code = %s", (code,))
        return cur.fetchone()


def _escape_like(s: str) -> str:
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_destinations(
    conn: Connection,
    *,
    search: str | None = None,
    region: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[AZDestination], int]:
    """
    Page through destinations ordered by code.

    `search` matches a code prefix or any part of the destination name, ignoring case.
    Returns `(page, total matching)`.
    """
    where: list[str] = []
    params: list[Any] = []
    if search:
        where.append("(code ILIKE %s OR destination ILIKE %s)")
        s = _escape_like(search)
        params.extend([f"{s}%", f"%{s}%"])
    if region:
        where.append("region = %s")
        params.append(region)
    where_sql = f"WHERE {' AND '.join(where)}" if where else ""

    total_row = conn.execute(f"SELECT COUNT(*) FROM az_destinations {where_sql}", params).fetchone()
    assert total_row is not None

    with conn.cursor(row_factory=class_row(AZDestination)) as cur:
        cur.execute(
            f"SELECT {_SELECT_COLS} FROM az_destinations {where_sql} ORDER BY code LIMIT %s OFFSET %s",
            [*params, limit, offset],
        )
        page = cur.fetchall()
    return page, int(total_row[0])


def get_regions(conn: Connection) -> list[str]:
    rows = conn.execute(
        "SELECT DISTINCT region FROM az_destinations WHERE region IS NOT NULL ORDER BY region"
    ).fetchall()
    return [r[0] for r in rows]


def normalize_code(conn: Connection, dial_code: str) -> AZDestination | None:
    """Longest stored code that is a prefix of `dial_code`."""
    prefixes = [dial_code[:i] for i in range(len(dial_code), 0, -1)]
    if not prefixes:
        return None
    with conn.cursor(row_factory=class_row(AZDestination)) as cur:
        cur.execute(
            f"SELECT {_SELECT_COLS} FROM az_destinations WHERE code = ANY(%s) ORDER BY length(code) DESC LIMIT 1",
            (prefixes,),
        )
        return cur.fetchone()


EXPORT_HEADER = ("code", "destination", "region", "billingIncrement", "gracePeriod")


def write_destinations_csv(destinations: Iterable[AZDestination], out: TextIO) -> int:
    """Write `destinations` as CSV, returns the number of data rows."""
    w = csv.writer(out, lineterminator="\n")
    w.writerow(EXPORT_HEADER)
    n = 0
    for d in destinations:
        w.writerow([d.code, d.destination, d.region or "", d.billing_increment, d.grace_period])
        n += 1
    return n


def export_destinations_csv(conn: Connection, out: TextIO) -> int:
    """Export every destination, ordered by code."""
    with conn.cursor(row_factory=class_row(AZDestination)) as cur:
        cur.execute(f"SELECT {_SELECT_COLS} FROM az_destinations ORDER BY code")
        return write_destinations_csv(cur, out)
