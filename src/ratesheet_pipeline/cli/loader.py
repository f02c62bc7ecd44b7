from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, Mapping, get_args
from uuid import UUID

from psycopg import Connection

from ratesheet_pipeline.db.az_destinations import UpsertCounts, delete_all_destinations, upsert_destinations_bulk
from ratesheet_pipeline.db.import_runs import finish_import_run, insert_import_run
from ratesheet_pipeline.db.validation_errors import insert_validation_errors
from ratesheet_pipeline.ingest.readers import stream_rows
from ratesheet_pipeline.ingest.summary import ImportMode, ImportSummary
from ratesheet_pipeline.parsing.schema import AZRateRow, to_az_rate_row
from ratesheet_pipeline.parsing.types import ValidationError, ValidationResult
from ratesheet_pipeline.parsing.validator import HEADER_ROW_OFFSET, validate_and_normalize_az_data

logger = logging.getLogger(__name__)

BATCH_SIZE = 500        # config: increase or decrease.


def map_rows(raw_rows: Iterable[tuple[int, Mapping[str, Any]]]) -> tuple[list[AZRateRow], list[ValidationError]]:
    """
    Map reader output onto `AZRateRow`s.

    Rows keep the reader's numbering as the sheet row (`source_row + 1`, the
    header is row 1), so blank XLSX rows the reader skipped do not shift the
    reported row numbers. Cells that fail to coerce (grace period, dates,
    time class) are reported, never raised.
    """
    rows: list[AZRateRow] = []
    errors: list[ValidationError] = []
    for source_row, raw in raw_rows:
        row, row_errors = to_az_rate_row(raw, source_row=source_row + 1)
        rows.append(row)
        errors.extend(row_errors)
    return rows, errors


def validate_rows(rows: list[AZRateRow], mapping_errors: list[ValidationError]) -> ValidationResult:
    """Validate mapped rows, folding in mapping errors in row order."""
    result = validate_and_normalize_az_data(rows)
    # the validator numbers rows by position, report them by sheet row instead
    validator_errors = [
        replace(e, row=rows[e.row - HEADER_ROW_OFFSET].source_row) for e in result.errors
    ]
    # stable sort keeps column order within a row
    merged = sorted([*validator_errors, *mapping_errors], key=lambda e: e.row)
    return ValidationResult(errors=merged, normalized_data=result.normalized_data)


def validate_file(input_path: Path, *, sheet_name: str | None = None) -> ValidationResult:
    """Read, map and validate a rate sheet without touching the DB."""
    rows, mapping_errors = map_rows(stream_rows(input_path, sheet_name=sheet_name))
    result = validate_rows(rows, mapping_errors)
    logger.info("validated %s: rows=%d errors=%d", input_path, len(rows), len(result.errors))
    return result


def import_file(
    conn: Connection,
    *,
    input_path: Path,
    mode: ImportMode = "update",
    sheet_name: str | None = None,
) -> ImportSummary:
    """
    End-to-end rate-sheet import:
      - Create an `import_runs` row (which is committed immediately),
      - Read every row and map it onto `AZRateRow`,
      - Validate the whole sheet,
            - any error -> errors go to `validation_errors`, run is `rejected`,
              nothing is written to `az_destinations`,
      - Otherwise:
            - `replace` mode clears `az_destinations` first,
            - rows are upserted in batches of `BATCH_SIZE`,
      - And update the run's `status` appropriately.

    Raises only on infra related exceptions (DB issues/bad connection, unreadable file, etc.).
    Invalid data never raises, it is returned in `ImportSummary.errors`.
    """
    if mode not in get_args(ImportMode):
        raise ValueError(f"mode must be 'update' or 'replace', got {mode!r}")

    ## -- create run ledger, committed immediately
    run_id: UUID = insert_import_run(conn, input_path=input_path, mode=mode)
    conn.commit()

    try:
        rows, mapping_errors = map_rows(stream_rows(input_path, sheet_name=sheet_name))
        result = validate_rows(rows, mapping_errors)
        total = len(rows)

        if not result.is_valid:
            logger.warning("import %s rejected: %d errors in %d rows", run_id, len(result.errors), total)
            insert_validation_errors(conn, run_id=run_id, errors=result.errors)
            finish_import_run(conn, run_id=run_id, status="rejected", total=total)
            conn.commit()
            return ImportSummary(
                run_id=run_id,
                input_path=str(input_path),
                mode=mode,
                total=total,
                errors=tuple(result.errors),
            )

        if mode == "replace":
            deleted = delete_all_destinations(conn)
            logger.info("import %s: replace mode removed %d destinations", run_id, deleted)

        counts = UpsertCounts()
        staged = [r.to_mapping() for r in result.normalized_data]
        n_batches = (len(staged) + BATCH_SIZE - 1) // BATCH_SIZE
        for b, start in enumerate(range(0, len(staged), BATCH_SIZE), start=1):
            logger.debug("import %s: batch %d/%d", run_id, b, n_batches)
            counts = counts + upsert_destinations_bulk(conn, staged[start:start + BATCH_SIZE])

        ## -- run success!
        finish_import_run(
            conn,
            run_id=run_id,
            status="succeeded",
            total=total,
            inserted=counts.inserted,
            updated=counts.updated,
            skipped=counts.skipped,
        )
        conn.commit()
        logger.info(
            "import %s complete: %d inserted, %d updated, %d skipped",
            run_id, counts.inserted, counts.updated, counts.skipped,
        )

        return ImportSummary(
            run_id=run_id,
            input_path=str(input_path),
            mode=mode,
            total=total,
            inserted=counts.inserted,
            updated=counts.updated,
            skipped=counts.skipped,
        )

    except Exception:
        # revert all changes (excluding run ledger)
        logger.exception("import %s failed", run_id)
        conn.rollback()
        ## -- Update that the run failed (and separate txn)
        finish_import_run(conn, run_id=run_id, status="failed")
        conn.commit()
        raise
