from __future__ import annotations

import dataclasses
import logging
from typing import Any, Mapping, Sequence

from .increments import normalize_billing_increment
from .schema import AZRateRow
from .types import ErrorKind, ValidationError, ValidationResult

logger = logging.getLogger(__name__)

# header row is spreadsheet row 1, first data row is row 2
HEADER_ROW_OFFSET = 2

DEFAULT_MAX_ERRORS = 10

Row = AZRateRow | Mapping[str, Any]


def _is_blank(v: Any) -> bool:
    if not v:
        return True
    return isinstance(v, str) and v.strip() == ""


def _get(row: Row, attr: str, key: str) -> Any:
    if isinstance(row, AZRateRow):
        return getattr(row, attr)
    return row.get(key)


def _with_increment(row: Row, value: str) -> Row:
    """New row object with the normalized increment; the input is left untouched."""
    if isinstance(row, AZRateRow):
        return dataclasses.replace(row, billing_increment=value)
    out = dict(row)
    out["billingIncrement"] = value
    return out


def _copy(row: Row) -> Row:
    if isinstance(row, AZRateRow):
        return dataclasses.replace(row)
    return dict(row)


def validate_and_normalize_az_data(rows: Sequence[Row]) -> ValidationResult:
    """
    Validate every AZ row and normalize its billing increment.

    Rows are either `AZRateRow` or plain mappings using the `code`,
    `destination` and `billingIncrement` keys. All checks run on all rows:
    nothing short-circuits and errors are never deduplicated, so the result
    lists every problem in row-then-column order. Never raises on bad data.

    `normalized_data` holds one new row per input row, in input order, including
    rows that failed (their invalid increment is left as given).
    """
    errors: list[ValidationError] = []
    normalized: list[Row] = []

    for i, row in enumerate(rows):
        row_number = i + HEADER_ROW_OFFSET
        out = _copy(row)

        billing = _get(row, "billing_increment", "billingIncrement")
        res = normalize_billing_increment(billing)
        if res.error is not None:
            errors.append(
                ValidationError(
                    row=row_number,
                    column="billingIncrement",
                    value=str(billing) if billing else "",
                    message=res.error,
                    kind=res.error_kind or ErrorKind.invalid_format,
                )
            )
        else:
            assert res.normalized_value is not None
            out = _with_increment(row, res.normalized_value.value)

        if _is_blank(_get(row, "code", "code")):
            errors.append(
                ValidationError(row=row_number, column="code", value="", message="Code is required")
            )

        if _is_blank(_get(row, "destination", "destination")):
            errors.append(
                ValidationError(row=row_number, column="destination", value="", message="Destination is required")
            )

        normalized.append(out)

    logger.debug("validated %d rows, %d errors", len(normalized), len(errors))
    return ValidationResult(errors=errors, normalized_data=normalized)


def format_validation_errors(errors: Sequence[ValidationError], max_errors: int = DEFAULT_MAX_ERRORS) -> str:
    """
    Render a capped digest, one `Row <n>: <column> - <message>` line per error.
    Omitted errors are summarised on a final `...and <N> more errors` line.
    """
    if not errors:
        return ""

    lines = [f"Row {e.row}: {e.column} - {e.message}" for e in errors[:max_errors]]
    if len(errors) > max_errors:
        lines.append(f"...and {len(errors) - max_errors} more errors")
    return "\n".join(lines)
