from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from .types import ErrorKind


@dataclass(frozen=True, slots=True)
class ParseError(Exception):
    """A single cell that could not be coerced into its schema type."""
    kind: ErrorKind
    detail: str


# rate sheets use these for "no value"
_NULL_STRINGS = {"", "null", "na", "n/a"}


def normalize_cell(v: Any) -> Any:
    """Transform pre-parsed cells from CSV/JSONL/XLSX into normalized shape."""
    if v is None:
        return None
    if isinstance(v, str):
        s = v.strip()
        if s.lower() in _NULL_STRINGS:      # all accepted 'NA' synonyms
            return None
        return s
    return v


def strip_cell(v: Any) -> Any:
    """Like `normalize_cell`, but only `""` counts as empty: `"N/A"` stays as written."""
    if isinstance(v, str):
        s = v.strip()
        return s if s else None
    return v


def _to_text(v: Any) -> str | None:
    if v is None:
        return None
    if isinstance(v, bool):
        return str(v).lower()
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v).strip()


def cell_to_text(v: Any) -> str | None:
    """
    Stringify a cell for text fields.

    Spreadsheet readers hand back numbers for numeric-looking cells: a dial
    code `44` may arrive as `44` or `44.0`, both become `"44"`.
    """
    return _to_text(normalize_cell(v))


def parse_optional_text(v: Any) -> str | None:
    """Assign optional text, `None` when the cell is empty."""
    return cell_to_text(v)


def parse_verbatim_text(v: Any) -> str | None:
    """
    Assign text exactly as typed (trimmed), `None` only for an empty cell.
    For cells whose own parser must see placeholders like `"N/A"` to reject them.
    """
    return _to_text(strip_cell(v))


def parse_optional_int(v: Any, *, field: str) -> int | None:
    """Parse integers, `None` when empty. Raise on non-integers like `"12.3"`."""
    v = normalize_cell(v)
    if v is None:
        return None
    if isinstance(v, bool):
        raise ParseError(ErrorKind.invalid_format, f"{field}: invalid int value {v!r}")
    if isinstance(v, float):
        if v.is_integer():
            return int(v)
        raise ParseError(ErrorKind.invalid_format, f"{field}: invalid int value {v!r}")
    try:
        # "12.3" or "1e-4" should fail, not be sneakily coerced to `int`
        if isinstance(v, str) and (("." in v) or ("e" in v.lower())):
            raise ValueError(v)
        return int(v)
    except ValueError:
        raise ParseError(ErrorKind.invalid_format, f"{field}: invalid int value {v!r}")


def parse_optional_date(v: Any, *, field: str) -> date | None:
    """
    Parse `YYYY-MM-DD` (or an ISO timestamp, whose date part is kept).
    XLSX readers may already hand back `date`/`datetime` objects.
    """
    v = normalize_cell(v)
    if v is None:
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if not isinstance(v, str):
        raise ParseError(ErrorKind.invalid_format, f"{field}: invalid date value {v!r}")
    try:
        if len(v) > 10:
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        return date.fromisoformat(v)
    except ValueError:
        raise ParseError(ErrorKind.invalid_format, f"{field}: invalid date (expected YYYY-MM-DD): {v!r}")
